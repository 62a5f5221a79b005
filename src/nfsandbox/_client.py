# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Async client for the Northflank platform API.

Covers only the calls a sandbox run needs: create, scale, get and delete a
deployment service, create a volume, and open an exec session. Every call
raises on an HTTP error status.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

import httpx

from nfsandbox._auth import Credentials
from nfsandbox._defaults import (
    BASE_URL_ENV_VAR,
    DEFAULT_BASE_URL,
    DEFAULT_INITIAL_INSTANCES,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SHELL,
    SandboxDefaults,
)
from nfsandbox._exec import ExecSession, build_exec_command, build_exec_url
from nfsandbox.exceptions import (
    NFSandboxAuthenticationError,
    NFSandboxError,
    NorthflankAPIError,
    SandboxNotFoundError,
    SandboxTimeoutError,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the platform's error message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("message"):
            return str(payload["message"])
    return response.reason_phrase


def _translate_http_error(
    response: httpx.Response,
    *,
    sandbox_id: str | None = None,
    operation: str = "operation",
) -> NFSandboxError:
    """Translate an HTTP error response to the appropriate nfsandbox exception.

    Args:
        response: The error response
        sandbox_id: Optional sandbox ID for context in error messages
        operation: Description of the operation that failed

    Returns:
        An appropriate nfsandbox exception
    """
    code = response.status_code
    details = _error_message(response)

    if code == httpx.codes.NOT_FOUND:
        return SandboxNotFoundError(
            f"Sandbox '{sandbox_id}' not found" if sandbox_id else details,
            sandbox_id=sandbox_id,
        )
    elif code == httpx.codes.UNAUTHORIZED:
        return NFSandboxAuthenticationError(f"Authentication failed: {details}")
    elif code == httpx.codes.FORBIDDEN:
        return NFSandboxAuthenticationError(f"Permission denied: {details}")
    else:
        return NorthflankAPIError(
            f"{operation} failed ({code}): {details}",
            status_code=code,
            operation=operation,
        )


def deployment_status(service: dict[str, Any]) -> str | None:
    """Return status.deployment.status from a service payload, if present."""
    status = service.get("status")
    if not isinstance(status, dict):
        return None
    deployment = status.get("deployment")
    if not isinstance(deployment, dict):
        return None
    value = deployment.get("status")
    return str(value) if value is not None else None


class NorthflankClient:
    """Northflank API client bound to a single project.

    Example:
        ```python
        async with NorthflankClient(resolve_credentials()) as client:
            service = await client.get_service("sandbox-1a2b3c4d5e6f")
        ```
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        ws_connect: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize the client (no connection is made yet).

        Args:
            credentials: Token and project ID
            base_url: API URL (default: NORTHFLANK_API_URL env or
                https://api.northflank.com)
            timeout_seconds: Timeout for each HTTP request (default: 300s)
            transport: Optional httpx transport, mainly for tests
            ws_connect: Optional WebSocket connect function for exec sessions
        """
        self._credentials = credentials
        self._base_url = (
            base_url or os.environ.get(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL
        ).rstrip("/")
        self._timeout_seconds = timeout_seconds or DEFAULT_REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        self._ws_connect = ws_connect
        self._http: httpx.AsyncClient | None = None

    @property
    def project_id(self) -> str:
        return self._credentials.project_id

    @property
    def base_url(self) -> str:
        return self._base_url

    def __repr__(self) -> str:
        return f"<NorthflankClient project={self.project_id} base_url={self._base_url}>"

    async def __aenter__(self) -> NorthflankClient:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._credentials.headers,
                timeout=httpx.Timeout(self._timeout_seconds),
                transport=self._transport,
            )
        return self._http

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _project_path(self, *parts: str) -> str:
        return "/".join(("/v1/projects", self.project_id, *parts))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
        sandbox_id: str | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the unwrapped `data` object."""
        client = self._ensure_client()
        logger.debug("%s %s", method, path)
        try:
            response = await client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise SandboxTimeoutError(f"{operation} timed out: {e}") from e
        except httpx.TransportError as e:
            raise NorthflankAPIError(f"{operation} failed: {e}", operation=operation) from e

        if response.is_error:
            raise _translate_http_error(response, sandbox_id=sandbox_id, operation=operation)

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise NorthflankAPIError(
                f"{operation} returned invalid JSON",
                status_code=response.status_code,
                operation=operation,
            ) from e
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            return payload["data"]
        return payload if isinstance(payload, dict) else {}

    async def create_deployment_service(
        self, name: str, defaults: SandboxDefaults
    ) -> dict[str, Any]:
        """Create a deployment service with zero instances."""
        body = {
            "name": name,
            "billing": {"deploymentPlan": defaults.deployment_plan},
            "deployment": {
                "instances": DEFAULT_INITIAL_INSTANCES,
                "external": {"imagePath": defaults.container_image},
                "storage": {
                    "ephemeralStorage": {"storageSize": defaults.ephemeral_storage_mb},
                },
            },
        }
        return await self._request(
            "POST",
            self._project_path("services", "deployment"),
            operation="Create service",
            json=body,
        )

    async def create_volume(
        self, name: str, service_id: str, defaults: SandboxDefaults
    ) -> dict[str, Any]:
        """Create a volume and attach it to a service."""
        body = {
            "name": name,
            "mounts": [{"containerMountPath": defaults.mount_path}],
            "spec": {
                "accessMode": defaults.volume_access_mode,
                "storageClassName": defaults.volume_storage_class,
                "storageSize": defaults.volume_size_mb,
            },
            "attachedObjects": [{"id": service_id, "type": "service"}],
        }
        return await self._request(
            "POST",
            self._project_path("volumes"),
            operation="Create volume",
            json=body,
            sandbox_id=service_id,
        )

    async def scale_service(self, service_id: str, instances: int) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._project_path("services", service_id, "scale"),
            operation="Scale service",
            json={"instances": instances},
            sandbox_id=service_id,
        )

    async def get_service(self, service_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            self._project_path("services", service_id),
            operation="Get service",
            sandbox_id=service_id,
        )

    async def delete_service(self, service_id: str) -> dict[str, Any]:
        return await self._request(
            "DELETE",
            self._project_path("services", service_id),
            operation="Delete service",
            sandbox_id=service_id,
        )

    async def exec_service_session(
        self,
        service_id: str,
        command: str,
        *,
        shell: str = DEFAULT_SHELL,
        on_stdout: Callable[[bytes], None] | None = None,
        on_stderr: Callable[[bytes], None] | None = None,
    ) -> ExecSession:
        """Open an exec session running `command` under `shell` in a service.

        The returned session is already connected; call
        wait_for_command_result() to collect the output.
        """
        session = ExecSession(
            build_exec_url(self._base_url, self.project_id, service_id),
            build_exec_command(shell, command),
            headers=self._credentials.headers,
            sandbox_id=service_id,
            timeout_seconds=self._timeout_seconds,
            on_stdout=on_stdout,
            on_stderr=on_stderr,
            connect=self._ws_connect,
        )
        await session.start()
        return session
