# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable

from nfsandbox._auth import Credentials, resolve_credentials
from nfsandbox._client import NorthflankClient, deployment_status
from nfsandbox._defaults import SANDBOX_ID_PREFIX, VOLUME_NAME_PREFIX, SandboxDefaults
from nfsandbox._types import DeploymentStatus, ExecResult, SandboxRun
from nfsandbox.exceptions import SandboxFailedError, SandboxNotFoundError

logger = logging.getLogger(__name__)


def generate_sandbox_id() -> str:
    """Generate a sandbox name from the last group of a random UUID."""
    return f"{SANDBOX_ID_PREFIX}-{str(uuid.uuid4()).split('-')[4]}"


class Sandbox:
    """One disposable sandbox backed by a deployment service.

    Each method is one remote step. They are meant to be called in order:

        sandbox = Sandbox(client)
        await sandbox.create()
        await sandbox.attach_volume()
        await sandbox.boot()
        await sandbox.wait_until_ready()
        result = await sandbox.exec("uname -a")
        await sandbox.delete()

    run_sandbox() does exactly this.
    """

    def __init__(
        self,
        client: NorthflankClient,
        *,
        sandbox_id: str | None = None,
        defaults: SandboxDefaults | None = None,
    ) -> None:
        self._client = client
        self._sandbox_id = sandbox_id or generate_sandbox_id()
        self._defaults = defaults or SandboxDefaults()
        self._status: DeploymentStatus | None = None
        self._created = False
        self._deleted = False

    @property
    def sandbox_id(self) -> str:
        return self._sandbox_id

    @property
    def volume_name(self) -> str:
        return f"{VOLUME_NAME_PREFIX}-{self._sandbox_id}"

    @property
    def status(self) -> DeploymentStatus | None:
        """Last deployment status seen while waiting for readiness."""
        return self._status

    @property
    def created(self) -> bool:
        return self._created

    @property
    def deleted(self) -> bool:
        return self._deleted

    def __repr__(self) -> str:
        if self._deleted:
            status_str = "deleted"
        elif self._status is not None:
            status_str = self._status.value
        elif self._created:
            status_str = "created"
        else:
            status_str = "not_created"
        return f"<Sandbox id={self._sandbox_id} status={status_str}>"

    async def create(self) -> None:
        """Create the backing service, stopped."""
        logger.info("Creating sandbox service: %s", self._sandbox_id)
        await self._client.create_deployment_service(self._sandbox_id, self._defaults)
        self._created = True
        logger.info("Sandbox service created")

    async def attach_volume(self) -> None:
        """Create a volume and attach it to the service."""
        logger.info("Attaching volume %s at %s...", self.volume_name, self._defaults.mount_path)
        await self._client.create_volume(self.volume_name, self._sandbox_id, self._defaults)
        logger.info("Volume attached")

    async def boot(self) -> None:
        """Scale the service up so an instance starts."""
        instances = self._defaults.instances
        noun = "instance" if instances == 1 else "instances"
        logger.info("Scaling sandbox to %d %s...", instances, noun)
        await self._client.scale_service(self._sandbox_id, instances)

    async def wait_until_ready(self) -> None:
        """Poll the service until its deployment completes.

        Polls at a fixed interval with no timeout.

        Raises:
            SandboxFailedError: If the deployment reports FAILED
        """
        logger.info("Waiting for sandbox to be ready...")
        while True:
            service = await self._client.get_service(self._sandbox_id)
            raw_status = deployment_status(service)
            self._status = DeploymentStatus.from_api(raw_status)

            if self._status == DeploymentStatus.COMPLETED:
                break
            if self._status == DeploymentStatus.FAILED:
                raise SandboxFailedError("Sandbox failed to start")

            logger.info("  Status: %s", raw_status or DeploymentStatus.PENDING)
            await asyncio.sleep(self._defaults.poll_interval_seconds)
        logger.info("Sandbox is ready")

    async def exec(
        self,
        command: str | None = None,
        *,
        on_stdout: Callable[[bytes], None] | None = None,
        on_stderr: Callable[[bytes], None] | None = None,
        check: bool = False,
    ) -> ExecResult:
        """Run a shell command in the sandbox and collect its output.

        Args:
            command: Command string handed to the configured shell
                (default: the configured command)
            on_stdout: Called with each stdout chunk as it arrives
            on_stderr: Called with each stderr chunk as it arrives
            check: Raise SandboxExecutionError on a non-zero exit code
        """
        command = command or self._defaults.command
        logger.info("Executing command: %s", command)
        session = await self._client.exec_service_session(
            self._sandbox_id,
            command,
            shell=self._defaults.shell,
            on_stdout=on_stdout,
            on_stderr=on_stderr,
        )
        result = await session.wait_for_command_result(check=check)
        logger.info("Command finished with exit code %d", result.returncode)
        logger.debug("Output: %s", result.stdout)
        return result

    async def delete(self, *, missing_ok: bool = False) -> bool:
        """Delete the backing service.

        Returns:
            True if deleted, False if missing_ok=True and it did not exist
        """
        logger.info("Deleting sandbox service %s...", self._sandbox_id)
        try:
            await self._client.delete_service(self._sandbox_id)
        except SandboxNotFoundError:
            if not missing_ok:
                raise
            logger.info("Sandbox %s not found, nothing to delete", self._sandbox_id)
            return False
        self._deleted = True
        logger.info("Sandbox deleted. Done.")
        return True


def _make_client(
    client: NorthflankClient | None,
    credentials: Credentials | None,
    defaults: SandboxDefaults,
) -> tuple[NorthflankClient, bool]:
    """Return (client, owned). Owned clients are closed by the caller."""
    if client is not None:
        return client, False
    credentials = credentials or resolve_credentials()
    logger.info("Initializing API client...")
    client = NorthflankClient(
        credentials,
        base_url=defaults.base_url,
        timeout_seconds=defaults.request_timeout_seconds,
    )
    logger.info("API client initialized")
    return client, True


async def run_sandbox(
    command: str | None = None,
    *,
    defaults: SandboxDefaults | None = None,
    credentials: Credentials | None = None,
    client: NorthflankClient | None = None,
    on_stdout: Callable[[bytes], None] | None = None,
    on_stderr: Callable[[bytes], None] | None = None,
    cleanup_on_error: bool = False,
) -> SandboxRun:
    """Create a sandbox, run one command in it, and delete it.

    Any failure propagates. By default nothing is rolled back, so a failed
    run can leave a service behind (see `nfsandbox delete`).

    Args:
        command: Shell command to run (default: defaults.command)
        defaults: Sandbox configuration
        credentials: API credentials (default: resolved from the environment)
        client: Pre-built client; when given, credentials are ignored and
            the client is left open
        on_stdout: Called with each stdout chunk as it arrives
        on_stderr: Called with each stderr chunk as it arrives
        cleanup_on_error: Try to delete the service if a later step fails
            or the run is cancelled

    Returns:
        SandboxRun with the sandbox ID and the command's ExecResult

    Raises:
        NFSandboxConfigError: If credentials are not configured
        SandboxFailedError: If the sandbox failed to start
        NFSandboxError: For any other platform failure
    """
    defaults = defaults or SandboxDefaults()
    client, owned = _make_client(client, credentials, defaults)
    try:
        sandbox = Sandbox(client, defaults=defaults)
        try:
            await sandbox.create()
            await sandbox.attach_volume()
            await sandbox.boot()
            await sandbox.wait_until_ready()
            result = await sandbox.exec(command, on_stdout=on_stdout, on_stderr=on_stderr)
        except BaseException:
            # Includes the CancelledError asyncio.run raises on Ctrl-C
            if sandbox.created:
                if cleanup_on_error:
                    await _cleanup_after_error(sandbox)
                else:
                    logger.warning(
                        "Sandbox %s was left behind. Remove it with: nfsandbox delete %s",
                        sandbox.sandbox_id,
                        sandbox.sandbox_id,
                    )
            raise
        await sandbox.delete()
        return SandboxRun(sandbox_id=sandbox.sandbox_id, result=result)
    finally:
        if owned:
            await client.aclose()


async def _cleanup_after_error(sandbox: Sandbox) -> None:
    """Best-effort delete. Errors are logged so the original one propagates."""
    try:
        await sandbox.delete(missing_ok=True)
    except Exception:
        logger.exception("Failed to delete sandbox %s after error", sandbox.sandbox_id)


async def delete_sandbox(
    sandbox_id: str,
    *,
    credentials: Credentials | None = None,
    client: NorthflankClient | None = None,
    missing_ok: bool = False,
) -> bool:
    """Delete a sandbox service by ID.

    Useful for cleaning up after a run that failed part way.

    Returns:
        True if deleted, False if missing_ok=True and it did not exist

    Raises:
        SandboxNotFoundError: If the service doesn't exist and missing_ok=False
    """
    defaults = SandboxDefaults()
    client, owned = _make_client(client, credentials, defaults)
    try:
        return await Sandbox(client, sandbox_id=sandbox_id, defaults=defaults).delete(
            missing_ok=missing_ok
        )
    finally:
        if owned:
            await client.aclose()
