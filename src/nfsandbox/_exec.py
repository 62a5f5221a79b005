# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Remote command execution over a WebSocket exec session.

Wire format, one JSON object per text frame:

    client -> server   {"command": ["bash", "-c", "..."], "tty": false}
    server -> client   {"type": "stdout", "data": "..."}
                       {"type": "stderr", "data": "..."}
                       {"type": "exit", "exitCode": 0, "status": "Success", "message": ""}
                       {"type": "error", "message": "..."}

Binary frames carry raw stdout bytes.
"""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidStatus

from nfsandbox._types import ExecResult
from nfsandbox.exceptions import (
    NFSandboxAuthenticationError,
    SandboxExecutionError,
    SandboxTimeoutError,
)

logger = logging.getLogger(__name__)

_WS_SCHEMES = {"https": "wss", "http": "ws"}


def build_exec_url(base_url: str, project_id: str, service_id: str) -> str:
    """Build the exec WebSocket URL for a service from the HTTP API base URL."""
    parts = urlsplit(base_url)
    scheme = _WS_SCHEMES.get(parts.scheme, parts.scheme)
    path = f"{parts.path.rstrip('/')}/v1/projects/{project_id}/services/{service_id}/exec"
    return urlunsplit((scheme, parts.netloc, path, "", ""))


def build_exec_command(shell: str, command: str) -> list[str]:
    """Split the shell invocation and append the command string.

    build_exec_command("bash -c", "echo hi") -> ["bash", "-c", "echo hi"]
    """
    if not command:
        raise ValueError("Command cannot be empty")
    return [*shlex.split(shell), command]


class ExecSession:
    """A single command running in a service container.

    Output is buffered and, if callbacks are given, forwarded chunk by chunk
    as it arrives.

    Example:
        ```python
        session = ExecSession(url, ["bash", "-c", "ls /"], headers=headers)
        await session.start()
        result = await session.wait_for_command_result()
        print(result.returncode, result.stdout)
        ```
    """

    def __init__(
        self,
        url: str,
        command: list[str],
        *,
        headers: dict[str, str],
        sandbox_id: str | None = None,
        timeout_seconds: float | None = None,
        on_stdout: Callable[[bytes], None] | None = None,
        on_stderr: Callable[[bytes], None] | None = None,
        connect: Callable[..., Any] | None = None,
    ) -> None:
        self._url = url
        self._command = list(command)
        self._headers = headers
        self._sandbox_id = sandbox_id
        self._timeout_seconds = timeout_seconds
        self._on_stdout = on_stdout
        self._on_stderr = on_stderr
        self._connect = connect or ws_connect
        self._ws: Any = None
        self._stdout: list[bytes] = []
        self._stderr: list[bytes] = []
        self._result: ExecResult | None = None

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def result(self) -> ExecResult | None:
        """The result once the command has finished, otherwise None."""
        return self._result

    def __repr__(self) -> str:
        state = "finished" if self._result else "open" if self._ws else "not_started"
        return f"<ExecSession sandbox={self._sandbox_id} state={state}>"

    async def __aenter__(self) -> ExecSession:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def start(self) -> ExecSession:
        """Connect and send the command. Idempotent."""
        if self._ws is not None:
            return self

        logger.debug("Opening exec session for %s: %s", self._sandbox_id, shlex.join(self._command))
        try:
            self._ws = await self._connect(
                self._url,
                additional_headers=self._headers,
                open_timeout=self._timeout_seconds,
            )
        except InvalidStatus as e:
            raise self._translate_handshake_error(e) from e
        except InvalidHandshake as e:
            raise SandboxExecutionError(f"Exec session handshake failed: {e}") from e
        except TimeoutError as e:
            raise SandboxTimeoutError(
                f"Timed out opening exec session for sandbox {self._sandbox_id}"
            ) from e
        except OSError as e:
            raise SandboxExecutionError(f"Could not open exec session: {e}") from e

        try:
            await self._ws.send(json.dumps({"command": self._command, "tty": False}))
        except ConnectionClosed as e:
            await self.close()
            self._ws = None
            raise SandboxExecutionError(
                f"Exec session for sandbox {self._sandbox_id} closed before the command was sent"
            ) from e
        return self

    async def wait_for_command_result(self, *, check: bool = False) -> ExecResult:
        """Read output until the command exits, then close the session.

        Args:
            check: If True, raise SandboxExecutionError on a non-zero exit code

        Returns:
            ExecResult with the collected output and exit code

        Raises:
            SandboxExecutionError: If the session fails or closes before the
                command reports an exit code
        """
        if self._result is not None:
            return self._check(self._result, check)
        await self.start()

        exit_frame: dict[str, Any] | None = None
        try:
            async for message in self._ws:
                exit_frame = self._handle_message(message)
                if exit_frame is not None:
                    break
        except ConnectionClosed as e:
            raise SandboxExecutionError(
                f"Exec session for sandbox {self._sandbox_id} closed unexpectedly: {e}"
            ) from e
        finally:
            await self.close()

        if exit_frame is None:
            raise SandboxExecutionError(
                f"Exec session for sandbox {self._sandbox_id} ended without an exit code"
            )

        exit_code = exit_frame.get("exitCode")
        if exit_code is None:
            raise SandboxExecutionError(
                f"Exec session for sandbox {self._sandbox_id} ended without an exit code"
            )

        self._result = ExecResult(
            stdout_bytes=b"".join(self._stdout),
            stderr_bytes=b"".join(self._stderr),
            returncode=int(exit_code),
            command=list(self._command),
            status=exit_frame.get("status"),
            message=exit_frame.get("message") or None,
        )
        return self._check(self._result, check)

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    def _check(self, result: ExecResult, check: bool) -> ExecResult:
        if check and result.returncode != 0:
            raise SandboxExecutionError(
                f"Command {shlex.join(result.command)} exited with code {result.returncode}",
                exec_result=result,
            )
        return result

    def _handle_message(self, message: str | bytes) -> dict[str, Any] | None:
        """Process one frame. Returns the exit frame when the command is done."""
        if isinstance(message, bytes):
            self._emit_stdout(message)
            return None

        try:
            frame = json.loads(message)
        except json.JSONDecodeError as e:
            raise SandboxExecutionError(f"Malformed exec frame: {message[:200]!r}") from e
        if not isinstance(frame, dict):
            raise SandboxExecutionError(f"Malformed exec frame: {message[:200]!r}")

        kind = frame.get("type")
        if kind == "stdout":
            self._emit_stdout(str(frame.get("data") or "").encode())
        elif kind == "stderr":
            self._emit_stderr(str(frame.get("data") or "").encode())
        elif kind == "exit":
            return frame
        elif kind == "error":
            raise SandboxExecutionError(
                f"Exec session for sandbox {self._sandbox_id} failed: "
                f"{frame.get('message') or 'unknown error'}"
            )
        else:
            logger.debug("Ignoring exec frame of type %r", kind)
        return None

    def _emit_stdout(self, data: bytes) -> None:
        if not data:
            return
        self._stdout.append(data)
        if self._on_stdout is not None:
            self._on_stdout(data)

    def _emit_stderr(self, data: bytes) -> None:
        if not data:
            return
        self._stderr.append(data)
        if self._on_stderr is not None:
            self._on_stderr(data)

    def _translate_handshake_error(
        self, e: InvalidStatus
    ) -> NFSandboxAuthenticationError | SandboxExecutionError:
        code = e.response.status_code
        if code == 401:
            return NFSandboxAuthenticationError("Authentication failed: exec session rejected")
        if code == 403:
            return NFSandboxAuthenticationError("Permission denied: exec session rejected")
        return SandboxExecutionError(
            f"Exec session for sandbox {self._sandbox_id} rejected with HTTP {code}"
        )
