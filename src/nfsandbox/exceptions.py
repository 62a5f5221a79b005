# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Exception hierarchy for sandbox operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nfsandbox._types import ExecResult


class NFSandboxError(Exception):
    """Base exception for all nfsandbox errors."""


class NFSandboxConfigError(NFSandboxError):
    """Raised when required configuration is missing."""

    def __init__(self, message: str, *, variable: str | None = None) -> None:
        super().__init__(message)
        self.variable = variable


class NFSandboxAuthenticationError(NFSandboxError):
    """Raised when the platform rejects the supplied credentials."""


class NorthflankAPIError(NFSandboxError):
    """Raised when a platform API call returns an error.

    status_code is None when the request never got a response
    (connection refused, DNS failure, etc).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.operation = operation


class SandboxError(NFSandboxError):
    """Base exception for sandbox operations."""


class SandboxNotFoundError(SandboxError):
    """Raised when the sandbox service does not exist."""

    def __init__(self, message: str, *, sandbox_id: str | None = None) -> None:
        super().__init__(message)
        self.sandbox_id = sandbox_id


class SandboxFailedError(SandboxError):
    """Raised when a sandbox fails to start."""


class SandboxTimeoutError(SandboxError):
    """Raised when a request to the platform times out."""


class SandboxExecutionError(SandboxError):
    """Raised when command execution fails inside a sandbox.

    Access execution details via exec_result
    """

    def __init__(
        self,
        message: str,
        *,
        exec_result: ExecResult | None = None,
    ) -> None:
        super().__init__(message)
        self.exec_result = exec_result
