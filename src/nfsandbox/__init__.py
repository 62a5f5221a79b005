# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Run a shell command in a disposable Northflank sandbox."""

from nfsandbox._auth import Credentials, resolve_credentials
from nfsandbox._client import NorthflankClient
from nfsandbox._defaults import SandboxDefaults
from nfsandbox._env import load_dotenv
from nfsandbox._exec import ExecSession
from nfsandbox._sandbox import Sandbox, delete_sandbox, generate_sandbox_id, run_sandbox
from nfsandbox._types import DeploymentStatus, ExecResult, SandboxRun
from nfsandbox.exceptions import (
    NFSandboxAuthenticationError,
    NFSandboxConfigError,
    NFSandboxError,
    NorthflankAPIError,
    SandboxError,
    SandboxExecutionError,
    SandboxFailedError,
    SandboxNotFoundError,
    SandboxTimeoutError,
)

__all__ = [
    "Credentials",
    "DeploymentStatus",
    "ExecResult",
    "ExecSession",
    "NFSandboxAuthenticationError",
    "NFSandboxConfigError",
    "NFSandboxError",
    "NorthflankAPIError",
    "NorthflankClient",
    "Sandbox",
    "SandboxDefaults",
    "SandboxError",
    "SandboxExecutionError",
    "SandboxFailedError",
    "SandboxNotFoundError",
    "SandboxRun",
    "SandboxTimeoutError",
    "delete_sandbox",
    "generate_sandbox_id",
    "load_dotenv",
    "resolve_credentials",
    "run_sandbox",
]
