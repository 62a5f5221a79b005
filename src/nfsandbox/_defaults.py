# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

DEFAULT_BASE_URL: str = "https://api.northflank.com"
DEFAULT_DEPLOYMENT_PLAN: str = "nf-compute-200"
DEFAULT_CONTAINER_IMAGE: str = "ubuntu:22.04"

# Sizes are in megabytes, as the platform API expects
DEFAULT_EPHEMERAL_STORAGE_MB: int = 2048
DEFAULT_VOLUME_SIZE_MB: int = 10240
DEFAULT_VOLUME_MOUNT_PATH: str = "/workspace"
DEFAULT_VOLUME_ACCESS_MODE: str = "ReadWriteMany"
DEFAULT_VOLUME_STORAGE_CLASS: str = "ssd"

# Services are created stopped and scaled up once storage is attached
DEFAULT_INITIAL_INSTANCES: int = 0
DEFAULT_BOOT_INSTANCES: int = 1

DEFAULT_SHELL: str = "bash -c"
DEFAULT_COMMAND: str = "echo 'Hello from the sandbox!'"

# Fixed delay between readiness checks. There is no backoff and no overall timeout.
DEFAULT_POLL_INTERVAL_SECONDS: float = 1.0

# Timeout for individual HTTP requests (seconds), not for the readiness loop
DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 300.0

SANDBOX_ID_PREFIX: str = "sandbox"
VOLUME_NAME_PREFIX: str = "data"

TOKEN_ENV_VAR: str = "NORTHFLANK_TOKEN"
PROJECT_ID_ENV_VAR: str = "NORTHFLANK_PROJECT_ID"
BASE_URL_ENV_VAR: str = "NORTHFLANK_API_URL"


@dataclass(frozen=True)
class SandboxDefaults:
    """Immutable configuration defaults for sandbox runs.

    All fields have sensible defaults. Override only what you need.

    Example:
        ```python
        defaults = SandboxDefaults(
            container_image="python:3.12-slim",
            volume_size_mb=20480,
            mount_path="/data",
        )
        ```
    """

    base_url: str | None = None
    deployment_plan: str = DEFAULT_DEPLOYMENT_PLAN
    container_image: str = DEFAULT_CONTAINER_IMAGE
    ephemeral_storage_mb: int = DEFAULT_EPHEMERAL_STORAGE_MB
    volume_size_mb: int = DEFAULT_VOLUME_SIZE_MB
    mount_path: str = DEFAULT_VOLUME_MOUNT_PATH
    volume_access_mode: str = DEFAULT_VOLUME_ACCESS_MODE
    volume_storage_class: str = DEFAULT_VOLUME_STORAGE_CLASS
    instances: int = DEFAULT_BOOT_INSTANCES
    shell: str = DEFAULT_SHELL
    command: str = DEFAULT_COMMAND
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    def with_overrides(self, **kwargs: Any) -> SandboxDefaults:
        """Create new defaults with some values overridden.

        Keys whose value is None are ignored, so CLI options that were not
        given fall through to the current values.
        """
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})
