# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cached_property
from typing import Any

logger = logging.getLogger(__name__)


class DeploymentStatus(StrEnum):
    """Deployment status values reported for a service."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_api(cls, value: Any) -> DeploymentStatus:
        """Convert a raw API status string to DeploymentStatus."""
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(str(value).upper())
        except ValueError:
            logger.warning("Unknown deployment status %r, treating as UNKNOWN", value)
            return cls.UNKNOWN


@dataclass
class ExecResult:
    """Result from a completed exec session.

    Attributes:
        stdout_bytes: Raw stdout bytes from the command
        stderr_bytes: Raw stderr bytes from the command
        returncode: Exit code from the command
        command: The command that was executed (for debugging)
        status: Completion status reported by the platform, if any
        message: Completion message reported by the platform, if any

    Properties:
        stdout: Lazily decoded stdout as UTF-8 string
        stderr: Lazily decoded stderr as UTF-8 string
    """

    stdout_bytes: bytes
    stderr_bytes: bytes
    returncode: int
    command: list[str] = field(default_factory=list)
    status: str | None = None
    message: str | None = None

    @cached_property
    def stdout(self) -> str:
        """Decode stdout as UTF-8 (lazy, cached)."""
        return self.stdout_bytes.decode("utf-8", errors="replace")

    @cached_property
    def stderr(self) -> str:
        """Decode stderr as UTF-8 (lazy, cached)."""
        return self.stderr_bytes.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class SandboxRun:
    """Outcome of a full sandbox lifecycle run."""

    sandbox_id: str
    result: ExecResult

    @property
    def returncode(self) -> int:
        return self.result.returncode
