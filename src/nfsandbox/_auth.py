# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Credential resolution for the Northflank API.

Both values come from the environment:
1. NORTHFLANK_TOKEN -> Authorization: Bearer header
2. NORTHFLANK_PROJECT_ID -> project every request is scoped to

The token is checked first, so a shell with neither variable reports the
missing token.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from nfsandbox._defaults import PROJECT_ID_ENV_VAR, TOKEN_ENV_VAR
from nfsandbox.exceptions import NFSandboxConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """Resolved API token and project ID."""

    token: str = field(repr=False)
    project_id: str

    @property
    def headers(self) -> dict[str, str]:
        """HTTP headers that authenticate a request."""
        return {"Authorization": f"Bearer {self.token}"}


def resolve_credentials() -> Credentials:
    """Resolve credentials from environment variables.

    Returns:
        Credentials with the token and project ID

    Raises:
        NFSandboxConfigError: If NORTHFLANK_TOKEN or NORTHFLANK_PROJECT_ID
            is missing or empty
    """
    token = _require_env(TOKEN_ENV_VAR)
    project_id = _require_env(PROJECT_ID_ENV_VAR)
    logger.debug("Using credentials for project %s", project_id)
    return Credentials(token=token, project_id=project_id)


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise NFSandboxConfigError(f"Missing {name} environment variable", variable=name)
    return value
