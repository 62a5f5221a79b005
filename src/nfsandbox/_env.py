# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Environment variable utilities."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def load_dotenv(filepath: str = ".env") -> dict[str, str]:
    """Load environment variables from a .env file.

    Args:
        filepath: Path to .env file (default: ".env")

    Returns:
        Dictionary of environment variables from the file. Keys declared
        without a value are dropped.

    Raises:
        FileNotFoundError: If the .env file doesn't exist

    Example:
        env_vars = load_dotenv(".env")
        token = env_vars.get("NORTHFLANK_TOKEN")
    """
    from dotenv import dotenv_values

    if not Path(filepath).is_file():
        raise FileNotFoundError(f"No such env file: {filepath}")
    return {k: v for k, v in dotenv_values(filepath).items() if v is not None}


def apply_dotenv(filepath: str) -> list[str]:
    """Export variables from a .env file into os.environ.

    Variables already present in the environment win over the file.

    Returns:
        Names of the variables that were set.
    """
    applied = []
    for key, value in load_dotenv(filepath).items():
        if key in os.environ:
            logger.debug("Keeping %s from environment, ignoring %s", key, filepath)
            continue
        os.environ[key] = value
        applied.append(key)
    return applied
