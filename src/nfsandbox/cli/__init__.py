# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""nfsandbox CLI — run commands in disposable Northflank sandboxes.

The functions in this package are intended to be called via the CLI,
not from Python code. No backwards compatibility guarantees are made
for Python calling patterns.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import click

from nfsandbox._env import apply_dotenv
from nfsandbox.cli.delete import delete
from nfsandbox.cli.run import run
from nfsandbox.exceptions import NFSandboxError

_LOG_FORMAT = "%(message)s"


class _NFSandboxCLI(click.Group):
    """Click group with top-level NFSandboxError handling.

    SDK errors (missing credentials, API failures, etc.) are caught and
    printed as clean "Error: <message>" output instead of raw tracebacks.
    """

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except NFSandboxError as exc:
            raise click.ClickException(str(exc)) from None


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send nfsandbox progress logs to stderr."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    package_logger = logging.getLogger("nfsandbox")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


@click.group(cls=_NFSandboxCLI)
@click.version_option(package_name="nfsandbox-runner")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Load variables from a .env file. Variables already set in the environment win.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug logs.")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only show warnings and errors.")
def cli(env_file: str | None, verbose: bool, quiet: bool) -> None:
    """nfsandbox CLI."""
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")
    _configure_logging(verbose, quiet)
    if env_file is not None:
        apply_dotenv(env_file)


cli.add_command(run, "run")
cli.add_command(delete, "delete")
