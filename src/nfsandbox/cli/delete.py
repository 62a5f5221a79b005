# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""nfsandbox delete — remove a sandbox left behind by a failed run."""

from __future__ import annotations

import asyncio

import click

from nfsandbox._sandbox import delete_sandbox


@click.command()
@click.argument("sandbox_id")
@click.option(
    "--missing-ok",
    is_flag=True,
    default=False,
    help="Succeed even if the sandbox does not exist.",
)
def delete(sandbox_id: str, missing_ok: bool) -> None:
    """Delete a sandbox service.

    SANDBOX_ID is the name printed when the sandbox was created,
    e.g. sandbox-1a2b3c4d5e6f.
    """
    deleted = asyncio.run(delete_sandbox(sandbox_id, missing_ok=missing_ok))
    if deleted:
        click.echo(f"Deleted {sandbox_id}")
    else:
        click.echo(f"{sandbox_id} not found")
