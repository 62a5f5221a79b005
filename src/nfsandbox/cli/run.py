# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""nfsandbox run — run a command in a fresh sandbox, then delete it."""

from __future__ import annotations

import asyncio
import sys

import click

from nfsandbox._defaults import SandboxDefaults
from nfsandbox._sandbox import run_sandbox


class _StreamWriter:
    """Forward output chunks to stdout or stderr until the reader goes away.

    A closed pipe (e.g. `nfsandbox run ... | head`) only stops forwarding.
    The command keeps running to its exit so the sandbox is still deleted.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self.closed = False

    def __call__(self, data: bytes) -> None:
        if self.closed:
            return
        stream = click.get_binary_stream(self._name)
        try:
            stream.write(data)
            stream.flush()
        except BrokenPipeError:
            self.closed = True


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option("--image", default=None, help="Container image (default: ubuntu:22.04).")
@click.option("--plan", default=None, help="Deployment plan (default: nf-compute-200).")
@click.option(
    "--mount-path",
    default=None,
    help="Where the volume is mounted (default: /workspace).",
)
@click.option(
    "--volume-size",
    "volume_size_mb",
    type=click.IntRange(min=1),
    default=None,
    help="Volume size in MB (default: 10240).",
)
@click.option("--shell", default=None, help="Shell used to run COMMAND (default: 'bash -c').")
@click.option(
    "--poll-interval",
    "poll_interval_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between readiness checks (default: 1).",
)
@click.option(
    "--stream/--no-stream",
    default=True,
    help="Print output as it arrives instead of after the command exits.",
)
@click.option(
    "--cleanup-on-error",
    is_flag=True,
    default=False,
    help="Delete the sandbox if any step fails. Off by default.",
)
def run(
    command: tuple[str, ...],
    image: str | None,
    plan: str | None,
    mount_path: str | None,
    volume_size_mb: int | None,
    shell: str | None,
    poll_interval_seconds: float | None,
    stream: bool,
    cleanup_on_error: bool,
) -> None:
    """Run COMMAND in a disposable sandbox.

    COMMAND is joined with spaces and handed to the shell, so quoting works
    the same way as with ssh. Without COMMAND a greeting is echoed.

    Requires NORTHFLANK_TOKEN and NORTHFLANK_PROJECT_ID.

    Examples:

        nfsandbox run

        nfsandbox run uname -a

        nfsandbox run "ls -la /workspace | wc -l"

        nfsandbox run --image python:3.12-slim python -c "'print(42)'"
    """
    defaults = SandboxDefaults().with_overrides(
        container_image=image,
        deployment_plan=plan,
        mount_path=mount_path,
        volume_size_mb=volume_size_mb,
        shell=shell,
        poll_interval_seconds=poll_interval_seconds,
    )

    try:
        outcome = asyncio.run(
            run_sandbox(
                " ".join(command) or None,
                defaults=defaults,
                on_stdout=_StreamWriter("stdout") if stream else None,
                on_stderr=_StreamWriter("stderr") if stream else None,
                cleanup_on_error=cleanup_on_error,
            )
        )
    except KeyboardInterrupt:
        sys.exit(130)

    if not stream:
        try:
            click.echo(outcome.result.stdout, nl=False)
            click.echo(outcome.result.stderr, nl=False, err=True)
        except BrokenPipeError:
            pass  # Piped to head, sandbox is already gone
    sys.exit(outcome.returncode)
