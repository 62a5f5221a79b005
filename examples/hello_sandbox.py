"""Run one command in a throwaway sandbox.

This example demonstrates:
- Resolving credentials from the environment
- Overriding sandbox defaults
- Streaming output while the command runs

Requires NORTHFLANK_TOKEN and NORTHFLANK_PROJECT_ID.
"""

import asyncio
import logging
import sys

from nfsandbox import SandboxDefaults, run_sandbox


def print_chunk(data: bytes) -> None:
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    defaults = SandboxDefaults(
        container_image="ubuntu:22.04",
        mount_path="/workspace",
    )

    run = await run_sandbox(
        "echo 'Hello from the sandbox!' && df -h /workspace",
        defaults=defaults,
        on_stdout=print_chunk,
        cleanup_on_error=True,
    )
    print(f"{run.sandbox_id} exited with {run.returncode}")


if __name__ == "__main__":
    asyncio.run(main())
