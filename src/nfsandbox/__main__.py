# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Entry point for `python -m nfsandbox` and `nfsandbox` console script."""

from __future__ import annotations


def main() -> None:
    """Run the nfsandbox CLI."""
    from nfsandbox.cli import cli

    cli()


if __name__ == "__main__":
    main()
