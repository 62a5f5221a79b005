"""Shared fixtures for integration tests."""

import pytest

from nfsandbox import SandboxDefaults


@pytest.fixture(scope="module")
def sandbox_defaults():
    """Module-scoped defaults for creating test sandboxes"""
    return SandboxDefaults(
        container_image="ubuntu:22.04",
        volume_size_mb=1024,
    )
