# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Unit tests for nfsandbox._defaults module."""

from __future__ import annotations

import dataclasses

import pytest

from nfsandbox import SandboxDefaults


class TestSandboxDefaults:
    """Tests for SandboxDefaults dataclass."""

    def test_defaults_have_sensible_values(self) -> None:
        """Test SandboxDefaults matches the platform settings a run uses."""
        defaults = SandboxDefaults()

        assert defaults.base_url is None  # Resolved by the client
        assert defaults.deployment_plan == "nf-compute-200"
        assert defaults.container_image == "ubuntu:22.04"
        assert defaults.ephemeral_storage_mb == 2048
        assert defaults.volume_size_mb == 10240
        assert defaults.mount_path == "/workspace"
        assert defaults.volume_access_mode == "ReadWriteMany"
        assert defaults.volume_storage_class == "ssd"
        assert defaults.instances == 1
        assert defaults.shell == "bash -c"
        assert defaults.command == "echo 'Hello from the sandbox!'"
        assert defaults.poll_interval_seconds == 1.0

    def test_defaults_are_immutable(self) -> None:
        """Test SandboxDefaults is frozen."""
        defaults = SandboxDefaults()

        with pytest.raises(dataclasses.FrozenInstanceError):
            defaults.container_image = "alpine"  # type: ignore[misc]

    def test_with_overrides_creates_new(self) -> None:
        """Test with_overrides creates a new instance."""
        defaults = SandboxDefaults()

        new_defaults = defaults.with_overrides(container_image="python:3.12")

        assert new_defaults.container_image == "python:3.12"
        assert defaults.container_image == "ubuntu:22.04"
        assert new_defaults is not defaults

    def test_with_overrides_ignores_none(self) -> None:
        """Test None values leave the current setting in place."""
        defaults = SandboxDefaults(mount_path="/data")

        new_defaults = defaults.with_overrides(mount_path=None, volume_size_mb=512)

        assert new_defaults.mount_path == "/data"
        assert new_defaults.volume_size_mb == 512

    def test_with_overrides_rejects_unknown_fields(self) -> None:
        """Test a typo in a field name is not silently ignored."""
        with pytest.raises(TypeError):
            SandboxDefaults().with_overrides(imgae="alpine")
