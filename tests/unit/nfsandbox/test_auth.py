# SPDX-FileCopyrightText: 2025 The nfsandbox-runner Authors
# SPDX-License-Identifier: Apache-2.0
# SPDX-PackageName: nfsandbox-runner

"""Unit tests for nfsandbox._auth module."""

from __future__ import annotations

import pytest

from nfsandbox._auth import Credentials, resolve_credentials
from nfsandbox.exceptions import NFSandboxConfigError


class TestCredentials:
    """Tests for Credentials dataclass."""

    def test_headers_use_bearer_token(self) -> None:
        """Test headers carry the token as a bearer credential."""
        creds = Credentials(token="abc", project_id="proj")
        assert creds.headers == {"Authorization": "Bearer abc"}

    def test_repr_hides_token(self) -> None:
        """Test the token never shows up in repr."""
        creds = Credentials(token="super-secret", project_id="proj")
        assert "super-secret" not in repr(creds)
        assert "proj" in repr(creds)

    def test_credentials_are_frozen(self) -> None:
        """Test Credentials is immutable."""
        creds = Credentials(token="abc", project_id="proj")
        with pytest.raises(AttributeError):
            creds.token = "other"  # type: ignore[misc]


class TestResolveCredentials:
    """Tests for resolve_credentials function."""

    def test_resolves_from_env(self, mock_token: str, mock_project_id: str) -> None:
        """Test both values are read from the environment."""
        creds = resolve_credentials()

        assert creds.token == mock_token
        assert creds.project_id == mock_project_id

    def test_missing_token(self, mock_project_id: str) -> None:
        """Test a missing token names NORTHFLANK_TOKEN."""
        with pytest.raises(NFSandboxConfigError) as exc_info:
            resolve_credentials()

        assert str(exc_info.value) == "Missing NORTHFLANK_TOKEN environment variable"
        assert exc_info.value.variable == "NORTHFLANK_TOKEN"

    def test_missing_project_id(self, mock_token: str) -> None:
        """Test a missing project ID names NORTHFLANK_PROJECT_ID."""
        with pytest.raises(NFSandboxConfigError) as exc_info:
            resolve_credentials()

        assert str(exc_info.value) == "Missing NORTHFLANK_PROJECT_ID environment variable"
        assert exc_info.value.variable == "NORTHFLANK_PROJECT_ID"

    def test_token_checked_first(self) -> None:
        """Test the token is reported when both are missing."""
        with pytest.raises(NFSandboxConfigError, match="NORTHFLANK_TOKEN"):
            resolve_credentials()

    def test_empty_value_counts_as_missing(
        self, monkeypatch: pytest.MonkeyPatch, mock_project_id: str
    ) -> None:
        """Test an empty token is treated like an unset one."""
        monkeypatch.setenv("NORTHFLANK_TOKEN", "")

        with pytest.raises(NFSandboxConfigError, match="NORTHFLANK_TOKEN"):
            resolve_credentials()
