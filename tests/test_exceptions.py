from __future__ import annotations

import pytest

from spm_audit.exceptions import (
    ConfigError,
    FileOperationError,
    GitHubError,
    NetworkError,
    ParseError,
    SPMAuditError,
    UpdateError,
)


@pytest.mark.unit
class TestSPMAuditError:
    """Tests for the base error rendering."""

    def test_message_only(self) -> None:
        """Test an error without context renders as its message."""
        assert str(SPMAuditError("boom")) == "boom"

    def test_details_appended(self) -> None:
        """Test context is appended in insertion order."""
        error = SPMAuditError("boom", {"file": "Package.swift", "line": 3})

        assert str(error) == "boom (file=Package.swift, line=3)"
        assert error.details == {"file": "Package.swift", "line": 3}

    def test_repr(self) -> None:
        """Test repr names the class and message."""
        assert repr(ConfigError("bad")) == "ConfigError('bad', details={})"


@pytest.mark.unit
class TestSubclasses:
    """Tests for error context attributes."""

    def test_hierarchy(self) -> None:
        """Test every error derives from SPMAuditError."""
        for cls in (ConfigError, FileOperationError, NetworkError, ParseError, UpdateError):
            assert issubclass(cls, SPMAuditError)
        assert issubclass(GitHubError, NetworkError)

    def test_missing_context_omitted(self) -> None:
        """Test unset keyword context never appears in details."""
        assert ParseError("bad manifest").details == {}
        assert NetworkError("down", url="https://x").details == {"url": "https://x"}

    def test_github_error_context(self) -> None:
        """Test repository and status are exposed and rendered."""
        error = GitHubError(
            "API error (status 403)",
            repository="apple/swift-nio",
            url="https://api.github.com/repos/apple/swift-nio/releases",
            status_code=403,
        )

        assert error.repository == "apple/swift-nio"
        assert error.status_code == 403
        assert "repository=apple/swift-nio" in str(error)

    def test_file_operation_cause(self) -> None:
        """Test the underlying OSError is kept and summarized."""
        cause = PermissionError("denied")
        error = FileOperationError(
            "Failed", file_path="/p", operation="write", original_error=cause
        )

        assert error.original_error is cause
        assert error.details == {"path": "/p", "operation": "write", "cause": "denied"}

    def test_update_error_context(self) -> None:
        """Test package and file are recorded."""
        error = UpdateError("no match", package_name="swift-log", file_path="/p")

        assert (error.package_name, error.file_path) == ("swift-log", "/p")
