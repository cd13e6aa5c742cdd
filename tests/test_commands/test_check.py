from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from spm_audit.cli import cli
from spm_audit.core import AuditReport
from spm_audit.exceptions import FileOperationError
from spm_audit.models import (
    AuditResult,
    DependencyRecord,
    ReleaseInfo,
    RequirementKind,
)


def _record(name: str, version: str = "1.0.0") -> DependencyRecord:
    return DependencyRecord(
        name=name,
        source_url=f"https://github.com/org/{name}",
        pinned_version=version,
        origin_path="/work/App/Package.swift",
        requirement_kind=RequirementKind.EXACT,
    )


def _report() -> AuditReport:
    return AuditReport(
        results=[
            AuditResult.update_available(_record("alpha"), "1.0.0", "1.2.0"),
            AuditResult.up_to_date(_record("beta", "2.0.0"), "2.0.0"),
            AuditResult.no_releases(_record("gamma")),
            AuditResult.error(_record("delta"), "API error (status 403)"),
        ],
        scanned_files=1,
    )


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.delenv("SPM_AUDIT_CONFIG", raising=False)
    return CliRunner()


def _patch_audit(report: AuditReport):
    return patch(
        "spm_audit.commands.check.run_audit",
        new=AsyncMock(return_value=report),
    )


@pytest.mark.unit
class TestCheckCommand:
    """Tests for the check command."""

    def test_table_output(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test the table lists every result and the update count."""
        with _patch_audit(_report()):
            result = runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 0
        for name in ("alpha", "beta", "gamma", "delta"):
            assert name in result.output
        assert "OUTDATED" in result.output
        assert "1 dependency check(s) failed" in result.output
        assert "1 update(s) available" in result.output

    def test_simple_output(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test simple format prints one labelled line per result."""
        with _patch_audit(_report()):
            result = runner.invoke(cli, ["check", "-f", "simple", str(tmp_path)])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert any(line.startswith("[OUTDATED] alpha") and "1.2.0" in line for line in lines)
        assert any(line.startswith("[NO RELEASES] gamma") for line in lines)
        assert any(
            line.startswith("[ERROR] delta") and "API error (status 403)" in line
            for line in lines
        )

    def test_json_output(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test JSON format emits only a parseable array."""
        with _patch_audit(_report()):
            result = runner.invoke(cli, ["check", "--format", "json", str(tmp_path)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [item["name"] for item in data] == ["alpha", "beta", "gamma", "delta"]
        assert data[0]["latest"] == "1.2.0"
        assert data[3]["error"] == "API error (status 403)"

    def test_outdated_only(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test --outdated-only hides everything without an update."""
        with _patch_audit(_report()):
            result = runner.invoke(
                cli, ["check", "--outdated-only", "-f", "json", str(tmp_path)]
            )

        assert [item["name"] for item in json.loads(result.stdout)] == ["alpha"]

    def test_all_up_to_date(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a clean audit reports success."""
        report = AuditReport(results=[AuditResult.up_to_date(_record("beta"), "1.0.0")])

        with _patch_audit(report):
            result = runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 0
        assert "All dependencies are up to date!" in result.output

    def test_no_dependencies(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test an empty audit is not an error."""
        with _patch_audit(AuditReport()):
            result = runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 0
        assert "No dependencies found" in result.output

    def test_no_dependencies_json(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test an empty audit in JSON is an empty array."""
        with _patch_audit(AuditReport()):
            result = runner.invoke(cli, ["check", "-f", "json", str(tmp_path)])

        assert json.loads(result.stdout) == []

    def test_fail_on_updates(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test --fail-on-updates exits 1 when something is outdated."""
        with _patch_audit(_report()):
            result = runner.invoke(cli, ["check", "--fail-on-updates", str(tmp_path)])

        assert result.exit_code == 1

    def test_fail_on_updates_clean(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test --fail-on-updates exits 0 when nothing is outdated."""
        report = AuditReport(results=[AuditResult.up_to_date(_record("beta"), "1.0.0")])

        with _patch_audit(report):
            result = runner.invoke(cli, ["check", "--fail-on-updates", str(tmp_path)])

        assert result.exit_code == 0

    def test_audit_failure(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a run-level failure prints an error and exits 1."""
        failing = AsyncMock(
            side_effect=FileOperationError("Not a directory: x", operation="scan")
        )

        with patch("spm_audit.commands.check.run_audit", new=failing):
            result = runner.invoke(cli, ["check", str(tmp_path)])

        assert result.exit_code == 1
        assert "Not a directory" in result.output

    def test_flags_forwarded(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test --all and --max-concurrency reach the audit."""
        audit = AsyncMock(return_value=AuditReport())

        with patch("spm_audit.commands.check.run_audit", new=audit):
            runner.invoke(
                cli, ["check", "--all", "--max-concurrency", "4", str(tmp_path)]
            )

        _, kwargs = audit.call_args
        assert kwargs == {"include_transitive": True, "max_concurrency": 4}

    def test_invalid_max_concurrency(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a concurrency below one is a usage error."""
        result = runner.invoke(cli, ["check", "--max-concurrency", "0", str(tmp_path)])

        assert result.exit_code == 2

    def test_missing_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a nonexistent directory is a usage error."""
        result = runner.invoke(cli, ["check", str(tmp_path / "missing")])

        assert result.exit_code == 2


@pytest.mark.unit
class TestCheckEndToEnd:
    """Tests running check against a real tree with GitHub mocked out."""

    def test_real_tree(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test manifests are scanned and results rendered."""
        (tmp_path / "Package.swift").write_text(
            '.package(url: "https://github.com/apple/swift-log", exact: "1.4.0"),\n',
            encoding="utf-8",
        )
        releases = AsyncMock(return_value=[ReleaseInfo(tag="v1.5.0")])

        with patch(
            "spm_audit.core.release_fetcher.ReleaseFetcher.fetch_releases",
            new=releases,
        ), patch("spm_audit.commands.default_credential_provider") as provider:
            provider.return_value.get_token.return_value = None
            result = runner.invoke(cli, ["check", "-f", "json", str(tmp_path)])

        assert result.exit_code == 0, result.output
        releases.assert_awaited_once_with("apple", "swift-log")
        data = json.loads(result.stdout)
        assert data[0]["name"] == "swift-log"
        assert data[0]["status"] == "update_available"
        assert data[0]["latest"] == "1.5.0"
