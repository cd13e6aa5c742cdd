from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Generator

import pytest

from spm_audit.config import (
    AuditConfig,
    _parse_section,
    _read_toml,
    discover_config_file,
    load_config,
)
from spm_audit.exceptions import ConfigError


@pytest.fixture
def in_tmp_cwd(tmp_path: Path) -> Generator[Path, None, None]:
    """Run the test with *tmp_path* as the working directory."""
    previous = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(previous)


def _parse(section: Dict[str, Any]) -> AuditConfig:
    return _parse_section(section, config_path="/test/spm-audit.toml")


@pytest.mark.unit
class TestAuditConfig:
    """Tests for AuditConfig dataclass."""

    def test_defaults(self) -> None:
        """Test defaults match the documented behaviour."""
        config = AuditConfig()

        assert config.include_transitive is False
        assert config.max_concurrency is None
        assert config.timeout == 30
        assert config.use_gh_cli is True
        assert config.source_path is None

    def test_to_log_dict_excludes_metadata(self) -> None:
        """Test to_log_dict omits source_path."""
        config = AuditConfig(max_concurrency=4, source_path=Path("/x.toml"))

        assert config.to_log_dict() == {
            "include_transitive": False,
            "max_concurrency": 4,
            "timeout": 30,
            "use_gh_cli": True,
        }


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        """Test an explicit existing path is returned resolved."""
        path = tmp_path / "custom.toml"
        path.write_text("", encoding="utf-8")

        assert discover_config_file(path) == path.resolve()

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        """Test a missing explicit path raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            discover_config_file(tmp_path / "missing.toml")

    def test_finds_file_in_cwd(self, in_tmp_cwd: Path) -> None:
        """Test spm-audit.toml in the working directory is found."""
        (in_tmp_cwd / "spm-audit.toml").write_text("", encoding="utf-8")

        found = discover_config_file()

        assert found is not None
        assert found.resolve() == (in_tmp_cwd / "spm-audit.toml").resolve()

    def test_primary_name_wins(self, in_tmp_cwd: Path) -> None:
        """Test spm-audit.toml takes precedence over the dotfile."""
        (in_tmp_cwd / "spm-audit.toml").write_text("", encoding="utf-8")
        (in_tmp_cwd / ".spm-audit.toml").write_text("", encoding="utf-8")

        assert discover_config_file().name == "spm-audit.toml"

    def test_dotfile(self, in_tmp_cwd: Path) -> None:
        """Test .spm-audit.toml is used when it is the only file."""
        (in_tmp_cwd / ".spm-audit.toml").write_text("", encoding="utf-8")

        assert discover_config_file().name == ".spm-audit.toml"

    def test_none_found(self, in_tmp_cwd: Path) -> None:
        """Test None is returned without any config file."""
        assert discover_config_file() is None


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, in_tmp_cwd: Path) -> None:
        """Test defaults are used when nothing is found."""
        assert load_config() == AuditConfig()

    def test_loads_values(self, tmp_path: Path) -> None:
        """Test values from the table are applied."""
        path = tmp_path / "spm-audit.toml"
        path.write_text(
            "[spm-audit]\n"
            "include_transitive = true\n"
            "max_concurrency = 8\n"
            "timeout = 15\n"
            "use_gh_cli = false\n",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.include_transitive is True
        assert config.max_concurrency == 8
        assert config.timeout == 15
        assert config.use_gh_cli is False
        assert config.source_path == path.resolve()

    def test_missing_table(self, tmp_path: Path) -> None:
        """Test a file without the table yields defaults with a source."""
        path = tmp_path / "spm-audit.toml"
        path.write_text("[other]\nkey = 1\n", encoding="utf-8")

        config = load_config(path)

        assert config.include_transitive is False
        assert config.source_path == path.resolve()

    def test_table_not_a_table(self, tmp_path: Path) -> None:
        """Test a non-table value raises ConfigError."""
        path = tmp_path / "spm-audit.toml"
        path.write_text('spm-audit = "yes"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="must be a table"):
            load_config(path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Test malformed TOML raises ConfigError."""
        path = tmp_path / "spm-audit.toml"
        path.write_text("[spm-audit\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path)


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml."""

    def test_reads_document(self, tmp_path: Path) -> None:
        """Test a valid document is returned as a dict."""
        path = tmp_path / "x.toml"
        path.write_text("[a]\nb = 1\n", encoding="utf-8")

        assert _read_toml(path) == {"a": {"b": 1}}

    def test_unreadable(self, tmp_path: Path) -> None:
        """Test a directory path raises ConfigError."""
        with pytest.raises(ConfigError, match="Cannot read"):
            _read_toml(tmp_path)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_empty(self) -> None:
        """Test an empty table yields defaults."""
        assert _parse({}) == AuditConfig()

    def test_unknown_keys(self) -> None:
        """Test unknown keys are reported by name."""
        with pytest.raises(ConfigError, match="Unknown configuration keys: a, b"):
            _parse({"b": 1, "a": 2})

    @pytest.mark.parametrize("value", ["true", 1, None])
    def test_bool_option_type(self, value: Any) -> None:
        """Test boolean options reject other types."""
        with pytest.raises(ConfigError) as exc_info:
            _parse({"include_transitive": value})

        assert exc_info.value.option == "include_transitive"

    @pytest.mark.parametrize("value", [True, "8", 1.5])
    def test_int_option_type(self, value: Any) -> None:
        """Test integer options reject bools, strings and floats."""
        with pytest.raises(ConfigError, match="must be an integer"):
            _parse({"max_concurrency": value})

    @pytest.mark.parametrize("value", [0, -3])
    def test_int_option_range(self, value: int) -> None:
        """Test integer options must be at least one."""
        with pytest.raises(ConfigError, match="at least 1"):
            _parse({"timeout": value})

    def test_valid_values(self) -> None:
        """Test valid values are applied."""
        config = _parse({"use_gh_cli": False, "max_concurrency": 2})

        assert config.use_gh_cli is False
        assert config.max_concurrency == 2
