from __future__ import annotations

import io
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console

import spm_audit.utils.console as console_module
from spm_audit.utils.console import (
    SPM_AUDIT_THEME,
    colorize_update_type,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
    styled_label,
)


@pytest.fixture
def output() -> Generator[io.StringIO, None, None]:
    """Route the shared console into a StringIO buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, theme=SPM_AUDIT_THEME, no_color=True, width=120)

    with patch.object(console_module, "_console", console):
        yield buffer


@pytest.mark.unit
class TestStatusMessages:
    """Tests for print_* helpers."""

    def test_prefixes(self, output: io.StringIO) -> None:
        """Test each helper uses its prefix."""
        print_success("done")
        print_error("failed")
        print_warning("careful")
        print_info("note")

        lines = output.getvalue().splitlines()
        assert lines == ["[OK] done", "[ERROR] failed", "[WARNING] careful", "note"]

    def test_markup_not_interpreted(self, output: io.StringIO) -> None:
        """Test brackets in messages are printed literally."""
        print_error("bad [red]value[/red]")

        assert "[red]value[/red]" in output.getvalue()


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table."""

    def test_renders_headers_and_rows(self, output: io.StringIO) -> None:
        """Test headers come from the first row and values are rendered."""
        print_table(
            [{"Package": "swift-nio", "Current": "2.0.0"}],
            title="Deps",
        )

        text = output.getvalue()
        assert "Deps" in text
        assert "Package" in text
        assert "swift-nio" in text
        assert "2.0.0" in text

    def test_explicit_header_order(self, output: io.StringIO) -> None:
        """Test headers select and order columns."""
        print_table([{"A": "1", "B": "2"}], headers=["B"])

        text = output.getvalue()
        assert "B" in text
        assert "1" not in text

    def test_empty_data_prints_nothing(self, output: io.StringIO) -> None:
        """Test an empty list renders nothing."""
        print_table([])

        assert output.getvalue() == ""


@pytest.mark.unit
class TestConfirm:
    """Tests for confirm prompt."""

    @pytest.mark.parametrize(
        "answer,default,expected",
        [
            ("y", False, True),
            ("yes", False, True),
            ("n", True, False),
            ("", True, True),
            ("", False, False),
            ("maybe", True, True),
        ],
    )
    def test_answers(
        self, output: io.StringIO, answer: str, default: bool, expected: bool
    ) -> None:
        """Test answers map to booleans with the default as fallback."""
        with patch("builtins.input", return_value=answer):
            assert confirm("Proceed?", default=default) is expected

    def test_eof_is_no(self, output: io.StringIO) -> None:
        """Test EOF on stdin declines."""
        with patch("builtins.input", side_effect=EOFError):
            assert confirm("Proceed?", default=True) is False


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for console singleton management."""

    def test_singleton(self) -> None:
        """Test the same console is returned until reconfigured."""
        first = get_raw_console()
        assert get_raw_console() is first

        reconfigure_console()
        assert get_raw_console() is not first

    def test_no_color_respected(self) -> None:
        """Test NO_COLOR disables color on a fresh console."""
        reconfigure_console()
        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            console = get_raw_console()

        assert console.no_color is True


@pytest.mark.unit
class TestColorizeUpdateType:
    """Tests for colorize_update_type."""

    @pytest.mark.parametrize(
        "update_type,color",
        [("major", "red"), ("minor", "yellow"), ("patch", "green")],
    )
    def test_known_types(self, update_type: str, color: str) -> None:
        """Test known change types get a color."""
        assert colorize_update_type(update_type) == f"[{color}]{update_type}[/{color}]"

    def test_unknown_type_plain(self) -> None:
        """Test unknown labels are returned unchanged."""
        assert colorize_update_type("same") == "same"


@pytest.mark.unit
class TestStyledLabel:
    """Tests for styled_label."""

    def test_wraps_in_theme_style(self) -> None:
        """Test the label is wrapped in the named style."""
        assert styled_label("OK", "audit.ok") == "[audit.ok]OK[/audit.ok]"

    def test_theme_defines_audit_styles(self) -> None:
        """Test every audit outcome style exists in the theme."""
        for name in ("audit.ok", "audit.outdated", "audit.none", "audit.failed"):
            assert name in SPM_AUDIT_THEME.styles
