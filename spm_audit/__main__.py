"""Allow ``python -m spm_audit`` as an alias for the ``spm-audit`` script."""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not be imported.

    Usually a missing dependency such as ``httpx`` in a broken install.
    """
    try:
        from spm_audit.__version__ import __version__ as version
    except ImportError:
        version = "<unknown>"

    lines = [
        "spm-audit CLI could not be loaded.",
        f"Python version   : {sys.version}",
        f"spm-audit version: {version}",
        f"ImportError: {exc}",
    ]
    sys.stderr.write("\n".join(lines) + "\n")


def main() -> int:
    # The CLI pulls in click, rich and httpx; import it only when run.
    try:
        from spm_audit.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
