"""spm-audit version information.

Single source of truth for the package version, read by the CLI
``--version`` option and the HTTP ``User-Agent``. The value is a plain
``MAJOR.MINOR.PATCH`` string.
"""

__version__ = "1.0.0"
