"""
Utility helpers for spm-audit.

This package provides reusable utilities used across spm-audit, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client and GitHub credential lookup
- Version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from spm_audit.utils.filesystem import (
    create_timestamped_backup,
    find_manifest_files,
    is_build_path,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from spm_audit.utils.logger import (
    get_logger,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from spm_audit.utils.console import (
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

# ---------------------------------------------------------------------------
# Network utilities
# ---------------------------------------------------------------------------

from spm_audit.utils.http import HTTPClient
from spm_audit.utils.credentials import (
    ChainedCredentialProvider,
    CredentialProvider,
    EnvironmentCredentialProvider,
    GhCliCredentialProvider,
    default_credential_provider,
)

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from spm_audit.utils.version_utils import (
    get_update_type,
    is_newer,
    is_valid_version,
    normalize_version,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_info",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    "styled_label",
    # Logging
    "get_logger",
    "setup_logging",
    "level_for_verbosity",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "is_build_path",
    "find_manifest_files",
    "create_timestamped_backup",
    # Network
    "HTTPClient",
    "CredentialProvider",
    "EnvironmentCredentialProvider",
    "GhCliCredentialProvider",
    "ChainedCredentialProvider",
    "default_credential_provider",
    # Version utilities
    "get_update_type",
    "is_newer",
    "is_valid_version",
    "normalize_version",
]
