"""
Centralized constants for spm-audit.

This module defines immutable configuration values used across spm-audit,
including GitHub endpoints, manifest file names, HTTP settings, and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final, Optional, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "spm-audit/{version}"

# ---------------------------------------------------------------------------
# GitHub endpoints
# ---------------------------------------------------------------------------

#: Host marker used to locate owner/repo segments in a source URL.
GITHUB_HOST: Final[str] = "github.com"

#: Release list endpoint of the GitHub REST API.
GITHUB_RELEASES_API: Final[str] = "https://api.github.com/repos/{owner}/{repo}/releases"

#: Media type requested from the GitHub REST API.
GITHUB_ACCEPT_HEADER: Final[str] = "application/vnd.github.v3+json"

#: Environment variable holding a GitHub token.
GITHUB_TOKEN_ENV: Final[str] = "GITHUB_TOKEN"

#: External helper invoked when no token is present in the environment.
GH_TOKEN_COMMAND: Final[Sequence[str]] = ("gh", "auth", "token")

#: Seconds to wait for the external token helper.
GH_TOKEN_TIMEOUT: Final[int] = 10

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Default cap on in-flight requests (``None`` = one request per dependency).
DEFAULT_MAX_CONCURRENCY: Final[Optional[int]] = None

# ---------------------------------------------------------------------------
# Manifest discovery
# ---------------------------------------------------------------------------

#: Declaration file scanned for exact pins.
PACKAGE_SWIFT: Final[str] = "Package.swift"

#: Resolved lockfile written by SwiftPM / Xcode.
PACKAGE_RESOLVED: Final[str] = "Package.resolved"

#: Xcode project declaration file, sibling of the workspace lockfile.
PBXPROJ_FILE: Final[str] = "project.pbxproj"

#: Path of the lockfile inside an ``.xcodeproj`` bundle.
XCODE_RESOLVED_SUBPATH: Final[Sequence[str]] = (
    "project.xcworkspace",
    "xcshareddata",
    "swiftpm",
)

#: Build output directory segment that is never scanned.
BUILD_DIR_MARKER: Final[str] = ".build"

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Config file names searched in the current directory, in order.
CONFIG_FILE_NAMES: Final[Sequence[str]] = ("spm-audit.toml", ".spm-audit.toml")

#: TOML table holding spm-audit settings.
CONFIG_SECTION: Final[str] = "spm-audit"

#: Include transitive dependencies from Package.resolved by default.
DEFAULT_INCLUDE_TRANSITIVE: Final[bool] = False

#: Fall back to ``gh auth token`` when ``GITHUB_TOKEN`` is unset.
DEFAULT_USE_GH_CLI: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifests.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
