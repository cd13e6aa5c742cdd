"""Configuration file loader for spm-audit.

Handles discovery, loading, parsing, and validation of configuration files.
Settings live under a ``[spm-audit]`` table in either ``spm-audit.toml`` or
``.spm-audit.toml``.

Discovery order:

1. Explicit path from ``--config`` or ``SPM_AUDIT_CONFIG``
2. ``spm-audit.toml`` in current directory
3. ``.spm-audit.toml`` in current directory

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``spm-audit.toml``)::

    [spm-audit]
    include_transitive = true
    max_concurrency = 8
    timeout = 15
    use_gh_cli = false
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from spm_audit.exceptions import ConfigError
from spm_audit.utils.logger import get_logger
from spm_audit.constants import (
    CONFIG_FILE_NAMES,
    CONFIG_SECTION,
    DEFAULT_INCLUDE_TRANSITIVE,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT,
    DEFAULT_USE_GH_CLI,
)

logger = get_logger("config")

_BOOL_OPTIONS = ("include_transitive", "use_gh_cli")
_POSITIVE_INT_OPTIONS = ("max_concurrency", "timeout")


@dataclass
class AuditConfig:
    """Parsed and validated spm-audit configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        include_transitive: Audit lockfile pins the project does not
            declare itself.
        max_concurrency: Upper bound on concurrent GitHub requests, or
            ``None`` for no limit.
        timeout: Per-request timeout in seconds.
        use_gh_cli: Fall back to ``gh auth token`` when ``GITHUB_TOKEN`` is
            unset.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_transitive: bool = DEFAULT_INCLUDE_TRANSITIVE
    max_concurrency: Optional[int] = DEFAULT_MAX_CONCURRENCY
    timeout: int = DEFAULT_TIMEOUT
    use_gh_cli: bool = DEFAULT_USE_GH_CLI

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "include_transitive": self.include_transitive,
            "max_concurrency": self.max_concurrency,
            "timeout": self.timeout,
            "use_gh_cli": self.use_gh_cli,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = cwd / name
        if candidate.is_file():
            logger.debug("Found %s: %s", name, candidate)
            return candidate

    logger.debug("No configuration file found")
    return None


def load_config(config_path: Optional[Path] = None) -> AuditConfig:
    """Load and validate spm-audit configuration.

    Returns config with defaults if no file is found, or if the file has
    no ``[spm-audit]`` table.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return AuditConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"[{CONFIG_SECTION}] must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file has no [%s] table, using defaults", CONFIG_SECTION)
        return AuditConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> AuditConfig:
    """Validate the ``[spm-audit]`` table and build an :class:`AuditConfig`.

    Raises:
        ConfigError: Unknown keys, wrong types, or non-positive integers.
    """
    config = AuditConfig()

    unknown = set(section) - set(_BOOL_OPTIONS) - set(_POSITIVE_INT_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _BOOL_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        if not isinstance(val, bool):
            raise ConfigError(
                f"{option} must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    for option in _POSITIVE_INT_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        # bool is a subclass of int
        if isinstance(val, bool) or not isinstance(val, int):
            raise ConfigError(
                f"{option} must be an integer, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        if val < 1:
            raise ConfigError(
                f"{option} must be at least 1, got {val}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    return config
