"""
Diagnostic logging for spm-audit.

Modules obtain a logger with :func:`get_logger` and never configure
handlers themselves. The CLI calls :func:`setup_logging` once, after
parsing ``-v``/``-vv``, which installs a single stderr handler on the
``spm_audit`` logger. The root logger is left alone so that programs
importing spm-audit as a library keep their own logging setup.

Verbosity maps to levels as follows::

    (none)  WARNING   only problems, e.g. skipped manifests
    -v      INFO      scan and audit progress
    -vv     DEBUG     HTTP requests, config values, timestamps
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from spm_audit.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_NAMESPACE = "spm_audit"

_config_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when stderr is a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if color is None or not self._should_use_color():
            return super().format(record)

        # Other handlers share the record; color a copy.
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)

    @staticmethod
    def _should_use_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        isatty = getattr(sys.stderr, "isatty", None)
        try:
            return bool(isatty and isatty())
        except (OSError, ValueError):
            return False


def level_for_verbosity(verbose: int) -> int:
    """Translate the count of ``-v`` flags into a logging level."""
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Install the spm-audit stderr handler, replacing any previous one.

    Args:
        level: Minimum level to emit.
        verbose: Use the timestamped format that includes logger names.
        stream: Destination; ``sys.stderr`` when omitted.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )
    )

    with _config_lock:
        package_logger = logging.getLogger(_NAMESPACE)
        package_logger.handlers.clear()
        package_logger.addHandler(handler)
        package_logger.setLevel(level)
        package_logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``spm_audit`` namespace.

    ``"scanner"`` and ``"spm_audit.scanner"`` name the same logger.
    """
    if not name or name == _NAMESPACE:
        qualified = _NAMESPACE
    elif name.startswith(_NAMESPACE + "."):
        qualified = name
    else:
        qualified = f"{_NAMESPACE}.{name}"

    logger = logging.getLogger(qualified)
    parent = logger.parent
    if not logger.handlers and not (parent and parent.handlers):
        # Stay quiet until setup_logging runs.
        logger.addHandler(logging.NullHandler())
    return logger


def disable_logging() -> None:
    """Undo :func:`setup_logging`.

    The stderr handler is replaced by a ``NullHandler`` and records flow
    to the root logger again, as they did before configuration.
    """
    with _config_lock:
        package_logger = logging.getLogger(_NAMESPACE)
        package_logger.handlers.clear()
        package_logger.addHandler(logging.NullHandler())
        package_logger.setLevel(logging.NOTSET)
        package_logger.propagate = True
