"""
Errors raised by spm-audit.

Everything the tool raises on purpose derives from :class:`SPMAuditError`.
Each error carries a short human message plus a ``details`` mapping of
context (file, repository, HTTP status, ...) that is appended when the
error is rendered and logged at debug level by the CLI.

Which errors stop a run:

- :class:`FileOperationError` and :class:`ConfigError` abort the command.
- :class:`ParseError` only skips the offending manifest.
- :class:`NetworkError` / :class:`GitHubError` only mark one dependency
  as failed.
- :class:`UpdateError` aborts ``update`` before any file is written.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def _present(**context: Any) -> Dict[str, Any]:
    """Keep only the context values that were actually supplied."""
    return {key: value for key, value in context.items() if value is not None}


class SPMAuditError(Exception):
    """Root of the spm-audit error hierarchy.

    Args:
        message: What went wrong, phrased for the user.
        details: Extra context shown after the message.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class ParseError(SPMAuditError):
    """A ``Package.swift`` or ``Package.resolved`` could not be understood."""

    __slots__ = ("file_path",)

    def __init__(self, message: str, *, file_path: Optional[str] = None) -> None:
        super().__init__(message, _present(file=file_path))
        self.file_path = file_path


class NetworkError(SPMAuditError):
    """A request to a remote host failed or returned an unusable answer.

    Args:
        message: Error description.
        url: Address that was requested.
        status_code: HTTP status, when a response arrived at all.
    """

    __slots__ = ("url", "status_code")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, _present(url=url, status_code=status_code))
        self.url = url
        self.status_code = status_code


class GitHubError(NetworkError):
    """The GitHub releases API answered with something other than releases.

    ``repository`` is the ``owner/repo`` slug the request was made for.
    """

    __slots__ = ("repository",)

    def __init__(
        self,
        message: str,
        *,
        repository: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, url=url, status_code=status_code)
        self.repository = repository
        if repository is not None:
            self.details["repository"] = repository


class FileOperationError(SPMAuditError):
    """Reading, writing, backing up or scanning a path failed.

    Args:
        message: Error description.
        file_path: Path involved.
        operation: One of ``read``, ``write``, ``backup`` or ``scan``.
        original_error: Underlying ``OSError``, if there was one.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            _present(
                path=file_path,
                operation=operation,
                cause=str(original_error) if original_error else None,
            ),
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(SPMAuditError):
    """The ``[spm-audit]`` settings could not be loaded or validated."""

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(config=config_path, option=option))
        self.config_path = config_path
        self.option = option


class UpdateError(SPMAuditError):
    """A pinned version could not be rewritten in its manifest."""

    __slots__ = ("package_name", "file_path")

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(package=package_name, file=file_path))
        self.package_name = package_name
        self.file_path = file_path
