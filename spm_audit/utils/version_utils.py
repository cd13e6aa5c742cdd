"""
Version comparison utilities for spm-audit.

Release tags on GitHub and pins in Swift manifests are plain dot-separated
numbers (``1.2.0``, ``v5.8.1``). This module normalizes tags and compares
them numerically, component by component. It is intentionally not a full
SemVer implementation: pre-release and build metadata are not parsed.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version, parse

_VALID_VERSION_RE = re.compile(r"^[0-9]+\.[0-9]+(\.[0-9]+)?$")


def normalize_version(version: str) -> str:
    """Strip ``v`` characters and surrounding whitespace from a tag.

    Every ``v`` is removed, not only a leading one, so ``"v1.0.0"`` and
    ``" v1.0.0 "`` both become ``"1.0.0"``.

    Examples:
        >>> normalize_version("v1.0.0")
        '1.0.0'
        >>> normalize_version(" v1.0.0 ")
        '1.0.0'
    """
    return version.replace("v", "").strip()


def _numeric_components(version: str) -> List[int]:
    """Return the non-negative integer segments of a dotted version.

    Segments that are not plain integers are dropped, so ``"1.0.0-beta"``
    yields ``[1, 0]``.
    """
    components: List[int] = []
    for segment in version.split("."):
        if segment.isascii() and segment.isdigit():
            components.append(int(segment))
    return components


def is_newer(latest: str, current: str) -> bool:
    """Return ``True`` if *latest* is strictly greater than *current*.

    Both versions are split on ``.``, non-numeric segments are discarded,
    and the shorter sequence is right-padded with zeros before a
    left-to-right comparison.

    Examples:
        >>> is_newer("1.1.0", "1.0.0")
        True
        >>> is_newer("0.9.0", "1.0.0")
        False
        >>> is_newer("2.3", "2.3.0")
        False
    """
    latest_parts = _numeric_components(latest)
    current_parts = _numeric_components(current)

    # Pad to same length (e.g. 2.3 becomes [2, 3, 0])
    length = max(len(latest_parts), len(current_parts))
    latest_parts += [0] * (length - len(latest_parts))
    current_parts += [0] * (length - len(current_parts))

    for new, old in zip(latest_parts, current_parts):
        if new > old:
            return True
        if new < old:
            return False

    return False


def is_valid_version(version: str) -> bool:
    """Return ``True`` for ``MAJOR.MINOR`` or ``MAJOR.MINOR.PATCH`` strings."""
    return bool(_VALID_VERSION_RE.fullmatch(version))


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Pinned version, or ``None`` if unknown.
        target_version: Version to compare against.

    Returns:
        One of ``"new"``, ``"same"``, ``"downgrade"``, ``"major"``,
        ``"minor"``, ``"patch"``, ``"update"`` or ``"unknown"``.

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type("1.2.3", "1.2.3")
        'same'
    """
    if target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    try:
        current = _parse_version(current_version)
        target = _parse_version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _parse_version(value: str) -> Version:
    """Parse a (normalized) version string into a PEP 440 Version object."""
    parsed = parse(normalize_version(value))
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)
    return parsed


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_major, current_minor, current_patch = _normalize_release(current)
    target_major, target_minor, target_patch = _normalize_release(target)

    if current_major != target_major:
        return "major"

    if current_minor != target_minor:
        return "minor"

    if current_patch != target_patch:
        return "patch"

    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch
