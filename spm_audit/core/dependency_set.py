"""De-duplication of dependency records.

The same repository is usually found several times in one tree: declared in
``Package.swift``, pinned in ``Package.resolved``, and again in each Xcode
project that uses it. It is audited once, keyed by its canonical source URL.
The first occurrence in traversal order wins.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Set

from spm_audit.models.dependency import DependencyRecord

__all__ = ["DependencySet", "deduplicate"]


class DependencySet:
    """Ordered collection holding at most one record per source URL.

    Example::

        >>> deps = DependencySet()
        >>> deps.add(record)
        True
        >>> deps.add(record)
        False
        >>> len(deps)
        1
    """

    def __init__(self, records: Iterable[DependencyRecord] = ()) -> None:
        self._seen: Set[str] = set()
        self._records: List[DependencyRecord] = []
        self.update(records)

    def add(self, record: DependencyRecord) -> bool:
        """Add *record* unless its URL is already present.

        Returns:
            ``True`` if the record was added, ``False`` if it was a duplicate.
        """
        if record.source_url in self._seen:
            return False

        self._seen.add(record.source_url)
        self._records.append(record)
        return True

    def update(self, records: Iterable[DependencyRecord]) -> None:
        for record in records:
            self.add(record)

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __iter__(self) -> Iterator[DependencyRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def to_list(self) -> List[DependencyRecord]:
        return list(self._records)


def deduplicate(records: Iterable[DependencyRecord]) -> List[DependencyRecord]:
    """Return one record per distinct ``source_url``, first occurrence wins."""
    return DependencySet(records).to_list()
