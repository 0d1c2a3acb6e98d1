"""
Version comparison utilities for depsolve.

The resolver never orders version strings itself; it consults a
*comparator* object. Anything implementing :class:`VersionComparator`
can be injected into a :class:`~depsolve.core.catalog.Catalog`, which
keeps the engine testable with fake orderings. The default
implementation uses PEP 440 parsing from :mod:`packaging`, which also
accepts ordinary SemVer strings such as ``1.2.3`` or ``1.0.0-rc1``.
"""

from __future__ import annotations

from functools import cmp_to_key, lru_cache
from typing import Iterable, List, Protocol, runtime_checkable

from packaging.version import InvalidVersion, Version

from depsolve.exceptions import InvalidVersionError


@runtime_checkable
class VersionComparator(Protocol):
    """Total order over version strings."""

    def compare(self, left: str, right: str) -> int:
        """Return a negative, zero or positive number like ``cmp``."""
        ...

    def validate(self, version: str) -> str:
        """Return ``version`` unchanged or raise :class:`InvalidVersionError`."""
        ...


@lru_cache(maxsize=4096)
def _parse(value: str) -> Version:
    try:
        return Version(value)
    except InvalidVersion as exc:
        raise InvalidVersionError(
            f"Invalid version string: {value!r}", version=value
        ) from exc


class PackagingVersionComparator:
    """Comparator backed by :class:`packaging.version.Version`.

    Example::

        >>> cmp = PackagingVersionComparator()
        >>> cmp.compare("1.10.0", "1.9.0") > 0
        True
        >>> less_than(cmp, "1.0.0-rc1", "1.0.0")
        True
    """

    def compare(self, left: str, right: str) -> int:
        a, b = _parse(left), _parse(right)
        if a < b:
            return -1
        if a > b:
            return 1
        return 0

    def validate(self, version: str) -> str:
        _parse(version)
        return version

    def sort_key(self, version: str) -> Version:
        """Return a key usable with :func:`sorted`."""
        return _parse(version)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


#: Shared default comparator instance.
DEFAULT_COMPARATOR = PackagingVersionComparator()


def less_than(comparator: VersionComparator, left: str, right: str) -> bool:
    """Return True if ``left`` orders strictly before ``right``."""
    return comparator.compare(left, right) < 0


def at_least(comparator: VersionComparator, version: str, floor: str) -> bool:
    """Return True if ``version`` is greater than or equal to ``floor``."""
    return comparator.compare(version, floor) >= 0


def sort_versions(
    comparator: VersionComparator,
    versions: Iterable[str],
    *,
    newest_first: bool = False,
) -> List[str]:
    """Return ``versions`` sorted under ``comparator``.

    Uses a plain ``sort_key`` when the comparator provides one and falls
    back to :func:`functools.cmp_to_key` otherwise. Sorting is stable, so
    equal versions keep their input order.
    """
    key = getattr(comparator, "sort_key", None)
    if key is None:
        key = cmp_to_key(comparator.compare)
    return sorted(versions, key=key, reverse=newest_first)
