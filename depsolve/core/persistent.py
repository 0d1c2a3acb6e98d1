"""
Persistent collections for search states.

Search states are created in bulk while branching and sibling states must
never see each other's changes. The three collections here are immutable
snapshots: every "mutating" call returns a new instance and leaves the
receiver untouched, and adding something already present returns the
receiver itself.

Sharing happens at package granularity: a new snapshot copies the small
top-level index but reuses the per-package tuples of its parent. All
iteration follows insertion order, never hash order, so that a search run
is reproducible.
"""

from __future__ import annotations

from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Tuple,
)

from depsolve.models.constraint import Constraint, ConstraintKey
from depsolve.models.unit_version import UnitKey, UnitVersion


class DependenciesList:
    """Ordered set of pending package names.

    Example::

        >>> deps = DependenciesList().union(["b", "a", "b"])
        >>> list(deps), deps.peek()
        (['b', 'a'], 'b')
    """

    __slots__ = ("_items", "_index")

    def __init__(self, items: Iterable[str] = ()) -> None:
        ordered = tuple(dict.fromkeys(items))
        self._items: Tuple[str, ...] = ordered
        self._index: FrozenSet[str] = frozenset(ordered)

    @classmethod
    def _from_parts(
        cls, items: Tuple[str, ...], index: FrozenSet[str]
    ) -> "DependenciesList":
        new = cls.__new__(cls)
        new._items = items
        new._index = index
        return new

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependenciesList):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"DependenciesList({list(self._items)!r})"

    def push(self, name: str) -> "DependenciesList":
        if name in self._index:
            return self
        return self._from_parts(self._items + (name,), self._index | {name})

    def union(self, names: Iterable[str]) -> "DependenciesList":
        fresh = tuple(n for n in dict.fromkeys(names) if n not in self._index)
        if not fresh:
            return self
        return self._from_parts(self._items + fresh, self._index.union(fresh))

    def remove(self, name: str) -> "DependenciesList":
        if name not in self._index:
            return self
        return self._from_parts(
            tuple(n for n in self._items if n != name), self._index - {name}
        )

    def difference(self, names: Iterable[str]) -> "DependenciesList":
        drop = self._index.intersection(names)
        if not drop:
            return self
        return self._from_parts(
            tuple(n for n in self._items if n not in drop), self._index - drop
        )

    def peek(self) -> Optional[str]:
        """Return the next dependency to branch on, or ``None`` when empty."""
        return self._items[0] if self._items else None


class ConstraintsList:
    """Set of constraints grouped by package name.

    Membership is decided by :attr:`Constraint.key`, which for interned
    constraints is equivalent to identity.
    """

    __slots__ = ("_by_name", "_keys", "_length")

    def __init__(self, constraints: Iterable[Constraint] = ()) -> None:
        self._by_name: Dict[str, Tuple[Constraint, ...]] = {}
        self._keys: FrozenSet[ConstraintKey] = frozenset()
        self._length: int = 0
        merged = self.union(constraints)
        self._by_name = merged._by_name
        self._keys = merged._keys
        self._length = merged._length

    @classmethod
    def _from_parts(
        cls,
        by_name: Dict[str, Tuple[Constraint, ...]],
        keys: FrozenSet[ConstraintKey],
        length: int,
    ) -> "ConstraintsList":
        new = cls.__new__(cls)
        new._by_name = by_name
        new._keys = keys
        new._length = length
        return new

    def __contains__(self, constraint: object) -> bool:
        return isinstance(constraint, Constraint) and constraint.key in self._keys

    def __iter__(self) -> Iterator[Constraint]:
        for group in self._by_name.values():
            yield from group

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstraintsList):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        return f"ConstraintsList({[str(c) for c in self]!r})"

    def push(self, constraint: Constraint) -> "ConstraintsList":
        return self.union((constraint,))

    def union(self, constraints: Iterable[Constraint]) -> "ConstraintsList":
        by_name: Optional[Dict[str, Tuple[Constraint, ...]]] = None
        keys = set()

        for constraint in constraints:
            key = constraint.key
            if key in self._keys or key in keys:
                continue
            if by_name is None:
                by_name = dict(self._by_name)
            by_name[constraint.name] = by_name.get(constraint.name, ()) + (constraint,)
            keys.add(key)

        if by_name is None:
            return self
        return self._from_parts(by_name, self._keys.union(keys), self._length + len(keys))

    def for_package(self, name: str) -> Tuple[Constraint, ...]:
        """Return the constraints naming ``name`` in insertion order."""
        return self._by_name.get(name, ())

    def exact_for(self, name: str) -> Tuple[Constraint, ...]:
        return tuple(c for c in self._by_name.get(name, ()) if c.exact)

    def package_names(self) -> Tuple[str, ...]:
        return tuple(self._by_name)


class ChoicesList:
    """Ordered set of chosen unit versions.

    A snapshot may transiently hold two versions of one package (after a
    conflicting exact pin was propagated); :meth:`SearchState.is_consistent
    <depsolve.core.state.SearchState.is_consistent>` rejects such states.
    """

    __slots__ = ("_items", "_keys", "_by_name")

    def __init__(self, unit_versions: Iterable[UnitVersion] = ()) -> None:
        self._items: Tuple[UnitVersion, ...] = ()
        self._keys: FrozenSet[UnitKey] = frozenset()
        self._by_name: Dict[str, Tuple[UnitVersion, ...]] = {}
        merged = self.union(unit_versions)
        self._items = merged._items
        self._keys = merged._keys
        self._by_name = merged._by_name

    @classmethod
    def _from_parts(
        cls,
        items: Tuple[UnitVersion, ...],
        keys: FrozenSet[UnitKey],
        by_name: Dict[str, Tuple[UnitVersion, ...]],
    ) -> "ChoicesList":
        new = cls.__new__(cls)
        new._items = items
        new._keys = keys
        new._by_name = by_name
        return new

    def __contains__(self, unit_version: object) -> bool:
        return isinstance(unit_version, UnitVersion) and unit_version.key in self._keys

    def __iter__(self) -> Iterator[UnitVersion]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChoicesList):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        return f"ChoicesList({[str(uv) for uv in self._items]!r})"

    def push(self, unit_version: UnitVersion) -> "ChoicesList":
        return self.union((unit_version,))

    def union(self, unit_versions: Iterable[UnitVersion]) -> "ChoicesList":
        fresh = []
        keys = set()
        for unit_version in unit_versions:
            key = unit_version.key
            if key in self._keys or key in keys:
                continue
            keys.add(key)
            fresh.append(unit_version)

        if not fresh:
            return self

        by_name = dict(self._by_name)
        for unit_version in fresh:
            by_name[unit_version.name] = by_name.get(unit_version.name, ()) + (
                unit_version,
            )
        return self._from_parts(self._items + tuple(fresh), self._keys.union(keys), by_name)

    def without_package(self, name: str) -> "ChoicesList":
        if name not in self._by_name:
            return self
        by_name = dict(self._by_name)
        removed = by_name.pop(name)
        removed_keys = {uv.key for uv in removed}
        return self._from_parts(
            tuple(uv for uv in self._items if uv.name != name),
            self._keys - removed_keys,
            by_name,
        )

    def has_package(self, name: str) -> bool:
        return name in self._by_name

    def for_package(self, name: str) -> Tuple[UnitVersion, ...]:
        return self._by_name.get(name, ())

    def package_names(self) -> Tuple[str, ...]:
        return tuple(self._by_name)

    def by_name(self) -> Mapping[str, Tuple[UnitVersion, ...]]:
        return dict(self._by_name)
