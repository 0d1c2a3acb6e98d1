"""Catalog of known unit versions and interned constraints.

The catalog is the only owner of :class:`UnitVersion` objects and the
only factory for :class:`Constraint` objects. The resolver depends on
both guarantees:

- every unit version it sees was registered here exactly once, so
  ``(name, version)`` identifies it;
- every constraint was obtained through :meth:`Catalog.get_constraint`,
  so equal constraints are the same object.

A catalog is populated first and sealed before the first resolution.
Sealing validates the exact-pin graph and freezes every unit.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from depsolve.utils.logger import get_logger
from depsolve.models.unit_version import UnitVersion
from depsolve.utils.version_utils import (
    DEFAULT_COMPARATOR,
    VersionComparator,
    less_than,
)
from depsolve.models.constraint import (
    Constraint,
    ConstraintKey,
    parse_version_constraint,
    split_constraint,
)
from depsolve.exceptions import (
    CatalogSealedError,
    ConstraintParseError,
    CyclicExactPinError,
    DuplicateRegistrationError,
)

logger = get_logger("catalog")


class Catalog:
    """Registry of unit versions indexed by package name.

    Args:
        comparator: Version ordering used for latest-version tracking and
            range constraints. Defaults to PEP 440 ordering.

    Example::

        >>> catalog = Catalog()
        >>> a = UnitVersion("a", "1.0.0")
        >>> a.add_dependency("b")
        >>> a.add_constraint(catalog.get_constraint("b", "=1.0.0"))
        >>> catalog.add_unit_version(a)
        >>> catalog.add_unit_version(UnitVersion("b", "1.0.0"))
        >>> catalog.latest_version("b")
        '1.0.0'
    """

    def __init__(self, comparator: Optional[VersionComparator] = None) -> None:
        self.comparator: VersionComparator = comparator or DEFAULT_COMPARATOR

        self._unit_versions: Dict[str, List[UnitVersion]] = {}
        self._by_key: Dict[Tuple[str, str], UnitVersion] = {}
        self._latest_version: Dict[str, str] = {}
        self._constraints: Dict[ConstraintKey, Constraint] = {}
        self._sealed: bool = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_unit_version(self, unit_version: UnitVersion) -> None:
        """Register ``unit_version`` under its package name.

        Raises:
            DuplicateRegistrationError: ``(name, version)`` is already known.
            CatalogSealedError: The catalog is in use by a resolver.
            InvalidVersionError: The comparator rejects the version or ECV.
        """
        if self._sealed:
            raise CatalogSealedError(
                f"Cannot add {unit_version} to a sealed catalog",
                {"package": unit_version.name, "version": unit_version.version},
            )
        if unit_version.key in self._by_key:
            raise DuplicateRegistrationError(
                f"Unit version already registered -- {unit_version}",
                name=unit_version.name,
                version=unit_version.version,
            )

        self.comparator.validate(unit_version.version)
        self.comparator.validate(unit_version.ecv)

        name = unit_version.name
        self._unit_versions.setdefault(name, []).append(unit_version)
        self._by_key[unit_version.key] = unit_version

        latest = self._latest_version.get(name)
        if latest is None or less_than(self.comparator, latest, unit_version.version):
            self._latest_version[name] = unit_version.version

    def get_constraint(self, name: str, version_constraint: str) -> Constraint:
        """Return the interned constraint for ``name`` and ``version_constraint``.

        Args:
            name: Package the constraint applies to.
            version_constraint: ``"=X.Y.Z"`` (exact) or ``"X.Y.Z"`` (floor).

        Returns:
            The same :class:`Constraint` instance for repeated equal calls.

        Raises:
            ConstraintParseError: Empty name or malformed constraint.
            InvalidVersionError: The comparator rejects the version.
        """
        if not name or not name.strip():
            raise ConstraintParseError(
                "Constraint needs a package name", text=version_constraint
            )

        version, exact = parse_version_constraint(version_constraint)
        id_key = (name, version, exact)
        cached = self._constraints.get(id_key)
        if cached is not None:
            return cached

        self.comparator.validate(version)

        constraint = Constraint(name, version, exact, comparator=self.comparator)
        self._constraints[id_key] = constraint
        return constraint

    def parse_constraint(self, text: str) -> Constraint:
        """Return the interned constraint for a ``"name@spec"`` string."""
        name, spec = split_constraint(text)
        return self.get_constraint(name, spec)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def unit_versions(self, name: str) -> Tuple[UnitVersion, ...]:
        """Return every registered version of ``name`` in insertion order."""
        return tuple(self._unit_versions.get(name, ()))

    def get_unit_version(self, name: str, version: str) -> Optional[UnitVersion]:
        return self._by_key.get((name, version))

    def latest_version(self, name: str) -> Optional[str]:
        return self._latest_version.get(name)

    def package_names(self) -> List[str]:
        return sorted(self._unit_versions)

    def __contains__(self, unit_version: object) -> bool:
        if not isinstance(unit_version, UnitVersion):
            return False
        return self._by_key.get(unit_version.key) is unit_version

    def __iter__(self) -> Iterator[UnitVersion]:
        for group in self._unit_versions.values():
            yield from group

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return (
            f"Catalog(packages={len(self._unit_versions)}, "
            f"unit_versions={len(self._by_key)}, sealed={self._sealed})"
        )

    # ------------------------------------------------------------------
    # Validation & sealing
    # ------------------------------------------------------------------

    @property
    def sealed(self) -> bool:
        return self._sealed

    def validate(self) -> None:
        """Reject catalogs whose exact pins form a cycle.

        Edges run from a unit to the witness of each exact constraint it
        places on one of its own dependencies. Pins without a registered
        witness are skipped here and reported during resolution.

        Raises:
            CyclicExactPinError: With the offending cycle.
        """
        done = set()

        for root in self:
            if root.key in done:
                continue

            # Iterative DFS; the stack holds (unit, remaining successors).
            path: List[UnitVersion] = [root]
            on_path = {root.key}
            stack = [(root, iter(self._pinned_successors(root)))]

            while stack:
                unit, successors = stack[-1]
                advanced = False
                for successor in successors:
                    if successor.key in on_path:
                        start = path.index(successor)
                        cycle = [str(u) for u in path[start:]] + [str(successor)]
                        raise CyclicExactPinError(
                            f"Cyclic exact pins involving {successor.name}",
                            cycle=cycle,
                        )
                    if successor.key in done:
                        continue
                    path.append(successor)
                    on_path.add(successor.key)
                    stack.append((successor, iter(self._pinned_successors(successor))))
                    advanced = True
                    break

                if not advanced:
                    stack.pop()
                    path.pop()
                    on_path.discard(unit.key)
                    done.add(unit.key)

    def _pinned_successors(self, unit_version: UnitVersion) -> List[UnitVersion]:
        successors = []
        for constraint in unit_version.exact_constraints():
            if not unit_version.depends_on(constraint.name):
                continue
            witness = constraint.get_satisfying_unit_version(self)
            if witness is not None:
                successors.append(witness)
        return successors

    def seal(self) -> None:
        """Validate the catalog and make it and its units read-only.

        Calling ``seal`` again is a no-op.
        """
        if self._sealed:
            return

        self.validate()
        for unit_version in self:
            unit_version.freeze()
        self._sealed = True

        logger.debug(
            "Sealed catalog with %d unit versions across %d packages",
            len(self._by_key),
            len(self._unit_versions),
        )
