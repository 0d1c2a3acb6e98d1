"""
UnitVersion data model for depsolve.

A *unit version* is one concrete release of one package as known to the
catalog: its version, its earliest compatible version (ECV), the names of
the packages it depends on and the constraints it places on them.

Dependencies and constraints are registered one at a time after
construction. Once the owning catalog is sealed the unit is frozen and
read-only for the rest of its life.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from depsolve.models.constraint import Constraint, ConstraintKey
from depsolve.exceptions import (
    CatalogSealedError,
    CyclicExactPinError,
    DuplicateRegistrationError,
    MissingVersionError,
)
from depsolve.constants import NAME_VERSION_SEPARATOR

if TYPE_CHECKING:
    from depsolve.core.catalog import Catalog

UnitKey = Tuple[str, str]


class UnitVersion:
    """One version of one package.

    Args:
        name: Package name.
        version: Version of this release.
        ecv: Earliest version this release stays compatible with. Defaults
            to ``version`` (no backward compatibility promised).

    Example::

        >>> a = UnitVersion("a", "1.0.0")
        >>> a.add_dependency("b")
        >>> str(a)
        'a@1.0.0'
    """

    __slots__ = (
        "name",
        "version",
        "ecv",
        "_dependencies",
        "_dependency_names",
        "_constraints",
        "_constraint_keys",
        "_frozen",
        "_closure_cache",
    )

    def __init__(self, name: str, version: str, ecv: Optional[str] = None) -> None:
        self.name: str = name
        self.version: str = version
        self.ecv: str = ecv if ecv is not None else version

        self._dependencies: List[str] = []
        self._dependency_names: Set[str] = set()
        self._constraints: List[Constraint] = []
        self._constraint_keys: Set[ConstraintKey] = set()
        self._frozen: bool = False
        self._closure_cache: Optional[Tuple["Catalog", Tuple[Constraint, ...]]] = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def key(self) -> UnitKey:
        return (self.name, self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnitVersion):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.name}{NAME_VERSION_SEPARATOR}{self.version}"

    def __repr__(self) -> str:
        return (
            f"UnitVersion(name={self.name!r}, version={self.version!r}, "
            f"ecv={self.ecv!r})"
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @property
    def dependencies(self) -> Tuple[str, ...]:
        """Declared dependency names in registration order."""
        return tuple(self._dependencies)

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        """Declared constraints in registration order."""
        return tuple(self._constraints)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Refuse further registration calls."""
        self._frozen = True

    def add_dependency(self, name: str) -> None:
        """Declare that this unit requires package ``name``.

        Raises:
            DuplicateRegistrationError: If ``name`` was already declared.
            CatalogSealedError: If the unit is frozen.
        """
        self._check_mutable()
        if name in self._dependency_names:
            raise DuplicateRegistrationError(
                f"Dependency already exists -- {name}",
                name=self.name,
                version=self.version,
                item=name,
            )
        self._dependencies.append(name)
        self._dependency_names.add(name)

    def add_constraint(self, constraint: Constraint) -> None:
        """Declare a constraint this unit imposes.

        Raises:
            DuplicateRegistrationError: If an equal constraint was already added.
            CatalogSealedError: If the unit is frozen.
        """
        self._check_mutable()
        if constraint.key in self._constraint_keys:
            raise DuplicateRegistrationError(
                f"Constraint already exists -- {constraint}",
                name=self.name,
                version=self.version,
                item=str(constraint),
            )
        self._constraints.append(constraint)
        self._constraint_keys.add(constraint.key)

    def depends_on(self, name: str) -> bool:
        return name in self._dependency_names

    def _check_mutable(self) -> None:
        if self._frozen:
            raise CatalogSealedError(
                f"Unit version {self} is frozen",
                {"package": self.name, "version": self.version},
            )

    # ------------------------------------------------------------------
    # Constraint views
    # ------------------------------------------------------------------

    def exact_constraints(self) -> Tuple[Constraint, ...]:
        return tuple(c for c in self._constraints if c.exact)

    def loose_constraints(self) -> Tuple[Constraint, ...]:
        return tuple(c for c in self._constraints if not c.exact)

    # ------------------------------------------------------------------
    # Exact closure
    # ------------------------------------------------------------------

    def exact_transitive_constraints(self, catalog: "Catalog") -> Tuple[Constraint, ...]:
        """Return the exact pins reachable from this unit.

        Starts from this unit's exact constraints that name one of its own
        dependencies and follows, depth first, the same kind of pins on
        each pinned unit. Constraints are returned in discovery order
        without duplicates.

        Raises:
            MissingVersionError: A pin names a version that is not registered.
            CyclicExactPinError: Pins lead back to a unit already on the path.
        """
        cached = self._closure_cache
        if cached is not None and cached[0] is catalog:
            return cached[1]

        closure = self._exact_closure(catalog, (), {})
        if self._frozen:
            self._closure_cache = (catalog, closure)
        return closure

    def _exact_closure(
        self,
        catalog: "Catalog",
        path: Tuple["UnitVersion", ...],
        finished: Dict[UnitKey, Tuple[Constraint, ...]],
    ) -> Tuple[Constraint, ...]:
        # A finished closure cannot reach the current path, so reuse it.
        done = finished.get(self.key)
        if done is not None:
            return done
        cached = self._closure_cache
        if cached is not None and cached[0] is catalog:
            return cached[1]

        if self in path:
            start = path.index(self)
            cycle = [str(u) for u in path[start:]] + [str(self)]
            raise CyclicExactPinError(
                f"Cyclic exact pins starting at {self}", cycle=cycle
            )

        direct = [
            c for c in self._constraints if c.exact and c.name in self._dependency_names
        ]
        result: List[Constraint] = list(direct)
        seen: Set[ConstraintKey] = {c.key for c in direct}

        for constraint in direct:
            witness = exact_witness(constraint, catalog)
            for nested in witness._exact_closure(catalog, path + (self,), finished):
                if nested.key not in seen:
                    seen.add(nested.key)
                    result.append(nested)

        closure = tuple(result)
        finished[self.key] = closure
        return closure

    def exact_transitive_dependency_versions(
        self, catalog: "Catalog"
    ) -> Tuple["UnitVersion", ...]:
        """Return the units pinned by :meth:`exact_transitive_constraints`."""
        return tuple(
            exact_witness(c, catalog) for c in self.exact_transitive_constraints(catalog)
        )

    def inexact_transitive_dependencies(self, catalog: "Catalog") -> Tuple[str, ...]:
        """Return dependency names left open after applying the exact closure.

        This is this unit's own dependencies plus those of every unit in
        its exact closure, minus the packages the closure already pins.
        """
        closure = self.exact_transitive_constraints(catalog)
        pinned = {c.name for c in closure}

        names: Dict[str, None] = dict.fromkeys(self._dependencies)
        for constraint in closure:
            for name in exact_witness(constraint, catalog).dependencies:
                names.setdefault(name)

        return tuple(name for name in names if name not in pinned)


def exact_witness(constraint: Constraint, catalog: "Catalog") -> UnitVersion:
    """Return the unit satisfying ``constraint`` or raise.

    Raises:
        MissingVersionError: No registered unit satisfies the constraint.
    """
    unit_version = constraint.get_satisfying_unit_version(catalog)
    if unit_version is None:
        raise MissingVersionError(
            f"No unit version was found for the constraint -- {constraint}",
            package=constraint.name,
            version=constraint.version,
        )
    return unit_version
