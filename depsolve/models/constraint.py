"""
Version constraint model for depsolve.

A :class:`Constraint` is an immutable predicate over one package's
versions. Two kinds exist:

- **exact** (``=1.2.3``): satisfied only by the identical version string;
- **range** (``1.2.3``): satisfied by any version at or above the floor
  whose earliest compatible version (ECV) is at or below it, i.e. a
  release that is still backward-compatible with the requested floor.

Constraints are interned by :meth:`Catalog.get_constraint
<depsolve.core.catalog.Catalog.get_constraint>`; code elsewhere relies on
logically equal constraints being the same object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Tuple

from depsolve.exceptions import ConstraintParseError
from depsolve.constants import EXACT_CONSTRAINT_PREFIX, NAME_VERSION_SEPARATOR
from depsolve.utils.version_utils import (
    DEFAULT_COMPARATOR,
    VersionComparator,
    at_least,
)

if TYPE_CHECKING:
    from depsolve.core.catalog import Catalog
    from depsolve.models.unit_version import UnitVersion

ConstraintKey = Tuple[str, str, bool]


def parse_version_constraint(text: str) -> Tuple[str, bool]:
    """Split a version constraint into ``(version, exact)``.

    Args:
        text: ``"=X.Y.Z"`` for an exact pin or ``"X.Y.Z"`` for a floor.

    Returns:
        The bare version string and the exactness flag.

    Raises:
        ConstraintParseError: If no version is present.

    Example::

        >>> parse_version_constraint("=1.2.3")
        ('1.2.3', True)
        >>> parse_version_constraint(" 2.0.0 ")
        ('2.0.0', False)
    """
    stripped = text.strip()
    exact = stripped.startswith(EXACT_CONSTRAINT_PREFIX)
    version = stripped[len(EXACT_CONSTRAINT_PREFIX):].strip() if exact else stripped

    if not version:
        raise ConstraintParseError("Constraint has no version", text=text)
    if any(ch.isspace() for ch in version):
        raise ConstraintParseError("Constraint version contains spaces", text=text)

    return version, exact


def split_constraint(text: str) -> Tuple[str, str]:
    """Split ``"name@spec"`` into ``(name, spec)``.

    Raises:
        ConstraintParseError: If the separator or either side is missing.

    Example::

        >>> split_constraint("foo@=1.0.0")
        ('foo', '=1.0.0')
    """
    name, sep, spec = text.strip().partition(NAME_VERSION_SEPARATOR)
    name = name.strip()
    if not sep or not name or not spec.strip():
        raise ConstraintParseError(
            f"Expected 'name{NAME_VERSION_SEPARATOR}version', got {text!r}",
            text=text,
        )
    return name, spec.strip()


@dataclass(frozen=True)
class Constraint:
    """A requirement on the version of one package.

    Args:
        name: Package the constraint applies to.
        version: Pinned version (exact) or version floor (range).
        exact: Whether this is an exact pin.
        comparator: Version ordering used for range checks. Not part of
            the constraint's identity.
    """

    name: str
    version: str
    exact: bool = False
    comparator: VersionComparator = field(
        default=DEFAULT_COMPARATOR, compare=False, hash=False, repr=False
    )

    @property
    def key(self) -> ConstraintKey:
        """Identity of the constraint: ``(name, version, exact)``."""
        return (self.name, self.version, self.exact)

    def is_satisfied(self, unit_version: "UnitVersion") -> bool:
        """Return True if ``unit_version`` meets this constraint.

        Only the version fields are inspected; callers are expected to
        pair constraints with units of the same package.
        """
        if self.exact:
            return self.version == unit_version.version

        return at_least(self.comparator, unit_version.version, self.version) and at_least(
            self.comparator, self.version, unit_version.ecv
        )

    def get_satisfying_unit_version(
        self, catalog: "Catalog"
    ) -> Optional["UnitVersion"]:
        """Return the first registered unit satisfying this constraint.

        Units are tried in catalog insertion order. For an exact pin at
        most one unit can match in a well-formed catalog; for ranges the
        choice among several matches is left to the search engine.
        """
        for unit_version in catalog.unit_versions(self.name):
            if self.is_satisfied(unit_version):
                return unit_version
        return None

    def to_spec(self) -> str:
        """Return the version part in constraint syntax (``=1.0.0`` / ``1.0.0``)."""
        prefix = EXACT_CONSTRAINT_PREFIX if self.exact else ""
        return f"{prefix}{self.version}"

    def __str__(self) -> str:
        return f"{self.name}{NAME_VERSION_SEPARATOR}{self.to_spec()}"
