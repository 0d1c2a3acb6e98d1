"""Search state: one node of the resolution search tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from depsolve.models.constraint import Constraint
from depsolve.models.unit_version import UnitVersion
from depsolve.core.persistent import ChoicesList, ConstraintsList, DependenciesList


@dataclass(frozen=True)
class SearchState:
    """Snapshot of pending dependencies, constraints in force and choices made.

    States are never modified; expanding a state builds new ones from its
    persistent collections, so discarding a state has no side effect.
    """

    dependencies: DependenciesList = field(default_factory=DependenciesList)
    constraints: ConstraintsList = field(default_factory=ConstraintsList)
    choices: ChoicesList = field(default_factory=ChoicesList)

    @property
    def is_complete(self) -> bool:
        return not self.dependencies

    def is_consistent(self) -> bool:
        return self.first_violation() is None

    def first_violation(
        self,
    ) -> Optional[Tuple[UnitVersion, Optional[Constraint]]]:
        """Return the first chosen unit breaking the state, if any.

        A unit breaks the state when a constraint naming its package is not
        satisfied by it (the constraint is returned alongside), or when a
        second version of an already chosen package was picked (returned
        with ``None``).
        """
        for name in self.choices.package_names():
            chosen = self.choices.for_package(name)
            if len(chosen) > 1:
                return chosen[1], None
            unit_version = chosen[0]
            for constraint in self.constraints.for_package(name):
                if not constraint.is_satisfied(unit_version):
                    return unit_version, constraint
        return None

    def __str__(self) -> str:
        return (
            f"SearchState(pending={list(self.dependencies)}, "
            f"choices={[str(uv) for uv in self.choices]}, "
            f"constraints={len(self.constraints)})"
        )
