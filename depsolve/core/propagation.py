"""Exact-dependency propagation.

Before the search branches on a package it should know everything that is
already forced. A dependency pinned with an exact constraint has only one
possible version, so choosing a unit also chooses every unit it pins,
every unit those pin, and so on. This module computes that closure.

Propagation assumes the incoming state is already closed; it only looks
at what the newly chosen unit (and the units it forces) add.
"""

from __future__ import annotations

import itertools
from collections import deque
from typing import TYPE_CHECKING, Deque, Iterable, List, Set

from depsolve.core.state import SearchState
from depsolve.utils.logger import get_logger
from depsolve.models.constraint import Constraint
from depsolve.models.unit_version import UnitVersion, exact_witness
from depsolve.core.persistent import ChoicesList, ConstraintsList, DependenciesList

if TYPE_CHECKING:
    from depsolve.core.catalog import Catalog

logger = get_logger("propagation")

__all__ = ["propagate_exact_dependencies", "propagate_state"]


def propagate_exact_dependencies(
    catalog: "Catalog",
    unit_version: UnitVersion,
    dependencies: DependenciesList,
    constraints: ConstraintsList,
    choices: ChoicesList,
) -> SearchState:
    """Choose ``unit_version`` and everything it forces.

    Args:
        catalog: Catalog providing pin witnesses.
        unit_version: Newly chosen unit.
        dependencies: Pending package names of the parent state.
        constraints: Constraints in force in the parent state.
        choices: Units chosen in the parent state.

    Returns:
        A new :class:`SearchState`. The parent collections are untouched.

    Raises:
        MissingVersionError: An exact pin names an unregistered version.
        CyclicExactPinError: Exact pins loop back on themselves.
    """
    queue: Deque[UnitVersion] = deque([unit_version])
    enqueued: Set[str] = {unit_version.name}

    while queue:
        unit = queue.popleft()
        choices = choices.push(unit)

        pinned_units = unit.exact_transitive_dependency_versions(catalog)
        open_names = unit.inexact_transitive_dependencies(catalog)

        dependencies = dependencies.union(open_names)
        constraints = constraints.union(_constraints_of(unit, pinned_units))
        choices = choices.union(pinned_units)

        # Pinned units are decided; they no longer wait for a choice.
        dependencies = dependencies.difference(choices.package_names())

        forced = _newly_forced(catalog, unit, dependencies, constraints, choices)
        # Pinned units are revisited so their dependencies meet pins in force.
        for follow_up in itertools.chain(forced, pinned_units):
            if follow_up.name in enqueued:
                continue
            enqueued.add(follow_up.name)
            queue.append(follow_up)

    return SearchState(dependencies, constraints, choices)


def propagate_state(
    catalog: "Catalog", state: SearchState, unit_version: UnitVersion
) -> SearchState:
    """Convenience wrapper running propagation on top of ``state``."""
    return propagate_exact_dependencies(
        catalog,
        unit_version,
        state.dependencies,
        state.constraints,
        state.choices,
    )


def _constraints_of(
    unit: UnitVersion, pinned_units: Iterable[UnitVersion]
) -> List[Constraint]:
    collected = list(unit.constraints)
    for pinned in pinned_units:
        collected.extend(pinned.constraints)
    return collected


def _newly_forced(
    catalog: "Catalog",
    unit: UnitVersion,
    dependencies: DependenciesList,
    constraints: ConstraintsList,
    choices: ChoicesList,
) -> List[UnitVersion]:
    """Return units forced by combining ``unit`` with the existing state.

    Only two new combinations can appear when ``unit`` joins a closed
    state: one of its dependencies meeting an exact pin already in force,
    and one of its exact pins meeting a dependency already pending.
    """
    forced: List[UnitVersion] = []

    for name in unit.dependencies:
        if choices.has_package(name):
            continue
        for constraint in constraints.exact_for(name):
            forced.append(exact_witness(constraint, catalog))

    for constraint in unit.exact_constraints():
        if constraint.name in dependencies and not choices.has_package(constraint.name):
            forced.append(exact_witness(constraint, catalog))

    if forced:
        logger.debug(
            "%s forces %s", unit, ", ".join(str(uv) for uv in forced)
        )
    return forced
