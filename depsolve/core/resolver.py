"""Best-first branch-and-bound resolution.

The resolver searches over :class:`SearchState` nodes. The start node is
the propagation closure of a synthetic root unit that depends on the
caller's packages and carries the caller's constraints. Each step pops
the cheapest state from a priority queue; a state with no pending
dependencies is a solution, otherwise the first pending package is
branched on:

1. candidates are the package's registered versions that satisfy every
   constraint in force naming it;
2. each candidate is chosen and propagated
   (:func:`~depsolve.core.propagation.propagate_exact_dependencies`);
3. neighbors violating any constraint after propagation are dropped and
   the rest are pushed.

A branch with no viable neighbor is abandoned and its reason recorded.
Only an empty queue makes the whole resolution fail.

Typical usage::

    from depsolve.core import Catalog, Resolver, ResolveOptions

    resolver = Resolver(catalog)
    resolution = resolver.resolve(["app"], ["lib@=2.0.0"])
    print(resolution.summary())
"""

from __future__ import annotations

import heapq
import math
import time
import itertools
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from depsolve.core.catalog import Catalog
from depsolve.core.state import SearchState
from depsolve.utils.logger import get_logger
from depsolve.models.constraint import Constraint
from depsolve.models.unit_version import UnitVersion
from depsolve.core.propagation import propagate_exact_dependencies, propagate_state
from depsolve.core.persistent import ConstraintsList
from depsolve.core.costs import (
    CostFunction,
    EstimateFunction,
    zero_cost,
    zero_estimate,
)
from depsolve.constants import ROOT_UNIT_ECV, ROOT_UNIT_NAME, ROOT_UNIT_VERSION
from depsolve.exceptions import (
    MissingVersionError,
    ResolutionAbortedError,
    ResolutionError,
    UnresolvableError,
)

logger = get_logger("resolver")
search_logger = get_logger("search")

# Public API
__all__ = [
    "Resolver",
    "ResolveOptions",
    "Resolution",
]

ConstraintLike = Union[Constraint, str]


# ---------------------------------------------------------------------------
# Options and results
# ---------------------------------------------------------------------------


@dataclass
class ResolveOptions:
    """Tuning knobs for :meth:`Resolver.resolve`.

    Attributes:
        cost_function: Cost of a set of choices. Defaults to zero.
        estimate_cost_function: Estimated remaining cost of a state.
            Defaults to zero.
        stop_after_first_propagation: Return the forced closure of the
            roots without branching.
        max_states: Abort after popping this many states.
        timeout: Abort after this many seconds.
        should_cancel: Called before every pop; returning True aborts.
    """

    cost_function: CostFunction = zero_cost
    estimate_cost_function: EstimateFunction = zero_estimate
    stop_after_first_propagation: bool = False
    max_states: Optional[int] = None
    timeout: Optional[float] = None
    should_cancel: Optional[Callable[[], bool]] = None


@dataclass(frozen=True)
class Resolution:
    """A successful resolution.

    Attributes:
        choices: Chosen unit versions, in the order they were decided.
        cost: Priority of the accepted state (cost plus estimate).
        states_explored: Number of states popped from the queue.
        propagation_only: True when produced by
            ``stop_after_first_propagation``.
        branch_order: Packages branched on, in expansion order.
    """

    choices: Tuple[UnitVersion, ...]
    cost: float = 0
    states_explored: int = 0
    propagation_only: bool = False
    branch_order: Tuple[str, ...] = field(default=(), repr=False)

    def __iter__(self) -> Iterator[UnitVersion]:
        return iter(self.choices)

    def __len__(self) -> int:
        return len(self.choices)

    def __contains__(self, unit_version: object) -> bool:
        return unit_version in self.choices

    def get(self, name: str) -> Optional[UnitVersion]:
        """Return the chosen unit for package ``name``, if any."""
        for unit_version in self.choices:
            if unit_version.name == name:
                return unit_version
        return None

    def versions(self) -> Dict[str, str]:
        """Return ``{package: version}`` sorted by package name."""
        return {uv.name: uv.version for uv in sorted(self.choices, key=lambda u: u.name)}

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "choices": [
                {"name": uv.name, "version": uv.version, "ecv": uv.ecv}
                for uv in self.choices
            ],
            "cost": self.cost,
            "states_explored": self.states_explored,
            "propagation_only": self.propagation_only,
        }

    def summary(self) -> str:
        """Return a human-readable multi-line summary.

        Example::

            >>> print(resolution.summary())
            Resolution Summary:
            ==================================================
            Packages chosen: 2
            States explored: 3
            Cost: 0
            ...
        """
        lines = [
            "Resolution Summary:",
            "=" * 50,
            f"Packages chosen: {len(self.choices)}",
            f"States explored: {self.states_explored}",
            f"Cost: {self.cost:g}",
        ]
        if self.propagation_only:
            lines.append("Mode: forced dependencies only (no branching)")
        lines.append("")
        for name, version in self.versions().items():
            lines.append(f"  • {name} {version}")
        return "\n".join(lines)


class _Expansion(NamedTuple):
    neighbors: List[SearchState]
    failure: Optional[ResolutionError]


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class Resolver:
    """Resolve package versions against a :class:`Catalog`.

    The catalog is sealed on first use; it must be fully populated before
    the resolver is created or used. One resolver may run any number of
    resolutions; calls share no mutable state.

    Args:
        catalog: Populated catalog of unit versions.

    Raises:
        TypeError: If *catalog* is ``None``.
    """

    def __init__(self, catalog: Catalog) -> None:
        if catalog is None:
            raise TypeError("catalog must not be None; pass a Catalog instance")
        self.catalog: Catalog = catalog

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        dependencies: Iterable[str],
        constraints: Iterable[ConstraintLike] = (),
        choices: Iterable[UnitVersion] = (),
        options: Optional[ResolveOptions] = None,
    ) -> Resolution:
        """Choose one version for every package reachable from ``dependencies``.

        Args:
            dependencies: Root package names.
            constraints: Root constraints, as interned :class:`Constraint`
                objects or ``"name@spec"`` strings.
            choices: Registered unit versions fixed in advance.
            options: Cost functions, shortcut mode and cancellation limits.

        Returns:
            The accepted :class:`Resolution`.

        Raises:
            UnresolvableError: No assignment satisfies every constraint.
            MissingVersionError: An exact pin names an unregistered version
                and no other branch succeeded.
            ResolutionAbortedError: A cancellation limit was reached.
            CyclicExactPinError: The catalog contains cyclic exact pins.
        """
        options = options or ResolveOptions()
        self.catalog.seal()

        root_dependencies = tuple(dict.fromkeys(dependencies))
        root_constraints = self._coerce_constraints(constraints)
        seeds = self._coerce_seeds(choices)

        start = self._initial_state(root_dependencies, root_constraints, seeds)
        self._check_initial_state(start)

        if options.stop_after_first_propagation:
            logger.info(
                "Propagation-only resolution chose %d unit version(s)",
                len(start.choices),
            )
            return Resolution(
                choices=tuple(start.choices),
                cost=self._priority(options, start),
                propagation_only=True,
            )

        return self._search(start, options)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _coerce_constraints(
        self, constraints: Iterable[ConstraintLike]
    ) -> Tuple[Constraint, ...]:
        coerced: Dict[Tuple[str, str, bool], Constraint] = {}
        for item in constraints:
            constraint = (
                self.catalog.parse_constraint(item) if isinstance(item, str) else item
            )
            coerced.setdefault(constraint.key, constraint)
        return tuple(coerced.values())

    def _coerce_seeds(self, choices: Iterable[UnitVersion]) -> Tuple[UnitVersion, ...]:
        seeds = tuple(dict.fromkeys(choices))
        for unit_version in seeds:
            if unit_version not in self.catalog:
                raise MissingVersionError(
                    f"Seed choice is not registered in the catalog -- {unit_version}",
                    package=unit_version.name,
                    version=unit_version.version,
                )
        return seeds

    def _initial_state(
        self,
        dependencies: Sequence[str],
        constraints: Sequence[Constraint],
        seeds: Sequence[UnitVersion],
    ) -> SearchState:
        root = UnitVersion(ROOT_UNIT_NAME, ROOT_UNIT_VERSION, ROOT_UNIT_ECV)
        for name in dependencies:
            root.add_dependency(name)
        for constraint in constraints:
            root.add_constraint(constraint)

        state = SearchState(constraints=ConstraintsList(constraints))
        for seed in seeds:
            state = propagate_state(self.catalog, state, seed)

        state = propagate_exact_dependencies(
            self.catalog,
            root,
            state.dependencies.union(dependencies),
            state.constraints,
            state.choices,
        )
        state = replace(state, choices=state.choices.without_package(ROOT_UNIT_NAME))

        logger.debug(
            "Initial propagation: %d chosen, %d pending, %d constraints",
            len(state.choices),
            len(state.dependencies),
            len(state.constraints),
        )
        return state

    @staticmethod
    def _check_initial_state(state: SearchState) -> None:
        violation = state.first_violation()
        if violation is None:
            return

        unit_version, constraint = violation
        if constraint is None:
            message = (
                f"Conflicting versions forced for package -- {unit_version.name}"
            )
        else:
            message = f"{unit_version} does not satisfy {constraint}"
        raise UnresolvableError(message, package=unit_version.name, states_explored=0)

    # ------------------------------------------------------------------
    # Search loop
    # ------------------------------------------------------------------

    @staticmethod
    def _priority(options: ResolveOptions, state: SearchState) -> float:
        return options.cost_function(state.choices) + options.estimate_cost_function(
            state
        )

    def _search(self, start: SearchState, options: ResolveOptions) -> Resolution:
        heap: List[Tuple[float, int, int, SearchState]] = []
        sequence = itertools.count()

        def push(state: SearchState) -> None:
            priority = self._priority(options, state)
            heapq.heappush(heap, (priority, -len(state.choices), next(sequence), state))

        push(start)

        deadline = (
            time.monotonic() + options.timeout if options.timeout is not None else None
        )
        failure: Optional[ResolutionError] = None
        failures_seen = 0
        explored = 0
        branch_order: List[str] = []

        while heap:
            self._check_cancellation(options, explored, deadline)

            priority, _, _, state = heapq.heappop(heap)
            explored += 1

            if priority == math.inf:
                # Everything still queued is at least as expensive.
                logger.debug("Stopping search: remaining states have infinite cost")
                break

            search_logger.debug("Pop #%d (cost %s): %s", explored, priority, state)

            if state.is_complete:
                logger.info(
                    "Resolved %d package(s) after exploring %d state(s)",
                    len(state.choices),
                    explored,
                )
                return Resolution(
                    choices=tuple(state.choices),
                    cost=priority,
                    states_explored=explored,
                    branch_order=tuple(branch_order),
                )

            branch_order.append(state.dependencies.peek() or "")
            expansion = self._expand(state)

            if expansion.failure is not None:
                failures_seen += 1
                search_logger.debug("Branch abandoned: %s", expansion.failure.message)
                if failure is None:
                    failure = expansion.failure

            for neighbor in expansion.neighbors:
                push(neighbor)

        logger.info(
            "Resolution failed after exploring %d state(s) (%d dead branch(es))",
            explored,
            failures_seen,
        )
        raise self._exhausted(failure, explored)

    def _expand(self, state: SearchState) -> _Expansion:
        name = state.dependencies.peek()
        if name is None:
            raise ResolutionError("Cannot expand a state with no pending dependencies")
        remaining = state.dependencies.remove(name)
        in_force = state.constraints.for_package(name)

        candidates = [
            uv
            for uv in self.catalog.unit_versions(name)
            if all(c.is_satisfied(uv) for c in in_force)
        ]
        if not candidates:
            return _Expansion(
                [],
                UnresolvableError(
                    f"Cannot choose satisfying versions of package -- {name}",
                    package=name,
                ),
            )

        neighbors: List[SearchState] = []
        missing: Optional[MissingVersionError] = None

        for candidate in candidates:
            try:
                neighbor = propagate_exact_dependencies(
                    self.catalog,
                    candidate,
                    remaining,
                    state.constraints,
                    state.choices,
                )
            except MissingVersionError as exc:
                search_logger.debug("Dropping %s: %s", candidate, exc.message)
                if missing is None:
                    missing = exc
                continue

            violation = neighbor.first_violation()
            if violation is not None:
                search_logger.debug(
                    "Dropping %s: %s conflicts with %s",
                    candidate,
                    violation[0],
                    violation[1] if violation[1] is not None else "another choice",
                )
                continue

            neighbors.append(neighbor)

        if neighbors:
            return _Expansion(neighbors, None)
        if missing is not None:
            return _Expansion([], missing)
        return _Expansion(
            [],
            UnresolvableError(
                f"None of the versions unit produces a sensible result -- {name}",
                package=name,
            ),
        )

    @staticmethod
    def _check_cancellation(
        options: ResolveOptions, explored: int, deadline: Optional[float]
    ) -> None:
        if options.max_states is not None and explored >= options.max_states:
            raise ResolutionAbortedError(
                f"Resolution stopped after {explored} states",
                reason="max_states",
                states_explored=explored,
            )
        if deadline is not None and time.monotonic() >= deadline:
            raise ResolutionAbortedError(
                f"Resolution timed out after {options.timeout} seconds",
                reason="timeout",
                states_explored=explored,
            )
        if options.should_cancel is not None and options.should_cancel():
            raise ResolutionAbortedError(
                "Resolution cancelled",
                reason="cancelled",
                states_explored=explored,
            )

    @staticmethod
    def _exhausted(
        failure: Optional[ResolutionError], explored: int
    ) -> ResolutionError:
        if failure is None:
            return UnresolvableError("Couldn't resolve", states_explored=explored)
        if isinstance(failure, UnresolvableError):
            failure.states_explored = explored
            failure.details["states_explored"] = explored
        return failure
