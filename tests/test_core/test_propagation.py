"""Unit tests for depsolve.core.propagation."""

from __future__ import annotations

import pytest

from depsolve.core.catalog import Catalog
from depsolve.core.state import SearchState
from depsolve.exceptions import MissingVersionError
from depsolve.core.propagation import propagate_exact_dependencies, propagate_state
from depsolve.core.persistent import ChoicesList, ConstraintsList, DependenciesList


def _names(choices: ChoicesList) -> list:
    return [str(uv) for uv in choices]


@pytest.mark.unit
class TestPropagateExactDependencies:
    """Tests for propagate_exact_dependencies."""

    def test_unit_without_pins(self, catalog: Catalog, add_unit) -> None:
        a = add_unit("a", "1.0.0", deps=["b"])

        state = propagate_exact_dependencies(
            catalog, a, DependenciesList(), ConstraintsList(), ChoicesList()
        )

        assert _names(state.choices) == ["a@1.0.0"]
        assert list(state.dependencies) == ["b"]
        assert not state.is_complete

    def test_forced_chain(self, catalog: Catalog, add_unit) -> None:
        """Exact pins pull in every pinned unit transitively."""
        a = add_unit("a", "1.0.0", deps=["b"], constraints=["b@=1.0.0"])
        add_unit("b", "1.0.0", deps=["c"], constraints=["c@=1.0.0"])
        add_unit("b", "2.0.0")
        add_unit("c", "1.0.0")

        state = propagate_exact_dependencies(
            catalog, a, DependenciesList(["a"]), ConstraintsList(), ChoicesList()
        )

        assert _names(state.choices) == ["a@1.0.0", "b@1.0.0", "c@1.0.0"]
        assert state.is_complete
        assert [str(c) for c in state.constraints] == ["b@=1.0.0", "c@=1.0.0"]

    def test_chosen_package_leaves_pending_set(self, catalog: Catalog, add_unit) -> None:
        a = add_unit("a", "1.0.0")

        state = propagate_exact_dependencies(
            catalog, a, DependenciesList(["a", "z"]), ConstraintsList(), ChoicesList()
        )

        assert list(state.dependencies) == ["z"]

    def test_dependency_meets_pin_already_in_force(
        self, catalog: Catalog, add_unit
    ) -> None:
        """A new dependency on a package someone already pinned is forced."""
        x = add_unit("x", "1.0.0", deps=["c"])
        add_unit("c", "1.0.0")
        add_unit("c", "2.0.0")
        in_force = ConstraintsList([catalog.get_constraint("c", "=2.0.0")])

        state = propagate_exact_dependencies(
            catalog, x, DependenciesList(), in_force, ChoicesList()
        )

        assert _names(state.choices) == ["x@1.0.0", "c@2.0.0"]
        assert state.is_complete

    def test_pin_meets_pending_dependency(self, catalog: Catalog, add_unit) -> None:
        """A new pin on a package that is already pending is forced."""
        y = add_unit("y", "1.0.0", constraints=["c@=2.0.0"])
        add_unit("c", "1.0.0")
        add_unit("c", "2.0.0")

        state = propagate_exact_dependencies(
            catalog, y, DependenciesList(["c"]), ConstraintsList(), ChoicesList()
        )

        assert _names(state.choices) == ["y@1.0.0", "c@2.0.0"]
        assert state.is_complete

    def test_pinned_unit_dependency_meets_pin_from_its_pinner(
        self, catalog: Catalog, add_unit
    ) -> None:
        """b is pinned through a; b's dependency d is pinned by a, not b."""
        a = add_unit("a", "1.0.0", deps=["b"], constraints=["b@=1.0.0", "d@=1.0.0"])
        add_unit("b", "1.0.0", deps=["d"])
        add_unit("d", "1.0.0")
        add_unit("d", "2.0.0")
        root = add_unit("root", "1.0.0", deps=["a"], constraints=["a@=1.0.0"])

        state = propagate_exact_dependencies(
            catalog, root, DependenciesList(), ConstraintsList(), ChoicesList()
        )

        assert _names(state.choices) == ["root@1.0.0", "a@1.0.0", "b@1.0.0", "d@1.0.0"]
        assert state.is_complete
        assert state.is_consistent()

    def test_pin_on_already_chosen_package_is_not_forced_again(
        self, catalog: Catalog, add_unit
    ) -> None:
        """Conflicts with existing choices surface as a second version."""
        c1 = add_unit("c", "1.0.0")
        add_unit("c", "2.0.0")
        x = add_unit("x", "1.0.0", deps=["c"], constraints=["c@=2.0.0"])

        state = propagate_exact_dependencies(
            catalog, x, DependenciesList(), ConstraintsList(), ChoicesList([c1])
        )

        assert _names(state.choices) == ["c@1.0.0", "x@1.0.0", "c@2.0.0"]
        assert not state.is_consistent()

    def test_parent_collections_untouched(self, catalog: Catalog, add_unit) -> None:
        a = add_unit("a", "1.0.0", deps=["b"], constraints=["b@=1.0.0"])
        add_unit("b", "1.0.0", deps=["c"])
        dependencies = DependenciesList(["a"])
        constraints = ConstraintsList()
        choices = ChoicesList()

        propagate_exact_dependencies(catalog, a, dependencies, constraints, choices)

        assert list(dependencies) == ["a"]
        assert len(constraints) == 0
        assert len(choices) == 0

    def test_missing_witness_raises(self, catalog: Catalog, add_unit) -> None:
        a = add_unit("a", "1.0.0", deps=["b"], constraints=["b@=5.0.0"])
        add_unit("b", "1.0.0")

        with pytest.raises(MissingVersionError):
            propagate_exact_dependencies(
                catalog, a, DependenciesList(), ConstraintsList(), ChoicesList()
            )


@pytest.mark.unit
class TestPropagateState:
    """Tests for propagate_state."""

    def test_matches_explicit_call(self, catalog: Catalog, add_unit) -> None:
        a = add_unit("a", "1.0.0", deps=["b"])
        start = SearchState(dependencies=DependenciesList(["a"]))

        state = propagate_state(catalog, start, a)

        assert _names(state.choices) == ["a@1.0.0"]
        assert list(state.dependencies) == ["b"]
        assert list(start.dependencies) == ["a"]


@pytest.mark.unit
class TestSearchState:
    """Tests for SearchState consistency checks."""

    def test_empty_state_is_complete_and_consistent(self) -> None:
        state = SearchState()

        assert state.is_complete
        assert state.is_consistent()
        assert state.first_violation() is None

    def test_violated_constraint_reported(self, catalog: Catalog, add_unit) -> None:
        b1 = add_unit("b", "1.0.0")
        constraint = catalog.get_constraint("b", "2.0.0")
        state = SearchState(
            constraints=ConstraintsList([constraint]), choices=ChoicesList([b1])
        )

        assert state.first_violation() == (b1, constraint)

    def test_second_version_reported(self, add_unit) -> None:
        b1 = add_unit("b", "1.0.0")
        b2 = add_unit("b", "2.0.0")
        state = SearchState(choices=ChoicesList([b1, b2]))

        assert state.first_violation() == (b2, None)

    def test_str(self, add_unit) -> None:
        state = SearchState(
            dependencies=DependenciesList(["x"]),
            choices=ChoicesList([add_unit("b", "1.0.0")]),
        )

        assert "pending=['x']" in str(state)
        assert "b@1.0.0" in str(state)
