from __future__ import annotations

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from depsolve.config import DepSolveConfig
from depsolve.context import DepSolveContext, pass_context


@pytest.mark.unit
class TestDepSolveContext:
    """Tests for DepSolveContext."""

    def test_defaults(self) -> None:
        ctx = DepSolveContext()

        assert ctx.config_path is None
        assert ctx.config == DepSolveConfig()
        assert ctx.verbose == 0
        assert ctx.color is True

    def test_slots_reject_unknown_attributes(self) -> None:
        """Test __slots__ prevents typos from silently creating attributes."""
        ctx = DepSolveContext()

        with pytest.raises(AttributeError):
            ctx.verbosity = 2  # type: ignore[attr-defined]

    def test_attributes_are_mutable(self) -> None:
        ctx = DepSolveContext()
        ctx.config_path = Path("depsolve.toml")
        ctx.verbose = 3

        assert ctx.config_path == Path("depsolve.toml")
        assert ctx.verbose == 3


@pytest.mark.unit
class TestPassContext:
    """Tests for the pass_context decorator."""

    def test_creates_context_when_missing(self) -> None:
        """Test ensure=True builds a default context for standalone commands."""
        seen = []

        @click.command()
        @pass_context
        def command(ctx: DepSolveContext) -> None:
            seen.append(ctx)

        result = CliRunner().invoke(command, [])

        assert result.exit_code == 0
        assert isinstance(seen[0], DepSolveContext)

    def test_reuses_parent_context(self) -> None:
        shared = DepSolveContext()
        shared.verbose = 2
        seen = []

        @click.group()
        @click.pass_context
        def group(click_ctx: click.Context) -> None:
            click_ctx.obj = shared

        @group.command()
        @pass_context
        def child(ctx: DepSolveContext) -> None:
            seen.append(ctx)

        result = CliRunner().invoke(group, ["child"])

        assert result.exit_code == 0
        assert seen == [shared]
