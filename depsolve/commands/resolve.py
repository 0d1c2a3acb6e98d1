"""Resolve command implementation for depsolve.

Loads a TOML catalog, resolves the requested packages against it, and
prints the chosen versions.

Typical usage::

    # Resolve one root package, newest versions preferred
    $ depsolve resolve catalog.toml -r app

    # Add root constraints and emit JSON
    $ depsolve resolve catalog.toml -r app --constraint "lib@=1.2.0" -f json

    # Only show what exact pins force, without branching
    $ depsolve resolve catalog.toml -r app --propagate-only
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

import click

from depsolve.core.loader import load_catalog
from depsolve.utils.logger import get_logger
from depsolve.core.resolver import Resolution, Resolver
from depsolve.context import DepSolveContext, pass_context
from depsolve.utils.console import print_json, print_success, print_table

logger = get_logger("commands.resolve")


@click.command()
@click.argument(
    "catalog_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--require",
    "-r",
    "requirements",
    multiple=True,
    required=True,
    help="Root package to resolve (repeatable).",
)
@click.option(
    "--constraint",
    "constraints",
    multiple=True,
    help="Root constraint as NAME@SPEC, e.g. lib@=1.0.0 or lib@1.0.0 (repeatable).",
)
@click.option(
    "--prefer-latest/--no-prefer-latest",
    default=None,
    help="Prefer newer versions (defaults to the configuration value).",
)
@click.option(
    "--propagate-only",
    is_flag=True,
    help="Only resolve packages forced by exact pins; do not branch.",
)
@click.option(
    "--max-states",
    type=click.IntRange(min=1),
    default=None,
    help="Abort after exploring this many search states.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort after this many seconds.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def resolve(
    ctx: DepSolveContext,
    catalog_file: Path,
    requirements: Tuple[str, ...],
    constraints: Tuple[str, ...],
    prefer_latest: Optional[bool],
    propagate_only: bool,
    max_states: Optional[int],
    timeout: Optional[float],
    output_format: str,
) -> None:
    """Resolve REQUIREMENTS against the packages listed in CATALOG_FILE.

    Exits 0 when a resolution is found. Unresolvable inputs, missing pinned
    versions and aborted searches raise a depsolve error, which the CLI
    entry point reports and turns into exit code 1.
    """
    config = ctx.config
    if prefer_latest is not None:
        config = replace(config, prefer_latest=prefer_latest)
    if max_states is not None:
        config = replace(config, max_states=max_states)
    if timeout is not None:
        config = replace(config, timeout=timeout)

    catalog = load_catalog(catalog_file)
    options = config.to_resolve_options(catalog)
    options.stop_after_first_propagation = propagate_only

    logger.debug(
        "Resolving %s with %d root constraint(s); options: %s",
        ", ".join(requirements),
        len(constraints),
        config.to_log_dict(),
    )

    resolution = Resolver(catalog).resolve(requirements, constraints, options=options)

    if output_format.lower() == "json":
        print_json(resolution.to_json())
        return

    _print_resolution(resolution)


def _print_resolution(resolution: Resolution) -> None:
    rows = [
        {"Package": uv.name, "Version": uv.version, "Compatible from": uv.ecv}
        for uv in sorted(resolution.choices, key=lambda u: u.name)
    ]
    caption = (
        "forced dependencies only"
        if resolution.propagation_only
        else f"{resolution.states_explored} state(s) explored"
    )
    print_table(
        rows,
        title="Resolved Versions",
        caption=caption,
        column_styles={"Package": "package", "Version": "version"},
    )
    print_success(f"Resolved {len(resolution)} package(s)")
