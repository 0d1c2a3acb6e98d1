"""
Command-line interface for depsolve.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from depsolve.config import load_config
from depsolve.__version__ import __version__
from depsolve.context import DepSolveContext
from depsolve.exceptions import ConfigError, DepSolveError
from depsolve.utils.logger import get_logger, setup_logging
from depsolve.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="DEPSOLVE_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v info, -vv debug, -vvv search trace).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPSOLVE_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depsolve",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depsolve — pick one version per package so every constraint holds.

    \b
    Available commands:
      depsolve resolve CATALOG     Resolve packages against a catalog file

    \b
    Examples:
      depsolve resolve catalog.toml -r app
      depsolve resolve catalog.toml -r app --constraint "lib@=2.0.0"
      depsolve -vv resolve catalog.toml -r app --format json

    Use ``depsolve COMMAND --help`` for command-specific options.
    """
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depsolve_ctx = DepSolveContext()
    depsolve_ctx.config_path = config or loaded_config.source_path
    depsolve_ctx.config = loaded_config
    depsolve_ctx.color = color
    depsolve_ctx.verbose = verbose
    ctx.obj = depsolve_ctx

    logger.debug("depsolve v%s", __version__)
    logger.debug("Config path: %s", depsolve_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Map ``-v`` counts to logging levels."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose >= 2, trace_search=verbose >= 3)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
from depsolve.commands.resolve import resolve  # noqa: E402

cli.add_command(resolve)


def main() -> int:
    """Main entry point for the depsolve CLI.

    Returns:
        Exit code:
            0   Success
            1   Unresolvable or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except DepSolveError as exc:
        print_error(str(exc))
        logger.debug(
            "DepSolveError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
