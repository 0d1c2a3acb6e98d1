"""
Shared context object for depsolve CLI commands.

Holds the options parsed by the top-level ``depsolve`` group so that
subcommands can read them through Click's context mechanism.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depsolve.config import DepSolveConfig


class DepSolveContext:
    """Per-invocation state for depsolve CLI commands.

    Attributes:
        config_path: Path to the loaded configuration file, if any.
        config: Loaded configuration (defaults when no file was found).
        verbose: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3+=search trace).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: DepSolveConfig = DepSolveConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`DepSolveContext` into commands.
pass_context = click.make_pass_decorator(DepSolveContext, ensure=True)
