"""
Console output utilities for depsolve using Rich.

User-facing output of the CLI goes through this module; diagnostics go
through :mod:`depsolve.utils.logger`. The engine itself never prints.
"""

from __future__ import annotations

import os
import sys
import json
import threading
from typing import Any, Dict, List, Optional, Sequence

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

DEPSOLVE_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "package": "bold",
        "version": "cyan",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the process-wide Rich console, creating it on first use."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=DEPSOLVE_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call re-reads ``NO_COLOR``."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    return _get_console()


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{prefix} {message}", style="warning")


def print_table(
    rows: Sequence[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, str]] = None,
) -> None:
    """Render rows of dictionaries as a Rich table.

    Args:
        rows: Row dictionaries. Nothing is printed when empty.
        headers: Column order; defaults to the keys of the first row.
        title: Optional table title.
        caption: Optional caption under the table.
        column_styles: Theme style name per column.
    """
    if not rows:
        return

    headers = headers or list(rows[0].keys())
    column_styles = column_styles or {}

    table = Table(title=title, caption=caption, header_style="bold")
    for header in headers:
        table.add_column(header, style=column_styles.get(header), overflow="fold")
    for row in rows:
        table.add_row(*(str(row.get(h, "")) for h in headers))

    _get_console().print(table)


def print_json(data: Any) -> None:
    """Print ``data`` as indented JSON without markup processing."""
    _get_console().print(
        json.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True
    )
