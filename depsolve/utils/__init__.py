"""
Utility helpers for depsolve.

This package provides reusable utilities used across depsolve:

- Logging configuration and retrieval
- Version comparison (the injectable comparator)
- Console output helpers (Rich-based)

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from depsolve.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from depsolve.utils.version_utils import (
    DEFAULT_COMPARATOR,
    PackagingVersionComparator,
    VersionComparator,
    at_least,
    less_than,
    sort_versions,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from depsolve.utils.console import (
    get_raw_console,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Versions
    "VersionComparator",
    "PackagingVersionComparator",
    "DEFAULT_COMPARATOR",
    "less_than",
    "at_least",
    "sort_versions",
    # Console
    "print_success",
    "print_error",
    "print_warning",
    "print_table",
    "print_json",
    "get_raw_console",
    "reconfigure_console",
]
