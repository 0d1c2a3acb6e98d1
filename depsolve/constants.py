"""
Centralized constants for depsolve.

This module defines immutable configuration values used across depsolve,
including constraint syntax, the synthetic root unit, configuration
defaults, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Optional

# ---------------------------------------------------------------------------
# Constraint syntax
# ---------------------------------------------------------------------------

#: Prefix marking an exact (pinned) version constraint, e.g. ``=1.2.3``.
EXACT_CONSTRAINT_PREFIX: Final[str] = "="

#: Separator between package name and version constraint, e.g. ``pkg@=1.2.3``.
NAME_VERSION_SEPARATOR: Final[str] = "@"

# ---------------------------------------------------------------------------
# Synthetic root unit
# ---------------------------------------------------------------------------

#: Name of the fake unit standing for the build target during resolution.
ROOT_UNIT_NAME: Final[str] = "__root__"

#: Version of the synthetic root unit.
ROOT_UNIT_VERSION: Final[str] = "1.0.0"

#: Earliest compatible version of the synthetic root unit.
ROOT_UNIT_ECV: Final[str] = "0.0.0"

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Prefer newer versions when no cost function is given on the CLI.
DEFAULT_PREFER_LATEST: Final[bool] = True

#: Maximum number of search states to pop before aborting (None = unbounded).
DEFAULT_MAX_STATES: Final[Optional[int]] = None

#: Wall-clock limit for a single resolution in seconds (None = unbounded).
DEFAULT_TIMEOUT: Final[Optional[float]] = None

#: Configuration file name searched in the current directory.
CONFIG_FILE_NAME: Final[str] = "depsolve.toml"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed size (in bytes) of a catalog file.
MAX_CATALOG_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
