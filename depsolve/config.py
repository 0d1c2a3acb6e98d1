"""Configuration file loader for depsolve.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depsolve.toml`` — settings under ``[depsolve]`` table
- ``pyproject.toml`` — settings under ``[tool.depsolve]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPSOLVE_CONFIG``
2. ``depsolve.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depsolve]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``depsolve.toml``)::

    [depsolve]
    prefer_latest = true
    max_states = 50000
    timeout = 30.0
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import tomli as tomllib

from depsolve.exceptions import ConfigError
from depsolve.utils.logger import get_logger
from depsolve.core.catalog import Catalog
from depsolve.core.resolver import ResolveOptions
from depsolve.core.costs import prefer_latest_cost, zero_cost
from depsolve.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_MAX_STATES,
    DEFAULT_PREFER_LATEST,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")


@dataclass
class DepSolveConfig:
    """Parsed and validated depsolve configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        prefer_latest: Rank candidate versions newest first through
            :func:`~depsolve.core.costs.prefer_latest_cost`. When ``False``
            every solution costs the same and the first one found wins.
        max_states: Abort a resolution after this many search states.
        timeout: Abort a resolution after this many seconds.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    prefer_latest: bool = DEFAULT_PREFER_LATEST
    max_states: Optional[int] = DEFAULT_MAX_STATES
    timeout: Optional[float] = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration options (without metadata) for debug logging."""
        return {
            "prefer_latest": self.prefer_latest,
            "max_states": self.max_states,
            "timeout": self.timeout,
        }

    def to_resolve_options(self, catalog: Catalog) -> ResolveOptions:
        """Build :class:`ResolveOptions` for resolving against ``catalog``."""
        return ResolveOptions(
            cost_function=prefer_latest_cost(catalog) if self.prefer_latest else zero_cost,
            max_states=self.max_states,
            timeout=self.timeout,
        )


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depsolve_toml = cwd / CONFIG_FILE_NAME
    if depsolve_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, depsolve_toml)
        return depsolve_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depsolve_section(pyproject_toml):
        logger.debug("Found [tool.depsolve] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depsolve_section(path: Path) -> bool:
    """Return True if ``path`` parses and has a ``[tool.depsolve]`` table.

    An unparsable ``pyproject.toml`` is treated as having no section; it
    belongs to the project, not to depsolve.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "depsolve" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepSolveConfig:
    """Load and validate depsolve configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepSolveConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepSolveConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depsolve", {})
    else:
        section = raw.get("depsolve", {})

    if not section:
        logger.debug("Config file found but no depsolve section, using defaults")
        return DepSolveConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is invalid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepSolveConfig:
    """Validate a ``[depsolve]`` / ``[tool.depsolve]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or out-of-range values.
    """
    config = DepSolveConfig()

    known = {"prefer_latest", "max_states", "timeout"}
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "prefer_latest" in section:
        val = section["prefer_latest"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"prefer_latest must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="prefer_latest",
            )
        config.prefer_latest = val

    if "max_states" in section:
        val = section["max_states"]
        # bool is an int subclass; reject it explicitly
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"max_states must be a positive integer, got {val!r}",
                config_path=config_path,
                option="max_states",
            )
        config.max_states = val

    if "timeout" in section:
        val = section["timeout"]
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive number, got {val!r}",
                config_path=config_path,
                option="timeout",
            )
        config.timeout = float(val)

    return config
