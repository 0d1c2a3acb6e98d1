"""Catalog loading from TOML files.

A catalog file lists one ``[[package]]`` table per unit version::

    [[package]]
    name = "app"
    version = "1.0.0"
    dependencies = ["lib"]
    constraints = ["lib@=2.0.0"]

    [[package]]
    name = "lib"
    version = "2.0.0"
    ecv = "1.0.0"

``ecv`` defaults to ``version``; ``dependencies`` and ``constraints``
default to empty lists. Constraints use the ``name@spec`` syntax.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

import tomli as tomllib

from depsolve.core.catalog import Catalog
from depsolve.utils.logger import get_logger
from depsolve.exceptions import CatalogLoadError
from depsolve.constants import MAX_CATALOG_FILE_SIZE
from depsolve.models.unit_version import UnitVersion
from depsolve.utils.version_utils import VersionComparator

logger = get_logger("loader")

PathLike = Union[str, Path]

__all__ = ["load_catalog", "build_catalog"]


def load_catalog(
    path: PathLike,
    *,
    comparator: Optional[VersionComparator] = None,
    max_size: Optional[int] = MAX_CATALOG_FILE_SIZE,
) -> Catalog:
    """Read a TOML catalog file into a new :class:`Catalog`.

    Args:
        path: Catalog file.
        comparator: Version ordering for the catalog.
        max_size: Maximum accepted file size in bytes (None disables).

    Returns:
        A populated, unsealed catalog.

    Raises:
        CatalogLoadError: Missing, oversized, unreadable or invalid file.
        DuplicateRegistrationError: Two entries share ``(name, version)``.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise CatalogLoadError(
            f"Catalog file not found: {file_path}", file_path=str(file_path)
        )

    size = file_path.stat().st_size
    if max_size is not None and size > max_size:
        raise CatalogLoadError(
            f"Catalog file too large: {size} bytes (max {max_size})",
            file_path=str(file_path),
        )

    try:
        with open(file_path, "rb") as fh:
            raw = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise CatalogLoadError(
            f"Invalid TOML in {file_path.name}: {exc}",
            file_path=str(file_path),
            original_error=exc,
        ) from exc
    except OSError as exc:
        raise CatalogLoadError(
            f"Cannot read catalog file {file_path}: {exc}",
            file_path=str(file_path),
            original_error=exc,
        ) from exc

    entries = raw.get("package", [])
    if not isinstance(entries, list):
        raise CatalogLoadError(
            "'package' must be an array of tables", file_path=str(file_path)
        )

    try:
        catalog = build_catalog(entries, comparator=comparator)
    except CatalogLoadError as exc:
        exc.file_path = str(file_path)
        exc.details["path"] = str(file_path)
        raise

    logger.info("Loaded %d unit version(s) from %s", len(catalog), file_path)
    return catalog


def build_catalog(
    entries: Iterable[Mapping[str, Any]],
    *,
    comparator: Optional[VersionComparator] = None,
) -> Catalog:
    """Build a catalog from already-parsed package entries.

    Raises:
        CatalogLoadError: An entry is malformed (its index is reported).
        DuplicateRegistrationError: Two entries share ``(name, version)``.
    """
    catalog = Catalog(comparator)

    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise CatalogLoadError("Package entry must be a table", entry=index)

        name = _require_str(entry, "name", index)
        version = _require_str(entry, "version", index)
        ecv = entry.get("ecv")
        if ecv is not None and not isinstance(ecv, str):
            raise CatalogLoadError("'ecv' must be a string", entry=index)

        unit_version = UnitVersion(name, version, ecv)
        for dependency in _str_list(entry, "dependencies", index):
            unit_version.add_dependency(dependency)
        for text in _str_list(entry, "constraints", index):
            unit_version.add_constraint(catalog.parse_constraint(text))

        catalog.add_unit_version(unit_version)

    return catalog


def _require_str(entry: Mapping[str, Any], key: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise CatalogLoadError(f"'{key}' must be a non-empty string", entry=index)
    return value.strip()


def _str_list(entry: Mapping[str, Any], key: str, index: int) -> List[str]:
    value = entry.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise CatalogLoadError(f"'{key}' must be a list of strings", entry=index)
    return [v.strip() for v in value]
