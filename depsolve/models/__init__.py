"""
Unified data model exports for depsolve.

This module re-exports the catalog data models so users can import them
directly from ``depsolve.models`` instead of individual submodules.

Example:
    >>> from depsolve.models import Constraint, UnitVersion
"""

from __future__ import annotations

from depsolve.models.constraint import (
    Constraint,
    parse_version_constraint,
    split_constraint,
)
from depsolve.models.unit_version import UnitVersion

__all__ = [
    "Constraint",
    "UnitVersion",
    "parse_version_constraint",
    "split_constraint",
]
