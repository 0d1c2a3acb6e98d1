"""
Core functionality exports for depsolve.

This module provides convenient access to the resolution engine:

    from depsolve.core import Catalog, Resolver, ResolveOptions

The catalog owns unit versions and interned constraints, propagation
computes forced choices, and the resolver searches over the rest.
"""

from __future__ import annotations

from depsolve.core.catalog import Catalog
from depsolve.core.state import SearchState
from depsolve.core.loader import build_catalog, load_catalog
from depsolve.core.persistent import ChoicesList, ConstraintsList, DependenciesList
from depsolve.core.propagation import propagate_exact_dependencies
from depsolve.core.costs import prefer_latest_cost, zero_cost, zero_estimate
from depsolve.core.resolver import Resolution, ResolveOptions, Resolver

__all__ = [
    "Catalog",
    "SearchState",
    "DependenciesList",
    "ConstraintsList",
    "ChoicesList",
    "propagate_exact_dependencies",
    "Resolver",
    "ResolveOptions",
    "Resolution",
    "zero_cost",
    "zero_estimate",
    "prefer_latest_cost",
    "load_catalog",
    "build_catalog",
]
