"""
depsolve — package version resolution engine.

Given the packages an application needs, the constraints it places on
them, and a catalog of known package versions with their own
dependencies and constraints, depsolve picks exactly one version per
package so that every constraint holds, or reports why none exists.

    >>> from depsolve import Catalog, Resolver, UnitVersion
    >>> catalog = Catalog()
    >>> catalog.add_unit_version(UnitVersion("lib", "1.0.0"))
    >>> Resolver(catalog).resolve(["lib"]).versions()
    {'lib': '1.0.0'}
"""

from __future__ import annotations

from depsolve.__version__ import __version__
from depsolve.models import Constraint, UnitVersion
from depsolve.core import (
    Catalog,
    Resolution,
    ResolveOptions,
    Resolver,
    load_catalog,
    prefer_latest_cost,
)
from depsolve.exceptions import (
    DepSolveError,
    MissingVersionError,
    ResolutionAbortedError,
    UnresolvableError,
)

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depsolve Contributors"
__license__ = "Apache-2.0"
__description__ = "Best-first package version resolution with exact-pin propagation."

__all__ = [
    "__version__",
    "Catalog",
    "Constraint",
    "UnitVersion",
    "Resolver",
    "ResolveOptions",
    "Resolution",
    "load_catalog",
    "prefer_latest_cost",
    "DepSolveError",
    "UnresolvableError",
    "MissingVersionError",
    "ResolutionAbortedError",
]
