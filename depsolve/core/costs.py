"""Ready-made cost and estimate functions for the resolver.

The search orders states by ``cost_function(choices) +
estimate_cost_function(state)``. Both are plain callables; anything with
the right signature works. The defaults below return zero, which turns
the search into a breadth order biased toward deeper states.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterable

from depsolve.models.unit_version import UnitVersion
from depsolve.utils.version_utils import sort_versions

if TYPE_CHECKING:
    from depsolve.core.state import SearchState
    from depsolve.core.catalog import Catalog

CostFunction = Callable[[Iterable[UnitVersion]], float]
EstimateFunction = Callable[["SearchState"], float]


def zero_cost(choices: Iterable[UnitVersion]) -> float:
    return 0


def zero_estimate(state: "SearchState") -> float:
    return 0


def prefer_latest_cost(catalog: "Catalog") -> CostFunction:
    """Build a cost function that charges for every release left behind.

    Each chosen unit costs its rank among the registered versions of its
    package, newest first: the latest version costs 0, the one before it
    1, and so on. Units unknown to the catalog cost nothing.

    Args:
        catalog: Catalog whose versions define the ranking. It must not
            change afterwards; rankings are computed once per package.

    Example::

        >>> cost = prefer_latest_cost(catalog)
        >>> cost([catalog.get_unit_version("p", "1.0.0")])
        1
    """
    ranks: Dict[str, Dict[str, int]] = {}

    def _rank(unit_version: UnitVersion) -> int:
        table = ranks.get(unit_version.name)
        if table is None:
            versions = [uv.version for uv in catalog.unit_versions(unit_version.name)]
            ordered = sort_versions(catalog.comparator, versions, newest_first=True)
            table = {version: index for index, version in enumerate(ordered)}
            ranks[unit_version.name] = table
        return table.get(unit_version.version, 0)

    def cost(choices: Iterable[UnitVersion]) -> float:
        return sum(_rank(uv) for uv in choices)

    return cost
