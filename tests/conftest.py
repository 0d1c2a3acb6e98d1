"""Shared fixtures for the depsolve test suite."""

from __future__ import annotations

import logging
from typing import Callable, Generator, Iterable, Optional

import pytest

from depsolve.core.catalog import Catalog
from depsolve.models.unit_version import UnitVersion
from depsolve.utils.console import reconfigure_console

AddUnit = Callable[..., UnitVersion]


@pytest.fixture(autouse=True)
def reset_depsolve_logging() -> Generator[None, None, None]:
    """Undo any handler installed by ``setup_logging`` during a test.

    CLI tests configure logging against streams that are closed once the
    test ends; leaving those handlers around breaks later tests.
    """
    yield
    for name in ("depsolve", "depsolve.search"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    import depsolve.utils.logger as logger_module

    logger_module._logging_configured = False
    reconfigure_console()


@pytest.fixture
def catalog() -> Catalog:
    """Provide an empty catalog using the default comparator."""
    return Catalog()


@pytest.fixture
def add_unit(catalog: Catalog) -> AddUnit:
    """Return a helper registering a unit version in ``catalog``.

    Example::

        add_unit("a", "1.0.0", deps=["b"], constraints=["b@=1.0.0"])
    """

    def _add(
        name: str,
        version: str,
        ecv: Optional[str] = None,
        *,
        deps: Iterable[str] = (),
        constraints: Iterable[str] = (),
    ) -> UnitVersion:
        unit_version = UnitVersion(name, version, ecv)
        for dep in deps:
            unit_version.add_dependency(dep)
        for text in constraints:
            unit_version.add_constraint(catalog.parse_constraint(text))
        catalog.add_unit_version(unit_version)
        return unit_version

    return _add
