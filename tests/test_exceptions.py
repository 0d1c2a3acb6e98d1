from __future__ import annotations

import pytest

from depsolve.exceptions import (
    CatalogError,
    CatalogLoadError,
    CatalogSealedError,
    ConfigError,
    ConstraintParseError,
    CyclicExactPinError,
    DepSolveError,
    DuplicateRegistrationError,
    InvalidVersionError,
    MissingVersionError,
    ResolutionAbortedError,
    ResolutionError,
    UnresolvableError,
)


@pytest.mark.unit
class TestDepSolveError:
    """Tests for the base exception."""

    def test_message_only(self) -> None:
        exc = DepSolveError("boom")

        assert str(exc) == "boom"
        assert exc.details == {}

    def test_details_rendered(self) -> None:
        exc = DepSolveError("boom", {"package": "a", "version": "1.0.0"})

        assert str(exc) == "boom (package=a, version=1.0.0)"

    def test_details_copied(self) -> None:
        source = {"k": 1}
        exc = DepSolveError("boom", source)
        exc.details["k"] = 2

        assert source == {"k": 1}

    def test_repr(self) -> None:
        assert repr(DepSolveError("boom")) == "DepSolveError(message='boom', details={})"


@pytest.mark.unit
class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_type, parent",
        [
            (DuplicateRegistrationError, DepSolveError),
            (CatalogSealedError, CatalogError),
            (CyclicExactPinError, CatalogError),
            (CatalogLoadError, CatalogError),
            (ConstraintParseError, DepSolveError),
            (InvalidVersionError, DepSolveError),
            (UnresolvableError, ResolutionError),
            (MissingVersionError, ResolutionError),
            (ResolutionAbortedError, ResolutionError),
            (ConfigError, DepSolveError),
            (ResolutionError, DepSolveError),
        ],
    )
    def test_subclass(self, exc_type: type, parent: type) -> None:
        assert issubclass(exc_type, parent)


@pytest.mark.unit
class TestStructuredDetails:
    """Tests for keyword metadata on subclasses."""

    def test_none_values_omitted(self) -> None:
        exc = UnresolvableError("Couldn't resolve")

        assert exc.details == {}
        assert exc.package is None

    def test_unresolvable(self) -> None:
        exc = UnresolvableError("nope", package="a", states_explored=4)

        assert exc.details == {"package": "a", "states_explored": 4}

    def test_cycle_joined(self) -> None:
        exc = CyclicExactPinError("cycle", cycle=["a@1", "b@1", "a@1"])

        assert exc.details["cycle"] == "a@1 -> b@1 -> a@1"
        assert exc.cycle == ("a@1", "b@1", "a@1")

    def test_catalog_load_error_keeps_original(self) -> None:
        original = ValueError("bad")
        exc = CatalogLoadError("cannot load", file_path="c.toml", original_error=original)

        assert exc.original_error is original
        assert exc.details == {"path": "c.toml", "original_error": "bad"}

    def test_aborted(self) -> None:
        exc = ResolutionAbortedError("stop", reason="timeout", states_explored=0)

        assert exc.details == {"reason": "timeout", "states_explored": 0}
