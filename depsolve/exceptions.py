"""
Custom exception hierarchy for depsolve.

This module defines structured exception types used across depsolve.
All exceptions inherit from :class:`DepSolveError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Errors fall in three groups:

- catalog construction errors (duplicate registration, sealed catalog,
  cyclic exact pins, unreadable catalog files) which are programmer or
  input errors and surface immediately;
- constraint/version syntax errors;
- resolution errors, raised only once every search branch is exhausted
  or the search was aborted.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence, Tuple


class DepSolveError(Exception):
    """Base exception for all depsolve errors.

    All depsolve-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


# ---------------------------------------------------------------------------
# Catalog construction
# ---------------------------------------------------------------------------


class DuplicateRegistrationError(DepSolveError):
    """Raised when the same unit, dependency or constraint is registered twice.

    Args:
        message: Error description.
        name: Package name involved.
        version: Version involved, if any.
        item: The duplicated dependency name or constraint string.
    """

    __slots__ = ("name", "version", "item")

    def __init__(
        self,
        message: str,
        *,
        name: Optional[str] = None,
        version: Optional[str] = None,
        item: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", name)
        _add_if(details, "version", version)
        _add_if(details, "item", item)

        super().__init__(message, details)

        self.name = name
        self.version = version
        self.item = item


class CatalogError(DepSolveError):
    """Base class for catalog-level failures."""


class CatalogSealedError(CatalogError):
    """Raised when registering into a catalog that resolution already uses."""


class CyclicExactPinError(CatalogError):
    """Raised when units pin each other exactly in a cycle.

    Args:
        message: Error description.
        cycle: Units forming the cycle, as ``name@version`` strings, with the
            first unit repeated at the end.
    """

    __slots__ = ("cycle",)

    def __init__(self, message: str, *, cycle: Sequence[str] = ()) -> None:
        details: MutableMapping[str, Any] = {}
        if cycle:
            details["cycle"] = " -> ".join(cycle)

        super().__init__(message, details)

        self.cycle: Tuple[str, ...] = tuple(cycle)


class CatalogLoadError(CatalogError):
    """Raised when a catalog file cannot be read or has invalid entries.

    Args:
        message: Error description.
        file_path: Path to the catalog file.
        entry: Index of the offending ``[[package]]`` entry.
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "entry", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        entry: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "entry", entry)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.entry = entry
        self.original_error = original_error


# ---------------------------------------------------------------------------
# Syntax
# ---------------------------------------------------------------------------


class ConstraintParseError(DepSolveError):
    """Raised when a constraint string cannot be parsed.

    Args:
        message: Error description.
        text: The raw constraint text.
    """

    __slots__ = ("text",)

    def __init__(self, message: str, *, text: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "text", text)

        super().__init__(message, details)

        self.text = text


class InvalidVersionError(DepSolveError):
    """Raised when the version comparator rejects a version string."""

    __slots__ = ("version",)

    def __init__(self, message: str, *, version: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "version", version)

        super().__init__(message, details)

        self.version = version


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(DepSolveError):
    """Base class for failures to produce a resolution."""


class UnresolvableError(ResolutionError):
    """Raised when no assignment satisfies every constraint.

    Args:
        message: Representative diagnostic collected during the search.
        package: A package involved in the failure.
        states_explored: Number of search states popped before giving up.
    """

    __slots__ = ("package", "states_explored")

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        states_explored: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", package)
        _add_if(details, "states_explored", states_explored)

        super().__init__(message, details)

        self.package = package
        self.states_explored = states_explored


class MissingVersionError(ResolutionError):
    """Raised when an exact constraint names a version absent from the catalog.

    Args:
        message: Error description.
        package: Package named by the constraint.
        version: Version named by the constraint.
    """

    __slots__ = ("package", "version")

    def __init__(
        self,
        message: str,
        *,
        package: Optional[str] = None,
        version: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", package)
        _add_if(details, "version", version)

        super().__init__(message, details)

        self.package = package
        self.version = version


class ResolutionAbortedError(ResolutionError):
    """Raised when a cancellation check stops the search.

    Args:
        message: Error description.
        reason: ``"max_states"``, ``"timeout"`` or ``"cancelled"``.
        states_explored: Number of search states popped before stopping.
    """

    __slots__ = ("reason", "states_explored")

    def __init__(
        self,
        message: str,
        *,
        reason: Optional[str] = None,
        states_explored: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "reason", reason)
        _add_if(details, "states_explored", states_explored)

        super().__init__(message, details)

        self.reason = reason
        self.states_explored = states_explored


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(DepSolveError):
    """Raised when a configuration file is invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Offending option name.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
