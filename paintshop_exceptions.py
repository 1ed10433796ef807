"""
paintshop_exceptions.py

Exception hierarchy for Paintshop.

All exceptions derive from PaintshopException and carry a `context` dict plus
the optional low-level `original_exception`. The search engine itself never
raises: an unsatisfiable problem is a regular result. These exceptions cover
the surfaces around it (reading, parsing, configuration, strict callers).
"""

from typing import Any, Dict, Optional, Type


class PaintshopException(Exception):
    """Base exception for all Paintshop errors."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.original_exception = original_exception

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append(", ".join(f"{k}={v}" for k, v in self.context.items()))
        if self.original_exception is not None:
            parts.append(
                f"caused by {type(self.original_exception).__name__}: "
                f"{self.original_exception}"
            )
        return " | ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"context={self.context!r})"
        )


# ============================================================================
# Input
# ============================================================================


class SourceUnavailableError(PaintshopException):
    """The problem description could not be read."""


class MalformedInputError(PaintshopException):
    """
    The problem description violates the width/customer syntax.

    Attributes:
        line: Offending line (stripped)
        line_number: 1-based line number in the source, if known
        cause: Short machine-readable reason
    """

    cause = "malformed_input"

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None,
    ):
        merged = dict(context or {})
        merged.setdefault("cause", self.cause)
        if line is not None:
            merged.setdefault("line", line)
        if line_number is not None:
            merged.setdefault("line_number", line_number)
        super().__init__(message, context=merged, original_exception=original_exception)
        self.line = line
        self.line_number = line_number


class MissingWidthError(MalformedInputError):
    """No width line found before end of input."""

    cause = "missing_width"


class InvalidWidthError(MalformedInputError):
    """Width line is not an integer in the accepted range."""

    cause = "invalid_width"


class InvalidPositionError(MalformedInputError):
    """Position token is non-numeric or outside [1, width]."""

    cause = "invalid_position"


class InvalidFinishError(MalformedInputError):
    """Finish token is neither G nor M."""

    cause = "invalid_finish"


class IncompletePairError(MalformedInputError):
    """A position token without a following finish token."""

    cause = "incomplete_pair"


class MultipleMatteError(MalformedInputError):
    """A customer requires Matte at more than one position."""

    cause = "multiple_matte"


# ============================================================================
# Outcome / Configuration
# ============================================================================


class NoSolutionError(PaintshopException):
    """Search exhausted without a valid assignment (strict callers only)."""


class ConfigurationException(PaintshopException):
    """Invalid configuration value or configuration file."""


# ============================================================================
# Helpers
# ============================================================================


def wrap_exception(
    exc: BaseException,
    exception_class: Type[PaintshopException],
    message: str,
    **context: Any,
) -> PaintshopException:
    """
    Wrap a low-level exception into the Paintshop hierarchy.

    Paintshop exceptions pass through unchanged so that specific errors are
    never downgraded to a generic one.

    Example:
        >>> try:
        ...     open(path)
        ... except OSError as e:
        ...     raise wrap_exception(e, SourceUnavailableError, "Cannot read", path=path)
    """
    if isinstance(exc, PaintshopException):
        return exc
    return exception_class(message, context=context, original_exception=exc)


def get_user_friendly_message(exc: BaseException) -> str:
    """One-line message suitable for stderr."""
    if isinstance(exc, MalformedInputError):
        where = f" (line {exc.line_number})" if exc.line_number else ""
        if exc.line is not None:
            return f"Error parsing input{where}: {exc.message}: {exc.line}"
        return f"Error parsing input{where}: {exc.message}"
    if isinstance(exc, SourceUnavailableError):
        path = exc.context.get("path")
        detail = (
            f"\n  {exc.original_exception}" if exc.original_exception is not None else ""
        )
        if path:
            return f"Error reading input file: {path}{detail}"
        return f"Error reading input: {exc.message}{detail}"
    if isinstance(exc, NoSolutionError):
        return "No solution"
    if isinstance(exc, ConfigurationException):
        return f"Configuration error: {exc.message}"
    if isinstance(exc, PaintshopException):
        return exc.message
    return f"Unexpected error ({type(exc).__name__}): {exc}"
