"""
tests/test_paintshop_exceptions.py
==================================
Tests for the exception hierarchy.
"""

import pytest

from paintshop_exceptions import (
    ConfigurationException,
    IncompletePairError,
    InvalidFinishError,
    InvalidPositionError,
    InvalidWidthError,
    MalformedInputError,
    MissingWidthError,
    MultipleMatteError,
    NoSolutionError,
    PaintshopException,
    SourceUnavailableError,
    get_user_friendly_message,
    wrap_exception,
)


class TestHierarchy:
    """Test exception classes."""

    @pytest.mark.parametrize(
        "cls",
        [
            MissingWidthError,
            InvalidWidthError,
            InvalidPositionError,
            InvalidFinishError,
            IncompletePairError,
            MultipleMatteError,
        ],
    )
    def test_parse_errors_are_malformed_input(self, cls):
        """Test every parse error derives from MalformedInputError."""
        assert issubclass(cls, MalformedInputError)
        assert issubclass(cls, PaintshopException)

    def test_other_errors_derive_from_base(self):
        """Test the remaining classes."""
        for cls in (SourceUnavailableError, NoSolutionError, ConfigurationException):
            assert issubclass(cls, PaintshopException)
            assert not issubclass(cls, MalformedInputError)

    def test_context_and_str(self):
        """Test context rendering."""
        exc = PaintshopException("Something failed", context={"width": 3})
        assert exc.message == "Something failed"
        assert str(exc) == "Something failed | width=3"
        assert repr(exc) == "PaintshopException(message='Something failed', context={'width': 3})"

    def test_str_with_original_exception(self):
        """Test the cause is appended."""
        exc = PaintshopException("Wrapped", original_exception=ValueError("bad"))
        assert str(exc) == "Wrapped | caused by ValueError: bad"

    def test_malformed_input_context(self):
        """Test line information lands in the context."""
        exc = InvalidFinishError("Invalid token 'X'", line="1 X", line_number=3)
        assert exc.line == "1 X"
        assert exc.line_number == 3
        assert exc.context == {"cause": "invalid_finish", "line": "1 X", "line_number": 3}


class TestWrapException:
    """Test wrap_exception."""

    def test_wraps_low_level_exception(self):
        """Test wrapping keeps the original and context."""
        original = FileNotFoundError("gone")
        wrapped = wrap_exception(original, SourceUnavailableError, "Cannot read", path="x.txt")
        assert isinstance(wrapped, SourceUnavailableError)
        assert wrapped.original_exception is original
        assert wrapped.context == {"path": "x.txt"}

    def test_passes_through_paintshop_exceptions(self):
        """Test specific errors are never downgraded."""
        specific = MultipleMatteError("Too much Matte")
        assert wrap_exception(specific, ConfigurationException, "ignored") is specific


class TestUserFriendlyMessage:
    """Test get_user_friendly_message."""

    def test_malformed_input(self):
        """Test parse errors include line number and text."""
        exc = InvalidPositionError("Number '9' out of range", line="9 G", line_number=2)
        assert (
            get_user_friendly_message(exc)
            == "Error parsing input (line 2): Number '9' out of range: 9 G"
        )

    def test_malformed_input_without_line(self):
        """Test errors not tied to a line."""
        assert get_user_friendly_message(MissingWidthError("Missing width line")) == (
            "Error parsing input: Missing width line"
        )

    def test_source_unavailable(self):
        """Test file errors show the path and cause."""
        exc = wrap_exception(
            FileNotFoundError("No such file"), SourceUnavailableError, "Cannot read", path="in.txt"
        )
        assert get_user_friendly_message(exc) == "Error reading input file: in.txt\n  No such file"

    def test_no_solution(self):
        """Test the no-solution message."""
        assert get_user_friendly_message(NoSolutionError("none")) == "No solution"

    def test_configuration(self):
        """Test configuration errors."""
        exc = ConfigurationException("Unknown branching strategy: x")
        assert get_user_friendly_message(exc) == "Configuration error: Unknown branching strategy: x"

    def test_unexpected(self):
        """Test foreign exceptions."""
        assert get_user_friendly_message(RuntimeError("boom")) == (
            "Unexpected error (RuntimeError): boom"
        )
