"""
component_5_problem_parser.py

Problem Parser - turns a paint-shop problem description into clauses

Input format (line-oriented):
- Blank lines and lines starting with '#' are ignored
- First remaining line: the width W
- Every further line: one customer, whitespace-separated "position finish"
  pairs with 1-based positions, e.g. "1 G 3 M"

Every syntax violation raises a specific MalformedInputError subclass carrying
the offending line; unreadable sources raise SourceUnavailableError. Parsing
never returns a partial problem.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from component_1_clause_model import Clause, Finish
from component_8_logging_config import get_logger
from paintshop_exceptions import (
    IncompletePairError,
    InvalidFinishError,
    InvalidPositionError,
    InvalidWidthError,
    MissingWidthError,
    MultipleMatteError,
    SourceUnavailableError,
    wrap_exception,
)

logger = get_logger(__name__)

COMMENT_PREFIX = "#"
DEFAULT_MAX_WIDTH = 100000

# Optional sign and ASCII digits only
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass
class PaintshopProblem:
    """
    A parsed problem: width plus the deduplicated customer clauses.

    Attributes:
        width: Number of positions
        clauses: Customer clauses in first-occurrence order
        source: Where the problem came from (file path or '<text>')
        skipped_lines: Line numbers of customers dropped as duplicates or
            as always satisfied
    """

    width: int
    clauses: List[Clause]
    source: str = "<text>"
    skipped_lines: List[int] = field(default_factory=list)

    @property
    def num_customers(self) -> int:
        return len(self.clauses)


def _parse_int(token: str) -> int:
    """Strict decimal integer (raises ValueError otherwise)."""
    if not _INTEGER_PATTERN.fullmatch(token):
        raise ValueError(f"not a decimal integer: {token!r}")
    return int(token)


def _meaningful_lines(lines: Iterable[str]) -> Iterable[Tuple[int, str]]:
    """Yield (line_number, stripped_line) for non-blank, non-comment lines."""
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        yield number, line


def parse_width(line: str, max_width: int = DEFAULT_MAX_WIDTH, line_number: Optional[int] = None) -> int:
    """
    Parse the width line.

    Raises:
        InvalidWidthError: Non-numeric, <= 0 or above max_width
    """
    try:
        width = _parse_int(line)
    except ValueError as e:
        raise InvalidWidthError(
            "Invalid width", line=line, line_number=line_number, original_exception=e
        )
    if width <= 0 or width > max_width:
        raise InvalidWidthError(
            f"Width value must be between 1 and {max_width}",
            line=line,
            line_number=line_number,
            context={"width": width, "max_width": max_width},
        )
    return width


def parse_customer_line(
    line: str, width: int, line_number: Optional[int] = None
) -> Optional[Clause]:
    """
    Parse one customer line into a Clause.

    Returns:
        The clause, or None if the customer accepts both finishes at some
        position (such a customer is always satisfied)

    Raises:
        InvalidPositionError: Non-numeric or out-of-range position
        InvalidFinishError: Finish other than G / M
        IncompletePairError: Trailing position without finish
        MultipleMatteError: Matte required at more than one position
    """
    tokens = line.split()
    literals: Dict[int, Finish] = {}
    matte_positions: Set[int] = set()
    always_satisfied = False

    for index in range(0, len(tokens), 2):
        position_token = tokens[index]
        try:
            position = _parse_int(position_token)
        except ValueError as e:
            raise InvalidPositionError(
                f"Invalid number '{position_token}'",
                line=line,
                line_number=line_number,
                original_exception=e,
            )
        if position < 1 or position > width:
            raise InvalidPositionError(
                f"Number '{position}' out of range",
                line=line,
                line_number=line_number,
                context={"position": position, "width": width},
            )

        if index + 1 >= len(tokens):
            raise IncompletePairError(
                f"Position '{position}' has no finish",
                line=line,
                line_number=line_number,
            )

        finish_token = tokens[index + 1]
        try:
            finish = Finish.from_letter(finish_token)
        except ValueError as e:
            raise InvalidFinishError(
                f"Invalid token '{finish_token}'",
                line=line,
                line_number=line_number,
                original_exception=e,
            )

        previous = literals.get(position - 1)
        if previous is not None and previous is not finish:
            always_satisfied = True
        literals[position - 1] = finish
        if finish is Finish.MATTE:
            matte_positions.add(position)

    if len(matte_positions) > 1:
        raise MultipleMatteError(
            "Customer may not require more than one Matte",
            line=line,
            line_number=line_number,
            context={"matte_positions": sorted(matte_positions)},
        )

    if always_satisfied:
        logger.debug(
            "Customer accepts both finishes at one position, ignoring",
            extra={"line_number": line_number},
        )
        return None

    return Clause.from_literals(width, literals)


def parse_lines(
    lines: Iterable[str], max_width: int = DEFAULT_MAX_WIDTH, source: str = "<text>"
) -> PaintshopProblem:
    """
    Parse an iterable of raw lines.

    Raises:
        MalformedInputError subclasses on any syntax violation
    """
    width: Optional[int] = None
    clauses: List[Clause] = []
    seen: Set[Clause] = set()
    skipped: List[int] = []

    for line_number, line in _meaningful_lines(lines):
        if width is None:
            width = parse_width(line, max_width=max_width, line_number=line_number)
            continue
        clause = parse_customer_line(line, width, line_number=line_number)
        if clause is None or clause in seen:
            skipped.append(line_number)
            continue
        seen.add(clause)
        clauses.append(clause)

    if width is None:
        raise MissingWidthError("Missing width line", context={"source": source})

    problem = PaintshopProblem(
        width=width, clauses=clauses, source=source, skipped_lines=skipped
    )
    logger.info(
        "Problem parsed",
        extra={
            "source": source,
            "width": width,
            "customers": problem.num_customers,
            "skipped": len(skipped),
        },
    )
    return problem


def parse_problem_text(text: str, max_width: int = DEFAULT_MAX_WIDTH) -> PaintshopProblem:
    """Parse a problem given as a string."""
    return parse_lines(text.splitlines(), max_width=max_width)


def parse_problem_file(
    path: Union[str, Path], max_width: int = DEFAULT_MAX_WIDTH
) -> PaintshopProblem:
    """
    Read and parse a problem file.

    Raises:
        SourceUnavailableError: File missing or unreadable
        MalformedInputError subclasses: Syntax violation
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise wrap_exception(
            e, SourceUnavailableError, "Cannot read problem file", path=str(path)
        )
    return parse_lines(lines, max_width=max_width, source=str(path))
