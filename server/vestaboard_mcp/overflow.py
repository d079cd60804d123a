"""
Overflow Resolver

Brings a wrapped message down to the board's row count according to one of
three policies:

- truncate: keep the first rows, drop the rest silently
- ellipsis: keep the first rows and end the last kept row with "..."
- error: refuse, raising OverflowExceeded
"""

from __future__ import annotations

import logging
from typing import List, Literal, Sequence

from .symbols import GRID_COLS, GRID_ROWS, LayoutError
from .tokenizer import LiteralToken
from .wrapper import Line

logger = logging.getLogger(__name__)

OverflowPolicy = Literal["truncate", "ellipsis", "error"]
OVERFLOW_POLICIES = ("truncate", "ellipsis", "error")

ELLIPSIS: Line = [LiteralToken("."), LiteralToken("."), LiteralToken(".")]


class OverflowExceeded(LayoutError):
    """Raised when text needs more rows than the board has and policy is "error"."""

    def __init__(self, line_count: int, limit: int = GRID_ROWS):
        self.line_count = line_count
        self.limit = limit
        super().__init__(
            f"Text exceeds display capacity: {line_count} lines (max: {limit})"
        )


def append_ellipsis(line: Sequence, width: int = GRID_COLS) -> Line:
    """
    End a line with the ellipsis marker, dropping trailing tokens if needed.

    Tokens are removed whole, so a directive is either kept or dropped but
    never cut.
    """
    keep = max(0, width - len(ELLIPSIS))
    head = list(line) if len(line) <= keep else list(line[:keep])
    return head + list(ELLIPSIS)


def resolve_overflow(
    lines: Sequence[Line],
    policy: OverflowPolicy = "truncate",
    max_lines: int = GRID_ROWS,
    width: int = GRID_COLS,
) -> List[Line]:
    """
    Apply an overflow policy to wrapped lines.

    Args:
        - lines (Sequence[Line]): output of the word wrapper
        - policy (OverflowPolicy): "truncate", "ellipsis" or "error"
        - max_lines (int): number of rows available
        - width (int): number of columns available

    Returns:
        List[Line]: at most ``max_lines`` lines

    Raises:
        OverflowExceeded: if there are too many lines and policy is "error"
        ValueError: for an unknown policy
    """
    if policy not in OVERFLOW_POLICIES:
        raise ValueError(f"Unknown overflow policy '{policy}'")

    if len(lines) <= max_lines:
        return [list(line) for line in lines]

    logger.debug(f"Overflow: {len(lines)} lines > {max_lines}, policy={policy}")

    if policy == "error":
        raise OverflowExceeded(len(lines), max_lines)

    kept = [list(line) for line in lines[:max_lines]]
    if policy == "ellipsis" and kept:
        kept[-1] = append_ellipsis(kept[-1], width)
    return kept
