"""
Alignment Engine

Positions a block of at most six lines inside the 6x22 frame. Output always
has exactly GRID_ROWS lines of exactly GRID_COLS tokens, padded with blanks.
"""

from __future__ import annotations

from typing import List, Literal, Sequence

from .symbols import GRID_COLS, GRID_ROWS
from .tokenizer import BLANK_TOKEN
from .wrapper import Line

HorizontalAlign = Literal["left", "center", "right"]
VerticalAlign = Literal["top", "middle", "bottom"]

HORIZONTAL_ALIGNMENTS = ("left", "center", "right")
VERTICAL_ALIGNMENTS = ("top", "middle", "bottom")


def _blanks(count: int) -> Line:
    return [BLANK_TOKEN] * count


def align_line(
    line: Sequence, align: HorizontalAlign = "left", width: int = GRID_COLS
) -> Line:
    """Pad one line to ``width`` tokens; over-long lines are cut on token boundaries."""
    if align not in HORIZONTAL_ALIGNMENTS:
        raise ValueError(f"Unknown horizontal alignment '{align}'")

    tokens = list(line[:width])
    padding = width - len(tokens)

    if align == "right":
        return _blanks(padding) + tokens
    if align == "center":
        left = padding // 2
        return _blanks(left) + tokens + _blanks(padding - left)
    return tokens + _blanks(padding)


def align_lines(
    lines: Sequence[Line],
    horizontal: HorizontalAlign = "left",
    vertical: VerticalAlign = "top",
    rows: int = GRID_ROWS,
    width: int = GRID_COLS,
) -> List[Line]:
    """
    Place lines in the frame.

    Args:
        - lines (Sequence[Line]): at most ``rows`` lines (extra lines are dropped)
        - horizontal (HorizontalAlign): per-line alignment
        - vertical (VerticalAlign): placement of the block within the rows
        - rows (int): frame height
        - width (int): frame width

    Returns:
        List[Line]: exactly ``rows`` lines of exactly ``width`` tokens
    """
    if vertical not in VERTICAL_ALIGNMENTS:
        raise ValueError(f"Unknown vertical alignment '{vertical}'")

    block = list(lines[:rows])
    empty = rows - len(block)

    if vertical == "bottom":
        above = empty
    elif vertical == "middle":
        above = empty // 2
    else:
        above = 0
    below = empty - above

    placed: List[Sequence] = [[]] * above + block + [[]] * below
    return [align_line(line, horizontal, width) for line in placed]
