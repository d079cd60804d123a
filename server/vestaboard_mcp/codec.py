"""
Grid Encoder/Decoder

Converts between laid-out token lines and the 6x22 integer code matrix the
board consumes. Pure logic, no I/O.

Grid format: numpy int array, shape (GRID_ROWS, GRID_COLS), row 0 at the
top, column 0 at the left, blank cells hold BLANK_CODE.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from .symbols import BLANK_CODE, DEFAULT_SYMBOLS, GRID_COLS, GRID_ROWS, SymbolTable
from .tokenizer import tokenize
from .validation import validate_grid
from .wrapper import Line, chunk_tokens

UNKNOWN_GLYPH = "?"


class GridCodec:
    """
    Pure encoder/decoder for Vestaboard code grids.

    Args:
        - symbols (SymbolTable): symbol table used in both directions
    """

    def __init__(self, symbols: SymbolTable = DEFAULT_SYMBOLS):
        self.symbols = symbols

    def blank_grid(self) -> np.ndarray:
        return np.full((GRID_ROWS, GRID_COLS), BLANK_CODE, dtype=int)

    def encode_lines(self, lines: Sequence[Line]) -> np.ndarray:
        """
        Encode finalized lines into a code grid.

        Args:
            lines: At most GRID_ROWS lines of at most GRID_COLS tokens

        Returns:
            np.ndarray: Code grid, unused cells blank

        Raises:
            UnknownSymbol: If a token has no code in the symbol table
            ValueError: If the lines do not fit the grid
        """
        if len(lines) > GRID_ROWS:
            raise ValueError(f"Expected at most {GRID_ROWS} lines, got {len(lines)}")

        grid = self.blank_grid()
        for row, line in enumerate(lines):
            if len(line) > GRID_COLS:
                raise ValueError(
                    f"Line {row} has {len(line)} units, max is {GRID_COLS}"
                )
            for col, token in enumerate(line):
                grid[row, col] = self.symbols.encode_symbol(token.symbol)
        return grid

    def encode_raw(self, text: str) -> np.ndarray:
        """
        Lay text onto the grid without word wrap or alignment.

        Units are laid left to right, moving to the next row every GRID_COLS
        units, and every newline advances one row. A line that exactly fills
        a row has already moved the cursor down, so the newline after it
        leaves a blank row. Rows past the bottom of the board are discarded.
        """
        rows: list = []
        for segment in text.replace("\r\n", "\n").split("\n"):
            tokens = tokenize(segment, self.symbols)
            chunks = chunk_tokens(tokens)
            if len(tokens) % GRID_COLS == 0:
                # cursor sits at column 0 of a fresh row
                chunks.append([])
            rows.extend(chunks)
            if len(rows) >= GRID_ROWS:
                break
        return self.encode_lines(rows[:GRID_ROWS])

    def decode(self, grid: Any) -> str:
        """
        Render a code grid as six newline-joined rows of text.

        Directives appear as "{name}"; codes missing from the symbol table
        render as UNKNOWN_GLYPH.

        Raises:
            GridValidationError: If the grid is not a 6x22 integer matrix
        """
        array = validate_grid(grid)
        rows = []
        for row in array:
            glyphs = []
            for code in row:
                symbol = self.symbols.decode_code(int(code))
                glyphs.append(UNKNOWN_GLYPH if symbol is None else symbol)
            rows.append("".join(glyphs))
        return "\n".join(rows)


_default_codec = GridCodec()


def encode_lines(lines: Sequence[Line]) -> np.ndarray:
    return _default_codec.encode_lines(lines)


def encode(text: str) -> np.ndarray:
    """Legacy direct path: tokenize and pack text with no wrap or alignment."""
    return _default_codec.encode_raw(text)


def decode(grid: Any) -> str:
    return _default_codec.decode(grid)
