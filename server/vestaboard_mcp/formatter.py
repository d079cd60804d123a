"""
Text Formatter - layout pipeline

raw text -> tokenizer -> word wrapper -> overflow resolver -> alignment
-> encoder

Every call is a pure function of (text, options): no state is kept between
calls and the symbol table is read-only, so concurrent calls are safe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

import numpy as np

from .alignment import (
    HORIZONTAL_ALIGNMENTS,
    VERTICAL_ALIGNMENTS,
    HorizontalAlign,
    VerticalAlign,
    align_lines,
)
from .codec import GridCodec
from .overflow import OVERFLOW_POLICIES, OverflowPolicy, resolve_overflow
from .symbols import DEFAULT_SYMBOLS, SymbolTable
from .tokenizer import render_tokens
from .validation import validate_choice
from .wrapper import Line, wrap_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormattingOptions:
    horizontal_align: HorizontalAlign = "left"
    vertical_align: VerticalAlign = "top"
    overflow_handling: OverflowPolicy = "truncate"

    # camelCase names used on the RPC surface
    FIELD_ALIASES = {
        "horizontalAlign": "horizontal_align",
        "verticalAlign": "vertical_align",
        "overflowHandling": "overflow_handling",
    }

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "horizontal_align",
            validate_choice("horizontalAlign", self.horizontal_align, HORIZONTAL_ALIGNMENTS),
        )
        object.__setattr__(
            self,
            "vertical_align",
            validate_choice("verticalAlign", self.vertical_align, VERTICAL_ALIGNMENTS),
        )
        object.__setattr__(
            self,
            "overflow_handling",
            validate_choice("overflowHandling", self.overflow_handling, OVERFLOW_POLICIES),
        )

    @classmethod
    def from_mapping(
        cls, values: Optional[Mapping[str, Any]], base: Optional[FormattingOptions] = None
    ) -> FormattingOptions:
        """
        Build options from camelCase or snake_case keys.

        Keys that are absent or None fall back to ``base`` (or the defaults).
        Unrelated keys are ignored.
        """
        base = base or cls()
        merged = {
            "horizontal_align": base.horizontal_align,
            "vertical_align": base.vertical_align,
            "overflow_handling": base.overflow_handling,
        }
        for key, value in (values or {}).items():
            field_name = cls.FIELD_ALIASES.get(key, key)
            if field_name in merged and value is not None:
                merged[field_name] = value
        return cls(**merged)


def layout(
    text: str,
    options: Optional[FormattingOptions] = None,
    symbols: SymbolTable = DEFAULT_SYMBOLS,
) -> List[Line]:
    """
    Lay text out as exactly six lines of exactly 22 tokens.

    Raises:
        OverflowExceeded: If the text needs more than six lines and the
            overflow policy is "error"
    """
    options = options or FormattingOptions()

    lines = wrap_text(text or "", symbols)
    lines = resolve_overflow(lines, options.overflow_handling)
    return align_lines(lines, options.horizontal_align, options.vertical_align)


def format_message(
    text: str,
    options: Optional[FormattingOptions] = None,
    symbols: SymbolTable = DEFAULT_SYMBOLS,
) -> np.ndarray:
    """
    Format free text into a 6x22 code grid.

    Args:
        - text (str): message, may contain newlines and "{color}" directives
        - options (FormattingOptions): alignment and overflow settings
        - symbols (SymbolTable): character set of the board

    Returns:
        np.ndarray: code grid ready for the device API

    Raises:
        OverflowExceeded: on overflow with the "error" policy
    """
    grid = GridCodec(symbols).encode_lines(layout(text, options, symbols))
    logger.debug(f"Formatted message into grid ({np.count_nonzero(grid)} non-blank cells)")
    return grid


def format_text(
    text: str,
    options: Optional[FormattingOptions] = None,
    symbols: SymbolTable = DEFAULT_SYMBOLS,
) -> str:
    """Same layout as format_message, rendered as six newline-joined rows."""
    return "\n".join(render_tokens(line) for line in layout(text, options, symbols))
