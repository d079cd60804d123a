"""
Word Wrapper

Packs the words of a message into lines no wider than the board.

Words are whitespace-delimited and measured in display units (see
tokenizer.effective_length). Words are packed greedily with a single blank
between them; a word wider than a whole line is cut into full-width chunks.
Explicit newlines in the input are hard breaks.
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence

from .symbols import DEFAULT_SYMBOLS, GRID_COLS, SymbolTable
from .tokenizer import BLANK_TOKEN, Token, tokenize

logger = logging.getLogger(__name__)

Line = List[Token]

_WORD_SEPARATORS = re.compile(r"[^\S\n]+")


def split_words(segment: str) -> List[str]:
    """Split one newline-free segment on runs of whitespace."""
    return [w for w in _WORD_SEPARATORS.split(segment) if w]


def chunk_tokens(tokens: Sequence[Token], width: int = GRID_COLS) -> List[Line]:
    """Cut a token sequence into consecutive chunks of at most ``width`` units."""
    return [list(tokens[i : i + width]) for i in range(0, len(tokens), width)]


class _LinePacker:
    """Greedy packer holding the line currently being filled."""

    def __init__(self, width: int):
        self.width = width
        self.lines: List[Line] = []
        self.current: Line = []

    def add_word(self, word: Line) -> None:
        separator = 1 if self.current else 0
        # exact fit packs rather than breaks
        if len(self.current) + separator + len(word) <= self.width:
            if separator:
                self.current.append(BLANK_TOKEN)
            self.current.extend(word)
            return

        if self.current:
            self.flush()

        if len(word) > self.width:
            *full, tail = chunk_tokens(word, self.width)
            self.lines.extend(full)
            self.current = tail
        else:
            self.current = list(word)

    def flush(self) -> None:
        self.lines.append(self.current)
        self.current = []


def wrap_text(
    text: str, symbols: SymbolTable = DEFAULT_SYMBOLS, width: int = GRID_COLS
) -> List[Line]:
    """
    Wrap text into lines of at most ``width`` display units.

    Every newline ends the current line, so blank lines between paragraphs are
    kept as empty lines. Blank lines after the last piece of content are
    dropped, which makes whitespace-only input produce no lines at all.

    Args:
        - text (str): raw message text, may contain newlines and directives
        - symbols (SymbolTable): table used to tokenize each word
        - width (int): maximum effective length of a line

    Returns:
        List[Line]: lines of tokens, none longer than ``width``
    """
    packer = _LinePacker(width)
    segments = text.replace("\r\n", "\n").split("\n")

    for index, segment in enumerate(segments):
        for raw_word in split_words(segment):
            word = tokenize(raw_word, symbols)
            if word:
                packer.add_word(word)
        if index < len(segments) - 1:
            packer.flush()

    if packer.current:
        packer.flush()

    lines = packer.lines
    while lines and not lines[-1]:
        lines.pop()

    logger.debug(f"Wrapped {len(text)} chars into {len(lines)} lines")
    return lines
