"""
Directive Tokenizer

Turns raw text into a stream of display tokens. Each token occupies exactly
one display unit (one cell of the board): either a literal character or an
inline directive such as "{red}". Directives are atomic: once recognized
they are never split, truncated or re-scanned.

Newlines are not tokens. Callers that care about line structure (the word
wrapper and the legacy encoder) split on them before tokenizing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Union

from .symbols import BLANK, DEFAULT_SYMBOLS, SymbolTable

DIRECTIVE_OPEN = "{"
DIRECTIVE_CLOSE = "}"


@dataclass(frozen=True)
class LiteralToken:
    """A single display character, already upper-cased."""

    char: str

    @property
    def symbol(self) -> str:
        return self.char

    @property
    def is_blank(self) -> bool:
        return self.char == BLANK


@dataclass(frozen=True)
class DirectiveToken:
    """An atomic named unit (a color square), canonical lower-case name."""

    name: str

    @property
    def symbol(self) -> str:
        return DIRECTIVE_OPEN + self.name + DIRECTIVE_CLOSE

    @property
    def is_blank(self) -> bool:
        return False


Token = Union[LiteralToken, DirectiveToken]

BLANK_TOKEN = LiteralToken(BLANK)


def iter_tokens(text: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> Iterator[Token]:
    """
    Scan text left to right, yielding tokens.

    A "{" starts a directive scan up to the next "}". A recognized name yields
    one DirectiveToken and the scan resumes after the brace; otherwise the "{"
    is treated as an ordinary character. Characters missing from the symbol
    table are dropped.
    """
    i = 0
    length = len(text)
    while i < length:
        char = text[i]

        if char == DIRECTIVE_OPEN:
            end = text.find(DIRECTIVE_CLOSE, i + 1)
            if end != -1:
                name = symbols.canonical_directive(text[i + 1 : end])
                if name is not None:
                    yield DirectiveToken(name)
                    i = end + 1
                    continue

        if char != "\n":
            upper = char.upper()
            # "ß".upper() and friends expand to several characters
            if len(upper) == 1 and symbols.has_literal(upper):
                yield LiteralToken(upper)
        i += 1


def tokenize(text: str, symbols: SymbolTable = DEFAULT_SYMBOLS) -> List[Token]:
    return list(iter_tokens(text, symbols))


def effective_length(tokens: Iterable[Token]) -> int:
    """Number of display units; every token, directive or literal, counts once."""
    return sum(1 for _ in tokens)


def render_tokens(tokens: Iterable[Token]) -> str:
    """Human-readable form, directives rendered as "{name}"."""
    return "".join(token.symbol for token in tokens)
