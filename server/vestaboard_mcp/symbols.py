"""
Symbol Table

Static, read-only mapping between display symbols and the integer codes the
Vestaboard understands. A symbol is either a single literal character
("A", "7", "?") or a named color directive ("red", "blue", ...).

The table is built once at import time and shared by every layout call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional


GRID_ROWS = 6
GRID_COLS = 22

BLANK = " "
BLANK_CODE = 0

COLOR_DIRECTIVES: Dict[str, int] = {
    "red": 63,
    "orange": 64,
    "yellow": 65,
    "green": 66,
    "blue": 67,
    "violet": 68,
    "white": 69,
}


class LayoutError(Exception):
    """Base exception for text layout failures."""

    pass


class UnknownSymbol(LayoutError):
    """Raised when a token has no code mapping at encode time."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No display code for symbol {symbol!r}")


def _default_literals() -> Dict[str, int]:
    literals: Dict[str, int] = {BLANK: BLANK_CODE}
    for i, char in enumerate("ABCDEFGHIJKLMNOPQRSTUVWXYZ"):
        literals[char] = 1 + i
    for i, char in enumerate("0123456789"):
        literals[char] = 27 + i
    literals.update(
        {
            "!": 37,
            "@": 38,
            "#": 39,
            "$": 40,
            "(": 41,
            ")": 42,
            "-": 44,
            "+": 46,
            "&": 47,
            "=": 48,
            ";": 49,
            ":": 50,
            "'": 52,
            '"': 53,
            "%": 54,
            ",": 55,
            ".": 56,
            "/": 59,
            "?": 60,
        }
    )
    return literals


@dataclass(frozen=True)
class SymbolTable:
    """
    Bidirectional symbol <-> code mapping.

    Args:
        - literals (Mapping[str, int]): single upper-case characters to codes
        - directives (Mapping[str, int]): lower-case directive names to codes
    """

    literals: Mapping[str, int]
    directives: Mapping[str, int]
    _by_code: Mapping[int, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_code: Dict[int, str] = {}

        for char, code in self.literals.items():
            if len(char) != 1:
                raise ValueError(f"Literal symbol must be one character, got {char!r}")
            if char != char.upper():
                raise ValueError(f"Literal symbol must be upper-case, got {char!r}")
            by_code.setdefault(code, char)

        for name, code in self.directives.items():
            if name != name.lower() or not name:
                raise ValueError(f"Directive name must be lower-case, got {name!r}")
            by_code.setdefault(code, "{" + name + "}")

        total = len(self.literals) + len(self.directives)
        if len(by_code) != total:
            raise ValueError("Symbol codes must be unique")
        if by_code.get(BLANK_CODE) != BLANK:
            raise ValueError(f"Code {BLANK_CODE} is reserved for the blank symbol")

        object.__setattr__(self, "literals", MappingProxyType(dict(self.literals)))
        object.__setattr__(self, "directives", MappingProxyType(dict(self.directives)))
        object.__setattr__(self, "_by_code", MappingProxyType(by_code))

    @classmethod
    def default(cls) -> SymbolTable:
        """The Vestaboard character set: ~50 literals plus the color squares."""
        return cls(literals=_default_literals(), directives=dict(COLOR_DIRECTIVES))

    def has_literal(self, char: str) -> bool:
        return char in self.literals

    def has_directive(self, name: str) -> bool:
        return name.lower() in self.directives

    def canonical_directive(self, name: str) -> Optional[str]:
        """Return the canonical (lower-case) directive name, or None if unknown."""
        canonical = name.lower()
        return canonical if canonical in self.directives else None

    def encode_symbol(self, symbol: str) -> int:
        """
        Look up the code for a symbol.

        Args:
            - symbol (str): a literal character, or a directive written as "{name}"

        Raises:
            UnknownSymbol: if the symbol is not in the table
        """
        if len(symbol) > 2 and symbol.startswith("{") and symbol.endswith("}"):
            code = self.directives.get(symbol[1:-1])
        else:
            code = self.literals.get(symbol)
        if code is None:
            raise UnknownSymbol(symbol)
        return code

    def decode_code(self, code: int) -> Optional[str]:
        """Return the symbol text for a code ("{name}" for directives), or None."""
        return self._by_code.get(int(code))

    def __len__(self) -> int:
        return len(self._by_code)


DEFAULT_SYMBOLS = SymbolTable.default()
