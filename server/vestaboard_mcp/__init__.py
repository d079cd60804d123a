"""
Vestaboard MCP server package.

This package provides:
- A text layout engine for the 6x22 Vestaboard grid (word wrap, overflow, alignment)
- Encoding and decoding between text and Vestaboard character codes
- A Read/Write API client for the physical board
- A JSON-RPC (MCP) server exposing the board as tools
"""

from .codec import decode, encode
from .formatter import FormattingOptions, format_message, format_text

__version__ = "1.0.0"

__all__ = [
    "FormattingOptions",
    "decode",
    "encode",
    "format_message",
    "format_text",
]
