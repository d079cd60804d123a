"""
Cross-cutting validation logic for the Vestaboard layout service.

Type-local invariants stay in their dataclass __post_init__ methods; this
module holds the exception hierarchy and the checks shared by several
components:

- Formatting option values (alignment and overflow names)
- Code grid shape and integer type
- Configuration errors (raised from the config dataclasses)
"""

from typing import Any, Iterable

import numpy as np

from .symbols import GRID_COLS, GRID_ROWS


class ValidationError(ValueError):
    """Base exception for validation errors."""
    pass


class OptionsValidationError(ValidationError):
    """Raised when a formatting option has an unsupported value."""
    pass


class GridValidationError(ValidationError):
    """Raised when a code grid is not a 6x22 matrix of integers."""
    pass


class ConfigValidationError(ValidationError):
    """Raised when the application configuration is inconsistent."""
    pass


def validate_choice(name: str, value: Any, allowed: Iterable[str]) -> str:
    """
    Normalize and check a named option against its allowed values.

    Args:
        name: Option name for error messages
        value: Supplied value (case-insensitive string)
        allowed: Accepted lower-case values

    Returns:
        str: The lower-cased value

    Raises:
        OptionsValidationError: If the value is not a string or not allowed
    """
    allowed = tuple(allowed)
    if not isinstance(value, str):
        raise OptionsValidationError(
            f"{name} must be one of {list(allowed)}, got {value!r}"
        )
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise OptionsValidationError(
            f"{name} must be one of {list(allowed)}, got '{value}'"
        )
    return normalized


def validate_grid(grid: Any, rows: int = GRID_ROWS, cols: int = GRID_COLS) -> np.ndarray:
    """
    Coerce a code matrix to an integer array and check its shape.

    Args:
        grid: Nested sequence or array of codes
        rows, cols: Expected dimensions

    Returns:
        np.ndarray: Integer array of shape (rows, cols)

    Raises:
        GridValidationError: If the grid is ragged, non-integer or mis-sized
    """
    try:
        array = np.asarray(grid)
    except (TypeError, ValueError) as e:
        raise GridValidationError(f"Grid is not a rectangular matrix: {e}") from e

    if array.shape != (rows, cols):
        raise GridValidationError(
            f"Grid must be {rows}x{cols}, got shape {array.shape}"
        )

    if array.dtype == bool or not np.issubdtype(array.dtype, np.integer):
        raise GridValidationError(f"Grid codes must be integers, got {array.dtype}")

    return array.astype(int)
