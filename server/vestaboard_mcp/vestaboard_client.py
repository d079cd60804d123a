"""
Vestaboard Read/Write API client

I/O boundary for the physical board: reads the current layout and posts new
code grids. Calls are blocking; async callers should run them in a worker
thread (asyncio.to_thread).
"""

from __future__ import annotations

import json
import logging
import urllib.request
from dataclasses import dataclass
from typing import Any, Optional
from urllib.error import HTTPError, URLError

from .config import VestaboardConfig
from .validation import validate_grid

logger = logging.getLogger(__name__)

KEY_HEADER = "X-Vestaboard-Read-Write-Key"


class VestaboardError(Exception):
    """Base exception for device API errors."""

    pass


class VestaboardConfigError(VestaboardError):
    """Raised when the client is missing its credentials."""

    pass


class VestaboardAPIError(VestaboardError):
    """Raised when a request fails or returns a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


@dataclass
class VestaboardClient:
    """Talks to the Vestaboard Read/Write API."""

    config: VestaboardConfig

    def get_state(self) -> Any:
        """Fetch the board's current message (raw decoded JSON)."""
        return self._request("GET")

    def set_state(self, grid) -> Any:
        """
        Post a code grid to the board.

        Args:
            grid: 6x22 matrix of display codes (ndarray or nested lists)

        Raises:
            GridValidationError: If the grid is not 6x22 integers
            VestaboardError: If the request fails
        """
        body = validate_grid(grid).tolist()
        return self._request("POST", body)

    def _request(self, method: str, body: Any = None) -> Any:
        key = self.config.read_write_key
        if not key:
            raise VestaboardConfigError(
                "VESTABOARD_READ_WRITE_KEY is required for the Read/Write API"
            )

        url = self.config.api_base
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Content-Type", "application/json")
        req.add_header(KEY_HEADER, key)

        logger.info(f"Vestaboard {method} {url}")
        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                payload = resp.read()
                status = resp.status
        except HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace")
            raise VestaboardAPIError(
                f"HTTP error {e.code} from Vestaboard: {detail}", status=e.code
            ) from e
        except (URLError, TimeoutError, OSError) as e:
            raise VestaboardAPIError(f"Vestaboard request failed: {e}") from e

        logger.debug(f"Vestaboard responded {status} ({len(payload)} bytes)")
        if not payload:
            return {}
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise VestaboardAPIError(f"Invalid JSON from Vestaboard: {e}", status=status) from e


def extract_layout(response: Any) -> Optional[list]:
    """
    Pull the code matrix out of a Read/Write API response.

    Accepts a bare matrix, or {"currentMessage": {"layout": ...}} where the
    layout is either a matrix or a JSON-encoded matrix string.
    """
    if isinstance(response, list) and response:
        return response

    if not isinstance(response, dict):
        return None

    message = response.get("currentMessage")
    if not isinstance(message, dict):
        return None

    layout = message.get("layout")
    if isinstance(layout, str):
        try:
            layout = json.loads(layout)
        except json.JSONDecodeError:
            logger.warning("Vestaboard layout string is not valid JSON")
            return None
    return layout if isinstance(layout, list) and layout else None
