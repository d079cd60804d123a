"""
JSON-RPC method dispatch

Routes JSON-RPC 2.0 requests to handlers through a table keyed by method
name, and tool calls to tool handlers through a second table keyed by tool
name. Transport-agnostic: the HTTP layer hands in decoded JSON and sends
back whatever comes out.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .codec import GridCodec
from .config import AppConfig
from .formatter import FormattingOptions, format_message
from .overflow import OverflowExceeded
from .validation import ValidationError
from .vestaboard_client import VestaboardClient, VestaboardError, extract_layout

logger = logging.getLogger(__name__)

JSON_RPC = "2.0"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

NOTIFICATION_METHODS = {"initialized", "notifications/initialized"}

NO_TEXT_MESSAGE = "No text provided for Vestaboard message."


class RPCError(Exception):
    """Raised by handlers to produce a JSON-RPC error response."""

    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


# Pydantic models for the wire format
class JSONRPCRequest(BaseModel):
    jsonrpc: str = JSON_RPC
    method: str
    params: Optional[Dict[str, Any]] = None
    id: Optional[Union[int, str]] = None


class ToolCallParams(BaseModel):
    name: str
    arguments: Optional[Dict[str, Any]] = None


class MessageArgs(BaseModel):
    text: str
    horizontalAlign: Optional[str] = None
    verticalAlign: Optional[str] = None
    overflowHandling: Optional[str] = None
    raw: bool = False


_MESSAGE_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {
            "type": "string",
            "description": (
                "The message text to display. Can use VBML formatting like {red}, "
                "{blue}, etc. for colored squares, or plain text. Max 6 lines, "
                "22 characters per line."
            ),
        },
        "horizontalAlign": {"type": "string", "enum": ["left", "center", "right"]},
        "verticalAlign": {"type": "string", "enum": ["top", "middle", "bottom"]},
        "overflowHandling": {"type": "string", "enum": ["truncate", "ellipsis", "error"]},
        "raw": {
            "type": "boolean",
            "description": "Place text as-is, without word wrap or alignment.",
        },
    },
    "required": ["text"],
}

TOOLS = [
    {
        "name": "get-current-message",
        "description": "Get the current message displayed on the Vestaboard using Read-Write API",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "post-message",
        "description": "Format a message and post it to the Vestaboard using Read-Write API",
        "inputSchema": _MESSAGE_SCHEMA,
    },
    {
        "name": "preview-message",
        "description": "Show how a message would be laid out on the Vestaboard without posting it",
        "inputSchema": _MESSAGE_SCHEMA,
    },
]


def text_result(text: str, is_error: bool = False) -> dict:
    result: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def error_response(request_id: Any, code: int, message: str, data: Any = None) -> dict:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSON_RPC, "error": error, "id": request_id}


class RPCDispatcher:
    """
    Dispatches JSON-RPC requests for the Vestaboard tools.

    Args:
        config: Application configuration (server info, formatting defaults)
        client: Device API client; defaults to one built from config
        codec: Grid encoder/decoder
    """

    def __init__(
        self,
        config: AppConfig,
        client: Optional[VestaboardClient] = None,
        codec: Optional[GridCodec] = None,
    ):
        self.config = config
        self.client = client or VestaboardClient(config.vestaboard)
        self.codec = codec or GridCodec()

        self._methods: Dict[str, Callable[[dict], Awaitable[Any]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }
        self._tools: Dict[str, Callable[[dict], Awaitable[dict]]] = {
            "get-current-message": self._get_current_message,
            "post-message": self._post_message,
            "preview-message": self._preview_message,
        }

    @property
    def tool_names(self) -> list:
        return list(self._tools)

    async def handle(self, payload: Any) -> Optional[dict]:
        """
        Handle one decoded JSON-RPC message.

        Returns:
            Optional[dict]: The response, or None for notifications
        """
        request_id = payload.get("id") if isinstance(payload, dict) else None
        try:
            request = JSONRPCRequest.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning(f"Invalid JSON-RPC request: {e.error_count()} errors")
            return error_response(request_id, INVALID_REQUEST, "Invalid Request")

        if request.method in NOTIFICATION_METHODS or request.method.startswith(
            "notifications/"
        ):
            logger.info(f"Notification received: {request.method}")
            return None

        handler = self._methods.get(request.method)
        if handler is None:
            return error_response(
                request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}"
            )

        logger.info(f"RPC {request.method} (id={request.id})")
        try:
            result = await handler(request.params or {})
        except RPCError as e:
            return error_response(request.id, e.code, e.message, e.data)
        except Exception as e:
            logger.exception(f"Unhandled error in {request.method}")
            return error_response(request.id, INTERNAL_ERROR, str(e) or "Internal error")

        return {"jsonrpc": JSON_RPC, "result": result, "id": request.id}

    # Method handlers

    async def _initialize(self, params: dict) -> dict:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "logging": {}},
            "serverInfo": {
                "name": self.config.server.name,
                "version": self.config.server.version,
            },
        }

    async def _ping(self, params: dict) -> dict:
        return {}

    async def _list_tools(self, params: dict) -> dict:
        return {"tools": TOOLS}

    async def _call_tool(self, params: dict) -> dict:
        try:
            call = ToolCallParams.model_validate(params)
        except PydanticValidationError as e:
            raise RPCError(INVALID_PARAMS, "tool name undefined", str(e)) from e

        tool = self._tools.get(call.name)
        if tool is None:
            raise RPCError(METHOD_NOT_FOUND, f"Tool not found: {call.name}")

        logger.info(f"Tool call {call.name}")
        return await tool(call.arguments or {})

    # Tool handlers

    def _build_grid(self, arguments: dict):
        """Lay out the message arguments; None when there is no text to show."""
        try:
            args = MessageArgs.model_validate(arguments)
        except PydanticValidationError as e:
            raise RPCError(INVALID_PARAMS, "Invalid message arguments", str(e)) from e

        if not args.text:
            return None
        if args.raw:
            return self.codec.encode_raw(args.text)

        try:
            options = FormattingOptions.from_mapping(
                args.model_dump(exclude={"text", "raw"}), base=self.config.formatting
            )
        except ValidationError as e:
            raise RPCError(INVALID_PARAMS, str(e)) from e
        return format_message(args.text, options, self.codec.symbols)

    async def _preview_message(self, arguments: dict) -> dict:
        try:
            grid = self._build_grid(arguments)
        except OverflowExceeded as e:
            return text_result(str(e), is_error=True)
        if grid is None:
            return text_result(NO_TEXT_MESSAGE, is_error=True)
        return text_result(self.codec.decode(grid))

    async def _post_message(self, arguments: dict) -> dict:
        try:
            grid = self._build_grid(arguments)
        except OverflowExceeded as e:
            return text_result(str(e), is_error=True)
        if grid is None:
            logger.warning("Refusing to post an empty message")
            return text_result(NO_TEXT_MESSAGE, is_error=True)

        try:
            await asyncio.to_thread(self.client.set_state, grid)
        except VestaboardError as e:
            logger.error(f"Failed to post message: {e}")
            return text_result(
                "Failed to post message to Vestaboard Read-Write API. Please check:\n"
                "- Your VESTABOARD_READ_WRITE_KEY is valid\n"
                "- The message format is correct\n"
                "- Your Vestaboard device is online\n\n"
                f"Error: {e}",
                is_error=True,
            )

        return text_result(
            "Successfully posted message to Vestaboard!\n\n"
            f"Displayed text:\n{self.codec.decode(grid)}"
        )

    async def _get_current_message(self, arguments: dict) -> dict:
        try:
            response = await asyncio.to_thread(self.client.get_state)
        except VestaboardError as e:
            logger.error(f"Failed to get current message: {e}")
            return text_result(
                "Failed to get current message from Vestaboard Read-Write API. Please check:\n"
                "- Your VESTABOARD_READ_WRITE_KEY is valid\n"
                "- Your Vestaboard device is online\n\n"
                f"Error: {e}",
                is_error=True,
            )

        layout = extract_layout(response)
        if layout is not None:
            try:
                display_text = self.codec.decode(layout)
            except ValidationError as e:
                logger.warning(f"Unexpected layout from Vestaboard: {e}")
                display_text = f"Raw response: {json.dumps(response, indent=2)}"
        elif isinstance(response, dict) and isinstance(response.get("text"), str):
            display_text = response["text"]
        else:
            display_text = f"Raw response: {json.dumps(response, indent=2)}"

        return text_result(f"Current Vestaboard message:\n\n{display_text}")
