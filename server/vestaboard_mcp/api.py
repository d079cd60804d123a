"""
Vestaboard MCP Server API - HTTP endpoints

Provides the communication interface for MCP clients:
- JSON-RPC endpoint at /mcp (POST)
- Server info and health endpoints
- API key authentication for /mcp
"""

import json
import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .rpc import PARSE_ERROR, error_response

logger = logging.getLogger(__name__)

MCP_ENDPOINT = "/mcp"

router = APIRouter()


class AuthenticationError(Exception):
    """Raised when a request to /mcp carries no valid API key."""

    pass


# Dependency provider for DI
def get_server(request: Request):
    # The composition root attaches itself to `app.state.server` before any
    # request is served; answer 503 rather than AttributeError if it has not.
    server = getattr(request.app.state, "server", None)
    if server is None or server.dispatcher is None:
        raise HTTPException(status_code=503, detail="Server not ready")
    return server


def extract_api_key(header_value: str) -> str:
    """Accept both "Bearer <key>" and a bare key."""
    if header_value.startswith("Bearer "):
        return header_value[len("Bearer "):]
    return header_value


def require_api_key(request: Request, server=Depends(get_server)) -> None:
    auth = server.config.auth
    if not auth.required:
        return

    header_value = request.headers.get(auth.header_name)
    if not header_value or extract_api_key(header_value) != auth.api_key:
        logger.warning(f"Rejected unauthenticated request from {request.client}")
        raise AuthenticationError("Unauthorized: Invalid or missing API key")


async def authentication_error_handler(request: Request, exc: AuthenticationError):
    body = error_response(None, -32600, str(exc))
    return JSONResponse(
        status_code=401,
        content=body,
        headers={"WWW-Authenticate": 'Bearer realm="MCP Server"'},
    )


# Pydantic models for API responses
class ServerInfo(BaseModel):
    status: str
    name: str
    version: str
    endpoint: str
    methods: list
    tools: list


class HealthStatus(BaseModel):
    status: str
    timestamp: float


@router.get("/", response_model=ServerInfo)
async def root(server=Depends(get_server)):
    """Basic server info for debugging."""
    return ServerInfo(
        status="MCP Streamable HTTP Server Running",
        name=server.config.server.name,
        version=server.config.server.version,
        endpoint=MCP_ENDPOINT,
        methods=["POST"],
        tools=server.dispatcher.tool_names,
    )


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """Health check endpoint."""
    return HealthStatus(status="healthy", timestamp=time.time())


@router.post(MCP_ENDPOINT, dependencies=[Depends(require_api_key)])
async def handle_mcp_post(request: Request, server=Depends(get_server)):
    """Single JSON-RPC endpoint for MCP clients."""
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Unparseable JSON-RPC body: {e}")
        return JSONResponse(status_code=400, content=error_response(None, PARSE_ERROR, "Parse error"))

    response = await server.dispatcher.handle(payload)
    if response is None:
        return Response(status_code=204)
    return JSONResponse(content=response)


@router.get(MCP_ENDPOINT, dependencies=[Depends(require_api_key)])
async def handle_mcp_get():
    """This server offers no SSE stream."""
    return JSONResponse(
        status_code=405,
        content=error_response(None, -32000, "Method not allowed: no SSE stream"),
        headers={"Allow": "POST"},
    )
