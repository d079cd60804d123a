"""Tests for JSON-RPC dispatch and the Vestaboard tools."""

import json

import numpy as np
import pytest

from vestaboard_mcp.config import AppConfig
from vestaboard_mcp.formatter import FormattingOptions
from vestaboard_mcp.rpc import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    NO_TEXT_MESSAGE,
    PROTOCOL_VERSION,
    RPCDispatcher,
)
from vestaboard_mcp.vestaboard_client import VestaboardAPIError


class FakeClient:
    def __init__(self, state=None, error=None):
        self.state = state
        self.error = error
        self.posted = []

    def get_state(self):
        if self.error:
            raise self.error
        return self.state

    def set_state(self, grid):
        if self.error:
            raise self.error
        self.posted.append(np.array(grid))
        return {}


def call(tool, arguments=None, req_id=1):
    params = {"name": tool}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": req_id, "method": "tools/call", "params": params}


def result_text(response):
    return response["result"]["content"][0]["text"]


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def dispatcher(client):
    return RPCDispatcher(AppConfig(), client=client)


@pytest.mark.asyncio
async def test_initialize(dispatcher):
    response = await dispatcher.handle(
        {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
    )
    assert response["id"] == 1
    result = response["result"]
    assert result["protocolVersion"] == PROTOCOL_VERSION
    assert "tools" in result["capabilities"]
    assert result["serverInfo"] == {"name": "vestaboard-mcp", "version": "1.0.0"}


@pytest.mark.asyncio
async def test_tools_list(dispatcher):
    response = await dispatcher.handle({"jsonrpc": "2.0", "id": "a", "method": "tools/list"})
    names = [tool["name"] for tool in response["result"]["tools"]]
    assert names == ["get-current-message", "post-message", "preview-message"]
    assert response["id"] == "a"


@pytest.mark.asyncio
async def test_notifications_get_no_response(dispatcher):
    assert await dispatcher.handle({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
    assert await dispatcher.handle({"jsonrpc": "2.0", "method": "initialized"}) is None


@pytest.mark.asyncio
async def test_unknown_method(dispatcher):
    response = await dispatcher.handle({"jsonrpc": "2.0", "id": 7, "method": "resources/list"})
    assert response["error"]["code"] == METHOD_NOT_FOUND
    assert response["id"] == 7


@pytest.mark.asyncio
async def test_invalid_request(dispatcher):
    response = await dispatcher.handle({"jsonrpc": "2.0", "id": 3})
    assert response["error"]["code"] == INVALID_REQUEST
    assert response["id"] == 3

    response = await dispatcher.handle([1, 2, 3])
    assert response["error"]["code"] == INVALID_REQUEST
    assert response["id"] is None


@pytest.mark.asyncio
async def test_preview_message(dispatcher, client):
    response = await dispatcher.handle(
        call("preview-message", {"text": "Hi {red} there", "horizontalAlign": "center"})
    )
    rows = result_text(response).split("\n")
    assert len(rows) == 6
    assert rows[0] == " " * 6 + "HI {red} THERE" + " " * 6
    assert client.posted == []


@pytest.mark.asyncio
async def test_post_message(dispatcher, client):
    response = await dispatcher.handle(
        call("post-message", {"text": "Hello world", "verticalAlign": "bottom"})
    )
    text = result_text(response)
    assert "isError" not in response["result"]
    assert text.startswith("Successfully posted message to Vestaboard!\n\nDisplayed text:\n")

    assert len(client.posted) == 1
    grid = client.posted[0]
    assert grid.shape == (6, 22)
    assert list(grid[5, :11]) == [8, 5, 12, 12, 15, 0, 23, 15, 18, 12, 4]
    assert not grid[:5].any()


@pytest.mark.asyncio
async def test_post_raw_message(dispatcher, client):
    await dispatcher.handle(call("post-message", {"text": "A  B", "raw": True}))
    grid = client.posted[0]
    assert list(grid[0, :4]) == [1, 0, 0, 2]


@pytest.mark.asyncio
async def test_config_formatting_defaults_apply(client):
    config = AppConfig(formatting=FormattingOptions(horizontal_align="right"))
    dispatcher = RPCDispatcher(config, client=client)
    response = await dispatcher.handle(call("preview-message", {"text": "hi"}))
    assert result_text(response).split("\n")[0] == " " * 20 + "HI"

    response = await dispatcher.handle(
        call("preview-message", {"text": "hi", "horizontalAlign": "left"})
    )
    assert result_text(response).split("\n")[0] == "HI" + " " * 20


@pytest.mark.asyncio
async def test_overflow_error_is_tool_error(dispatcher, client):
    text = "\n".join(f"line {i}" for i in range(8))
    response = await dispatcher.handle(
        call("post-message", {"text": text, "overflowHandling": "error"})
    )
    assert response["result"]["isError"] is True
    assert "8 lines" in result_text(response)
    assert client.posted == []


@pytest.mark.asyncio
async def test_invalid_option(dispatcher):
    response = await dispatcher.handle(
        call("preview-message", {"text": "hi", "horizontalAlign": "justify"})
    )
    assert response["error"]["code"] == INVALID_PARAMS


@pytest.mark.asyncio
async def test_empty_text_is_refused_without_touching_board(dispatcher, client):
    for tool in ("post-message", "preview-message"):
        for arguments in ({"text": ""}, {"text": "", "raw": True}):
            response = await dispatcher.handle(call(tool, arguments))
            assert response["result"]["isError"] is True
            assert result_text(response) == NO_TEXT_MESSAGE
    assert client.posted == []


@pytest.mark.asyncio
async def test_missing_text(dispatcher):
    response = await dispatcher.handle(call("preview-message", {}))
    assert response["error"]["code"] == INVALID_PARAMS


@pytest.mark.asyncio
async def test_unknown_tool(dispatcher):
    response = await dispatcher.handle(call("erase-board"))
    assert response["error"]["code"] == METHOD_NOT_FOUND
    assert "erase-board" in response["error"]["message"]


@pytest.mark.asyncio
async def test_tool_name_missing(dispatcher):
    response = await dispatcher.handle(
        {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {}}
    )
    assert response["error"]["code"] == INVALID_PARAMS


@pytest.mark.asyncio
async def test_get_current_message_decodes_layout():
    layout = [[0] * 22 for _ in range(6)]
    layout[0][:3] = [8, 9, 63]
    client = FakeClient(state={"currentMessage": {"layout": json.dumps(layout)}})
    dispatcher = RPCDispatcher(AppConfig(), client=client)

    response = await dispatcher.handle(call("get-current-message"))
    text = result_text(response)
    assert text.startswith("Current Vestaboard message:\n\n")
    assert "HI{red}" in text


@pytest.mark.asyncio
async def test_get_current_message_without_layout():
    client = FakeClient(state={"id": "abc"})
    dispatcher = RPCDispatcher(AppConfig(), client=client)
    response = await dispatcher.handle(call("get-current-message"))
    assert "Raw response" in result_text(response)


@pytest.mark.asyncio
async def test_device_errors_are_tool_errors():
    client = FakeClient(error=VestaboardAPIError("HTTP error 401 from Vestaboard", status=401))
    dispatcher = RPCDispatcher(AppConfig(), client=client)

    response = await dispatcher.handle(call("post-message", {"text": "hi"}))
    assert response["result"]["isError"] is True
    assert "HTTP error 401" in result_text(response)

    response = await dispatcher.handle(call("get-current-message"))
    assert response["result"]["isError"] is True
