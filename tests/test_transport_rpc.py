"""Tests for the upstream JSON-RPC client."""

import json

import httpx
import pytest

from walletbridge.transport.rpc import RpcClient
from walletbridge.utils.exceptions import ErrorCategory, RpcTransportError

RPC_URL = "https://rpc.example/v1"


def _client(handler):
    return RpcClient(RPC_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_call_returns_envelope():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), json.loads(request.content)))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 5, "result": "0x1"})

    client = _client(handler)
    body = await client.call({"jsonrpc": "2.0", "id": 5, "method": "eth_gasPrice", "params": []})
    assert body == {"jsonrpc": "2.0", "id": 5, "result": "0x1"}
    assert seen == [(RPC_URL, {"jsonrpc": "2.0", "id": 5, "method": "eth_gasPrice", "params": []})]
    await client.close()


@pytest.mark.asyncio
async def test_get_block_number():
    client = _client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x1b4"}))
    assert await client.get_block_number() == 436
    await client.close()


@pytest.mark.asyncio
async def test_rpc_error_member_raises():
    error = {"code": -32000, "message": "insufficient funds"}
    client = _client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": error}))
    with pytest.raises(RpcTransportError) as exc_info:
        await client.call({"id": 1, "method": "eth_sendRawTransaction"})
    assert exc_info.value.rpc_error == error
    assert exc_info.value.message == "insufficient funds"
    await client.close()


@pytest.mark.asyncio
async def test_http_500_is_retryable():
    client = _client(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(RpcTransportError) as exc_info:
        await client.call({"id": 1, "method": "eth_blockNumber"})
    assert exc_info.value.status_code == 502
    assert exc_info.value.category == ErrorCategory.RETRYABLE
    await client.close()


@pytest.mark.asyncio
async def test_http_400_is_not_retryable():
    client = _client(lambda request: httpx.Response(400, text="nope"))
    with pytest.raises(RpcTransportError) as exc_info:
        await client.call({"id": 1, "method": "eth_blockNumber"})
    assert exc_info.value.category == ErrorCategory.FATAL
    await client.close()


@pytest.mark.asyncio
async def test_non_json_body():
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(RpcTransportError, match="non-json"):
        await client.call({"id": 1, "method": "eth_blockNumber"})
    await client.close()


@pytest.mark.asyncio
async def test_network_error_is_retryable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(RpcTransportError) as exc_info:
        await client.call({"id": 1, "method": "eth_blockNumber"})
    assert exc_info.value.category == ErrorCategory.RETRYABLE
    await client.close()


@pytest.mark.asyncio
async def test_missing_url():
    client = RpcClient("")
    with pytest.raises(RpcTransportError, match="no upstream rpc url"):
        await client.call({"id": 1, "method": "eth_blockNumber"})


def test_repr_hides_api_key():
    client = RpcClient("https://mainnet.example/v3/0123456789abcdef0123456789abcdef")
    assert "0123456789abcdef0123456789abcdef" not in repr(client)
