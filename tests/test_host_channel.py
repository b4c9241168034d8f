"""Tests for host frames, sinks and the channel send primitive."""

import asyncio
import json

import pytest

from walletbridge.host.channel import HostChannel
from walletbridge.host.protocol import HostFrame, LogFrame, coerce_request_id, decode_event_payload
from walletbridge.host.sinks import CallbackSink, QueueSink
from walletbridge.provider.id_mapping import IdMapping
from walletbridge.provider.methods import HostHandler
from walletbridge.provider.pending import PendingCallRegistry
from walletbridge.utils.exceptions import NOT_READY, ProviderRpcError


def test_host_frame_encoding():
    frame = HostFrame(id=12, name=HostHandler.SIGN_MESSAGE, object={"data": "0xff"})
    assert json.loads(frame.encode()) == {"id": 12, "name": "signMessage", "object": {"data": "0xff"}}


def test_log_frame_encoding():
    assert json.loads(LogFrame(type="warning", data="careful").encode()) == {"type": "warning", "data": "careful"}


def test_coerce_request_id():
    assert coerce_request_id("42") == 42
    assert coerce_request_id(" 42 ") == 42
    assert coerce_request_id(42) == 42
    assert coerce_request_id("abc") == "abc"
    assert coerce_request_id("-1") == "-1"


def test_decode_event_payload():
    assert decode_event_payload('{"chainId": "0x1"}') == {"chainId": "0x1"}
    assert decode_event_payload("plain") == "plain"
    assert decode_event_payload(["0x1"]) == ["0x1"]


def test_callback_sink():
    seen = []
    CallbackSink(seen.append).post_message("frame")
    assert seen == ["frame"]


@pytest.mark.asyncio
async def test_queue_sink():
    sink = QueueSink()
    sink.post_message('{"id": 1}')
    sink.post_message('{"id": 2}')
    assert await sink.next_frame(timeout=1) == {"id": 1}
    assert sink.drain() == [{"id": 2}]
    with pytest.raises(asyncio.TimeoutError):
        await sink.next_frame(timeout=0.01)


def _channel(ready, sink):
    registry = PendingCallRegistry(IdMapping())
    return registry, HostChannel(registry, is_ready=lambda: ready, sink=sink)


@pytest.mark.asyncio
async def test_send_posts_frame_when_ready():
    sink = QueueSink()
    registry, channel = _channel(True, sink)
    future = asyncio.get_running_loop().create_future()
    registry.register(7, future, False)
    assert channel.send(HostHandler.SIGN_PERSONAL_MESSAGE, 7, {"data": "0x6869"}) is True
    assert sink.drain() == [{"id": 7, "name": "signPersonalMessage", "object": {"data": "0x6869"}}]
    assert not future.done()


@pytest.mark.asyncio
async def test_send_rejects_when_not_ready():
    sink = QueueSink()
    registry, channel = _channel(False, sink)
    future = asyncio.get_running_loop().create_future()
    registry.register(7, future, False)
    assert channel.send(HostHandler.SIGN_TRANSACTION, 7, {}) is False
    assert sink.drain() == []
    with pytest.raises(ProviderRpcError) as exc_info:
        await future
    assert exc_info.value.rpc_code == NOT_READY


@pytest.mark.asyncio
async def test_request_accounts_ignores_readiness():
    sink = QueueSink()
    registry, channel = _channel(False, sink)
    registry.register(7, asyncio.get_running_loop().create_future(), False)
    assert channel.send(HostHandler.REQUEST_ACCOUNTS, 7, {}) is True
    assert sink.drain()[0]["name"] == "requestAccounts"


@pytest.mark.asyncio
async def test_send_without_sink_keeps_call_pending():
    registry, channel = _channel(True, None)
    registry.register(7, asyncio.get_running_loop().create_future(), False)
    assert channel.send(HostHandler.WATCH_ASSET, 7, {}) is False
    assert 7 in registry


@pytest.mark.asyncio
async def test_deliver_coerces_string_ids():
    registry, channel = _channel(True, QueueSink())
    future = asyncio.get_running_loop().create_future()
    registry.register(7, future, False)
    assert channel.deliver_result("7", '"0xsig"') is True
    assert await future == "0xsig"
