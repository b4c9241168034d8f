"""Tests for the provider object: legacy entry points, events and config."""

import asyncio

import pytest

from conftest import ADDRESS, host_round_trip
from walletbridge.config.schema import ProviderConfig
from walletbridge.provider.facade import WalletProvider
from walletbridge.utils.exceptions import REQUEST_TIMEOUT, UNSUPPORTED_METHOD, ProviderRpcError


def test_config_accepts_camel_case_mapping(provider):
    assert provider.chain_id == 39
    assert provider.address == ADDRESS.lower()
    assert provider.ready is True
    assert provider.kind == "walletbridge"


def test_set_config_hex_chain_id_and_logout(provider):
    provider.set_config({"chainId": "0x38", "address": ""})
    assert provider.chain_id == 56
    assert provider.eth_chain_id() == "0x38"
    assert provider.net_version() == "56"
    assert provider.ready is False
    assert provider.eth_accounts() == []


def test_set_config_rebuilds_rpc_client(provider):
    provider.set_config(ProviderConfig(rpc_url="https://node.example", chain_id=1))
    assert provider.rpc.rpc_url == "https://node.example"


def test_is_connected(provider):
    assert provider.is_connected() is True


def test_send_answers_local_methods(provider):
    assert provider.send({"method": "eth_chainId", "id": 3}) == {"jsonrpc": "2.0", "id": 3, "result": "0x27"}
    assert provider.send({"method": "eth_accounts", "id": "a"})["result"] == [ADDRESS.lower()]


def test_send_rejects_everything_else(provider):
    with pytest.raises(ProviderRpcError) as exc_info:
        provider.send({"method": "eth_getBalance", "params": []})
    assert exc_info.value.rpc_code == UNSUPPORTED_METHOD
    assert "synchronously" in exc_info.value.message


@pytest.mark.asyncio
async def test_send_async_single(provider):
    seen = []
    await provider.send_async({"method": "net_version", "id": 9}, lambda err, data: seen.append((err, data)))
    assert seen == [(None, {"jsonrpc": "2.0", "id": 9, "result": "39"})]


@pytest.mark.asyncio
async def test_send_async_batch_keeps_order(provider, sink):
    seen = []
    task = provider.send_async(
        [
            {"method": "personal_sign", "params": ["0x6869", ADDRESS], "id": "sign"},
            {"method": "eth_chainId", "id": "chain"},
        ],
        lambda err, data: seen.append((err, data)),
    )
    frame = await sink.next_frame(timeout=1)
    provider.deliver_result(frame["id"], "0xsig")
    await asyncio.wait_for(task, timeout=1)
    assert seen == [
        (
            None,
            [
                {"jsonrpc": "2.0", "id": "sign", "result": "0xsig"},
                {"jsonrpc": "2.0", "id": "chain", "result": "0x27"},
            ],
        )
    ]


@pytest.mark.asyncio
async def test_send_async_reports_error(provider):
    seen = []
    await provider.send_async({"method": "eth_subscribe", "params": ["newHeads"]}, lambda err, data: seen.append((err, data)))
    assert len(seen) == 1
    err, data = seen[0]
    assert isinstance(err, ProviderRpcError)
    assert err.rpc_code == UNSUPPORTED_METHOD
    assert data is None


@pytest.mark.asyncio
async def test_enable_requests_accounts(make_provider, sink):
    provider = make_provider(address="")
    task = asyncio.create_task(provider.enable())
    frame = await sink.next_frame(timeout=1)
    assert frame["name"] == "requestAccounts"
    provider.deliver_result(frame["id"], [ADDRESS])
    assert await asyncio.wait_for(task, timeout=1) == [ADDRESS]


def test_connect_event_on_construction(sink, directory):
    seen = []

    class Recording(WalletProvider):
        def emit_connect(self, chain_id):
            self.on("connect", seen.append)
            super().emit_connect(chain_id)

    Recording({"chainId": 39}, sink=sink, directory=directory)
    assert seen == [{"chainId": 39}]


def test_remote_emit_decodes_json(provider):
    seen = []
    provider.on("accountsChanged", seen.append)
    assert provider.remote_emit("accountsChanged", '["0xabc"]') is True
    assert provider.remote_emit("accountsChanged", "not json") is True
    assert provider.remote_emit("accountsChanged", {"a": 1}) is True
    assert seen == [["0xabc"], "not json", {"a": 1}]


def test_remote_emit_without_listeners(provider):
    assert provider.remote_emit("chainChanged", "0x1") is False


def test_once_and_remove_listener(provider):
    seen = []

    def listener(value):
        seen.append(value)

    provider.once("chainChanged", listener)
    provider.remote_emit("chainChanged", '"0x1"')
    provider.remote_emit("chainChanged", '"0x2"')
    assert seen == ["0x1"]

    provider.on("chainChanged", listener)
    provider.remove_listener("chainChanged", listener)
    assert provider.listener_count("chainChanged") == 0


def test_failing_listener_does_not_stop_others(provider):
    seen = []

    def broken(_):
        raise RuntimeError("boom")

    provider.on("message", broken)
    provider.on("message", seen.append)
    provider.remote_emit("message", '{"type": "x"}')
    assert seen == [{"type": "x"}]


@pytest.mark.asyncio
async def test_async_listener_is_scheduled(provider):
    seen = []

    async def listener(value):
        seen.append(value)

    provider.on("chainChanged", listener)
    provider.remote_emit("chainChanged", '"0x1"')
    await asyncio.sleep(0)
    assert seen == ["0x1"]


@pytest.mark.asyncio
async def test_request_timeout(make_provider, sink):
    provider = make_provider(requestTimeout=0.01)
    with pytest.raises(ProviderRpcError) as exc_info:
        await asyncio.wait_for(provider.request({"method": "personal_sign", "params": ["0x6869", ADDRESS]}), timeout=1)
    assert exc_info.value.rpc_code == REQUEST_TIMEOUT
    assert len(provider.registry) == 0
    frame = sink.drain()[0]
    assert provider.deliver_result(frame["id"], "late") is False


@pytest.mark.asyncio
async def test_cancelled_request_is_discarded(provider, sink):
    task = asyncio.create_task(provider.request({"method": "personal_sign", "params": ["0x6869", ADDRESS], "id": "x"}))
    frame = await sink.next_frame(timeout=1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert frame["id"] not in provider.registry
    assert len(provider.id_mapping) == 0


@pytest.mark.asyncio
async def test_debug_mode_round_trip(make_provider, sink):
    provider = make_provider(isDebug=True)
    _, result = await host_round_trip(provider, sink, {"method": "personal_sign", "params": ["0x6869", ADDRESS]}, "0xsig")
    assert result == "0xsig"


@pytest.mark.asyncio
async def test_close_unregisters(provider, directory):
    assert len(directory) == 1
    await provider.close()
    assert len(directory) == 0
