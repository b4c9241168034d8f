"""Pytest hooks and fixtures."""

import asyncio

import pytest

from walletbridge.host.sinks import QueueSink
from walletbridge.provider.directory import ProviderDirectory
from walletbridge.provider.facade import WalletProvider

ADDRESS = "0xAbC0000000000000000000000000000000000dEf"


@pytest.fixture
def sink():
    return QueueSink()


@pytest.fixture
def directory():
    return ProviderDirectory()


@pytest.fixture
def make_provider(sink, directory):
    """Build providers sharing one sink and directory."""

    def _make(**config):
        config.setdefault("address", ADDRESS)
        config.setdefault("chainId", 39)
        return WalletProvider(config, sink=sink, directory=directory)

    return _make


@pytest.fixture
def provider(make_provider):
    return make_provider()


async def host_round_trip(provider, sink, payload, result, *, envelope=False):
    """Send ``payload``, answer the frame it produces with ``result``, return (frame, value)."""
    call = provider.request_envelope if envelope else provider.request
    task = asyncio.create_task(call(payload))
    frame = await sink.next_frame(timeout=1)
    provider.deliver_result(frame["id"], result)
    value = await asyncio.wait_for(task, timeout=1)
    return frame, value
