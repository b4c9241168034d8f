"""The provider object handed to page code."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping

from loguru import logger

from walletbridge.config.schema import ProviderConfig
from walletbridge.host.channel import HostChannel
from walletbridge.host.protocol import decode_event_payload
from walletbridge.host.sinks import HostSink
from walletbridge.provider.directory import ProviderDirectory
from walletbridge.provider.events import EventEmitter
from walletbridge.provider.id_mapping import IdMapping
from walletbridge.provider.methods import LOCAL_METHODS, RpcMethod
from walletbridge.provider.pending import PendingCallRegistry, build_envelope
from walletbridge.provider.router import MethodRouter, unsupported_method_error
from walletbridge.transport.rpc import RpcClient
from walletbridge.utils.exceptions import sanitize_error_message

Callback = Callable[[Exception | None, Any], Any]


class WalletProvider(EventEmitter):
    """EIP-1193 style provider backed by an external wallet host.

    Local methods answer immediately, signing/account methods go to the host
    over ``sink`` and everything else goes to the upstream RPC node. Results
    from the host come back through ``deliver_result`` / ``deliver_error``.
    """

    def __init__(
        self,
        config: ProviderConfig | Mapping[str, Any] | None = None,
        *,
        sink: HostSink | None = None,
        directory: ProviderDirectory | None = None,
        rpc: RpcClient | None = None,
    ):
        super().__init__()
        self.config = ProviderConfig()
        self.address = ""
        self.ready = False
        self.chain_id = self.config.chain_id
        self.is_debug = False
        self.rpc: RpcClient = rpc or RpcClient("")
        self._rpc_injected = rpc is not None

        self.directory = directory or ProviderDirectory()
        self.id_mapping = IdMapping()
        self.registry = PendingCallRegistry(self.id_mapping, on_unmatched=self._resolve_in_siblings)
        self.channel = HostChannel(self.registry, is_ready=lambda: self.ready, sink=sink)
        self.router = MethodRouter(self)

        self.directory.register(self)
        self.set_config(config or ProviderConfig(), propagate=False)
        self.emit_connect(self.chain_id)

    def __repr__(self) -> str:
        return f"WalletProvider(kind={self.kind!r}, address={self.address!r}, chain_id={self.chain_id})"

    @property
    def kind(self) -> str:
        return self.config.identity

    # Configuration

    def set_config(self, config: ProviderConfig | Mapping[str, Any], *, propagate: bool = True) -> None:
        if not isinstance(config, ProviderConfig):
            config = ProviderConfig.model_validate(dict(config))
        previous_url = self.config.rpc_url
        self.config = config
        self.set_address(config.address, propagate=propagate)
        self.chain_id = config.chain_id
        self.is_debug = config.is_debug
        if not self._rpc_injected and (config.rpc_url != previous_url or not self.rpc.rpc_url):
            self.rpc = RpcClient(config.rpc_url, timeout=config.rpc_timeout)
        if self.is_debug:
            logger.debug(
                "Provider configured chain_id={} rpc={} ready={}",
                self.chain_id,
                sanitize_error_message(config.rpc_url),
                self.ready,
            )

    def set_address(self, address: str | None, *, propagate: bool = True) -> None:
        """Set the wallet address here and in every sibling provider."""
        lower = (address or "").lower()
        self.apply_address(lower, bool(address))
        if propagate:
            self.directory.propagate_address(self, lower, bool(address))

    def apply_address(self, address: str, ready: bool) -> None:
        self.address = address
        self.ready = ready

    @property
    def sink(self) -> HostSink | None:
        return self.channel.sink

    @sink.setter
    def sink(self, value: HostSink | None) -> None:
        self.channel.sink = value

    # Request entry points

    async def request(self, payload: Mapping[str, Any]) -> Any:
        """EIP-1193 ``request``: resolves to the bare result value."""
        return await self.router.dispatch(dict(payload), wrap=False)

    async def request_envelope(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Like ``request`` but resolves to the full JSON-RPC response."""
        return await self.router.dispatch(dict(payload), wrap=True)

    def is_connected(self) -> bool:
        """Deprecated: listen to the ``connect`` event instead."""
        return True

    async def enable(self) -> Any:
        """Deprecated: use ``request({"method": "eth_requestAccounts"})``."""
        return await self.request({"method": RpcMethod.ETH_REQUEST_ACCOUNTS.value, "params": []})

    def send(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Deprecated synchronous call, only for the locally answered methods."""
        method = RpcMethod.parse(payload.get("method"))
        if method not in LOCAL_METHODS:
            raise unsupported_method_error(payload.get("method"), synchronous=True)
        return build_envelope(payload.get("id"), self.router.local_result(method))

    def send_async(
        self,
        payload: Mapping[str, Any] | list[Mapping[str, Any]],
        callback: Callback,
    ) -> asyncio.Task[None]:
        """Deprecated callback API; ``payload`` may be a batch.

        A batch is dispatched concurrently and the callback receives the
        envelopes in request order, or the first error.
        """

        async def run() -> None:
            try:
                if isinstance(payload, list):
                    data: Any = await asyncio.gather(*(self.request_envelope(item) for item in payload))
                    data = list(data)
                else:
                    data = await self.request_envelope(payload)
            except Exception as exc:
                callback(exc, None)
                return
            callback(None, data)

        return asyncio.get_running_loop().create_task(run())

    # Local answers

    def eth_accounts(self) -> list[str]:
        return [self.address] if self.address else []

    def eth_coinbase(self) -> str:
        return self.address

    def net_version(self) -> str:
        return str(self.chain_id)

    def eth_chain_id(self) -> str:
        return hex(self.chain_id)

    # Host inbound path

    def deliver_result(self, call_id: Any, result: Any) -> bool:
        """Called when the host answers ``call_id``."""
        return self.channel.deliver_result(call_id, result)

    def deliver_error(self, call_id: Any, error: Any) -> bool:
        """Called when the host fails ``call_id``."""
        return self.channel.deliver_error(call_id, error)

    def has_pending(self, call_id: Any) -> bool:
        return call_id in self.registry

    def _resolve_in_siblings(self, call_id: Any, result: Any) -> bool:
        return self.directory.delegate_resolve(self, call_id, result)

    def remote_emit(self, event: str, message: Any) -> bool:
        """Re-emit an out-of-band host event (accountsChanged, chainChanged, ...)."""
        return self.emit(event, decode_event_payload(message))

    def emit_connect(self, chain_id: int) -> None:
        self.emit("connect", {"chainId": chain_id})

    async def close(self) -> None:
        self.directory.unregister(self)
        await self.rpc.close()
