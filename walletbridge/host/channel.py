"""Outbound send primitive and inbound result path for the wallet host."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from walletbridge.host.protocol import HostFrame, coerce_request_id
from walletbridge.host.sinks import HostSink
from walletbridge.provider.methods import HostHandler
from walletbridge.provider.pending import PendingCallRegistry
from walletbridge.utils.exceptions import NOT_READY, ProviderRpcError


class HostChannel:
    """Fire-and-forget frames to the host; completions arrive via deliver_*."""

    def __init__(
        self,
        registry: PendingCallRegistry,
        *,
        is_ready: Callable[[], bool],
        sink: HostSink | None = None,
    ):
        self._registry = registry
        self._is_ready = is_ready
        self.sink = sink

    def send(self, handler: HostHandler, call_id: int, data: Any) -> bool:
        """Post ``{id, name, object}`` to the host, or fail the call if not ready.

        ``requestAccounts`` is always allowed since it is how readiness is
        established. Returns True when a frame was handed to the sink.
        """
        if not (self._is_ready() or handler is HostHandler.REQUEST_ACCOUNTS):
            self._registry.reject(call_id, ProviderRpcError(NOT_READY, "provider is not ready"))
            return False
        if self.sink is None:
            logger.warning("No wallet host attached, dropping {} for request {}", handler.value, call_id)
            return False
        self.sink.post_message(HostFrame(id=call_id, name=handler, object=data).encode())
        return True

    def deliver_result(self, call_id: Any, result: Any) -> bool:
        return self._registry.resolve(coerce_request_id(call_id), result)

    def deliver_error(self, call_id: Any, error: Any) -> bool:
        return self._registry.reject(coerce_request_id(call_id), error)
