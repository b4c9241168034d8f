"""Pending-call bookkeeping: internal id -> (future, wrap flag)."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from walletbridge.provider.id_mapping import IdMapping
from walletbridge.utils.exceptions import REQUEST_TIMEOUT, ProviderRpcError


@dataclass(slots=True)
class PendingCall:
    id: int
    future: asyncio.Future[Any]
    wrap: bool
    method: str = ""
    timer: asyncio.TimerHandle | None = None


def shape_result(result: Any) -> Any:
    """Normalize a raw host/transport result to the value callers see.

    JSON-RPC envelopes are unwrapped, strings are JSON-decoded when possible
    (otherwise kept raw) and everything else is returned verbatim.
    """
    if isinstance(result, dict) and result.get("jsonrpc") and "result" in result:
        return result["result"]
    if isinstance(result, str):
        try:
            return json.loads(result)
        except json.JSONDecodeError:
            return result
    return result


def build_envelope(origin_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": origin_id, "result": result}


class PendingCallRegistry:
    """Owns the in-flight calls of one provider.

    Each call is completed at most once. Lookups after completion are no-ops.
    A ``resolve`` for an unknown id is handed to ``on_unmatched`` (sibling
    lookup); a ``reject`` for an unknown id is dropped.
    """

    def __init__(
        self,
        id_mapping: IdMapping,
        *,
        on_unmatched: Callable[[int, Any], bool] | None = None,
    ) -> None:
        self._id_mapping = id_mapping
        self._calls: dict[Any, PendingCall] = {}
        self.on_unmatched = on_unmatched

    def __len__(self) -> int:
        return len(self._calls)

    def __contains__(self, call_id: object) -> bool:
        try:
            return call_id in self._calls
        except TypeError:
            return False

    def pending_ids(self) -> list[Any]:
        return list(self._calls)

    def register(
        self,
        call_id: int,
        future: asyncio.Future[Any],
        wrap: bool,
        *,
        method: str = "",
        timeout: float | None = None,
    ) -> PendingCall:
        call = PendingCall(id=call_id, future=future, wrap=wrap, method=method)
        if timeout is not None and timeout > 0:
            loop = future.get_loop()
            call.timer = loop.call_later(timeout, self._expire, call_id)
        self._calls[call_id] = call
        return call

    def _take(self, call_id: Any) -> PendingCall | None:
        try:
            call = self._calls.pop(call_id, None)
        except TypeError:
            return None
        if call is not None and call.timer is not None:
            call.timer.cancel()
        return call

    def resolve(self, call_id: Any, result: Any, *, shape: bool = True) -> bool:
        """Complete ``call_id`` with ``result``; returns True if someone owned it.

        ``shape=False`` is for values computed locally, which are already in
        their final form.
        """
        call = self._take(call_id)
        if call is None:
            if self.on_unmatched is not None and self.on_unmatched(call_id, result):
                return True
            logger.debug("Dropping result for unknown request id {}", call_id)
            return False
        origin_id = self._id_mapping.try_pop_id(call_id, call_id)
        value = shape_result(result) if shape else result
        if call.future.done():
            return True
        call.future.set_result(build_envelope(origin_id, value) if call.wrap else value)
        return True

    def reject(self, call_id: Any, error: Any) -> bool:
        """Fail ``call_id`` with ``error``; unknown ids are ignored."""
        call = self._take(call_id)
        if call is None:
            logger.debug("Dropping error for unknown request id {}", call_id)
            return False
        self._id_mapping.try_pop_id(call_id)
        if not call.future.done():
            call.future.set_exception(ProviderRpcError.from_payload(error))
        return True

    def discard(self, call_id: Any) -> None:
        """Forget ``call_id`` without completing it (caller went away)."""
        if self._take(call_id) is not None:
            self._id_mapping.try_pop_id(call_id)

    def _expire(self, call_id: Any) -> None:
        call = self._calls.get(call_id)
        if call is None:
            return
        call.timer = None
        logger.warning("Request {} ({}) timed out waiting for the wallet host", call_id, call.method or "?")
        self.reject(
            call_id,
            ProviderRpcError(REQUEST_TIMEOUT, f"request {call.method or call_id} timed out"),
        )
