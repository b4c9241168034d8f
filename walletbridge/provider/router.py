"""Classify provider requests and dispatch them locally, to the host or upstream."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from walletbridge.provider.methods import (
    LOCAL_METHODS,
    UNSUPPORTED_METHODS,
    HostHandler,
    RpcMethod,
)
from walletbridge.typed_data import TypedDataEncoder
from walletbridge.utils.encoding import bytes_to_hex, is_utf8, message_to_bytes
from walletbridge.utils.exceptions import INVALID_PARAMS, UNSUPPORTED_METHOD, HostError, ProviderRpcError

if TYPE_CHECKING:
    from walletbridge.provider.facade import WalletProvider

HostRoute = Callable[[dict[str, Any]], tuple[HostHandler, Any]]


def _param(payload: dict[str, Any], index: int) -> Any:
    params = payload.get("params")
    if not isinstance(params, (list, tuple)) or len(params) <= index:
        raise ProviderRpcError(
            INVALID_PARAMS,
            f"{payload.get('method')} expects at least {index + 1} params",
        )
    return params[index]


def _sign_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    data = message_to_bytes(_param(payload, 1))
    handler = HostHandler.SIGN_PERSONAL_MESSAGE if is_utf8(data) else HostHandler.SIGN_MESSAGE
    return handler, {"data": bytes_to_hex(data)}


def _personal_sign_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    return HostHandler.SIGN_PERSONAL_MESSAGE, {"data": _param(payload, 0)}


def _ec_recover_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    return HostHandler.EC_RECOVER, {
        "signature": _param(payload, 1),
        "message": _param(payload, 0),
    }


def _typed_data_route(use_v4: bool) -> HostRoute:
    def route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
        raw = _param(payload, 1)
        try:
            digest = TypedDataEncoder.hash_typed_data(raw, use_v4=use_v4)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise ProviderRpcError(INVALID_PARAMS, f"invalid typed data: {exc}") from exc
        return HostHandler.SIGN_TYPED_MESSAGE, {
            "data": "0x" + digest.hex(),
            "raw": raw if isinstance(raw, str) else json.dumps(raw),
        }

    return route


def _send_transaction_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    return HostHandler.SIGN_TRANSACTION, _param(payload, 0)


def _request_accounts_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    return HostHandler.REQUEST_ACCOUNTS, {}


def _watch_asset_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    params = payload.get("params")
    if isinstance(params, list) and params and isinstance(params[0], dict):
        params = params[0]
    if not isinstance(params, dict):
        params = {}
    options = params.get("options") if isinstance(params.get("options"), dict) else {}
    return HostHandler.WATCH_ASSET, {
        "type": params.get("type", payload.get("type")),
        "contract": options.get("address"),
        "symbol": options.get("symbol"),
        "decimals": options.get("decimals") or 0,
    }


def _add_chain_route(payload: dict[str, Any]) -> tuple[HostHandler, Any]:
    return HostHandler.ADD_ETHEREUM_CHAIN, _param(payload, 0)


HOST_ROUTES: dict[RpcMethod, HostRoute] = {
    RpcMethod.ETH_SIGN: _sign_route,
    RpcMethod.PERSONAL_SIGN: _personal_sign_route,
    RpcMethod.PERSONAL_EC_RECOVER: _ec_recover_route,
    RpcMethod.ETH_SIGN_TYPED_DATA_V3: _typed_data_route(use_v4=False),
    RpcMethod.ETH_SIGN_TYPED_DATA: _typed_data_route(use_v4=True),
    RpcMethod.ETH_SIGN_TYPED_DATA_V4: _typed_data_route(use_v4=True),
    RpcMethod.ETH_SEND_TRANSACTION: _send_transaction_route,
    RpcMethod.ETH_REQUEST_ACCOUNTS: _request_accounts_route,
    RpcMethod.WALLET_WATCH_ASSET: _watch_asset_route,
    RpcMethod.WALLET_ADD_ETHEREUM_CHAIN: _add_chain_route,
}


def unsupported_method_error(method: Any, *, synchronous: bool = False) -> ProviderRpcError:
    if synchronous:
        return ProviderRpcError(
            UNSUPPORTED_METHOD,
            f"Wallet does not support calling {method} synchronously without a callback. "
            f"Please provide a callback parameter to call {method} asynchronously.",
        )
    return ProviderRpcError(
        UNSUPPORTED_METHOD,
        f"Wallet does not support calling {method}. Please use your own solution",
    )


class MethodRouter:
    """Dispatches one ``{method, params, id}`` call for a provider."""

    def __init__(self, provider: WalletProvider):
        self._provider = provider
        self._local: dict[RpcMethod, Callable[[], Any]] = {
            RpcMethod.ETH_ACCOUNTS: provider.eth_accounts,
            RpcMethod.ETH_COINBASE: provider.eth_coinbase,
            RpcMethod.NET_VERSION: provider.net_version,
            RpcMethod.ETH_CHAIN_ID: provider.eth_chain_id,
        }

    def local_result(self, method: RpcMethod) -> Any:
        return self._local[method]()

    async def dispatch(self, payload: dict[str, Any], wrap: bool) -> Any:
        provider = self._provider
        registry = provider.registry
        name = payload.get("method")
        method = RpcMethod.parse(name)
        call_id = provider.id_mapping.try_intify_id(payload, taken=registry.__contains__)
        if provider.is_debug:
            logger.debug("==> {} id={} params={}", name, call_id, payload.get("params"))

        if method in UNSUPPORTED_METHODS:
            provider.id_mapping.try_pop_id(call_id)
            raise unsupported_method_error(name)

        if method is None:
            return await self._forward_upstream(payload, call_id, wrap)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        registry.register(
            call_id,
            future,
            wrap,
            method=method.value,
            timeout=provider.config.request_timeout,
        )
        if method in LOCAL_METHODS:
            registry.resolve(call_id, self.local_result(method), shape=False)
        else:
            self._send_to_host(method, payload, call_id)

        try:
            result = await future
        except asyncio.CancelledError:
            registry.discard(call_id)
            raise
        if provider.is_debug:
            logger.debug("<== {} id={} result={}", name, call_id, result)
        return result

    def _send_to_host(self, method: RpcMethod, payload: dict[str, Any], call_id: int) -> None:
        """Build the host frame for ``method`` and post it; any failure rejects the call."""
        registry = self._provider.registry
        try:
            handler, data = HOST_ROUTES[method](payload)
        except ProviderRpcError as exc:
            registry.reject(call_id, exc)
            return
        except Exception as exc:
            logger.warning("Building {} request {} failed: {}", method.value, call_id, exc)
            registry.reject(call_id, ProviderRpcError(INVALID_PARAMS, f"invalid params for {method.value}: {exc}"))
            return
        try:
            self._provider.channel.send(handler, call_id, data)
        except (TypeError, ValueError) as exc:
            registry.reject(call_id, ProviderRpcError(INVALID_PARAMS, f"{method.value} params are not serializable: {exc}"))
        except Exception as exc:
            logger.warning("Posting {} request {} to the wallet host failed: {}", method.value, call_id, exc)
            registry.reject(call_id, HostError(f"wallet host unavailable: {exc}"))

    async def _forward_upstream(self, payload: dict[str, Any], call_id: int, wrap: bool) -> Any:
        provider = self._provider
        payload.setdefault("jsonrpc", "2.0")
        try:
            response = await provider.rpc.call(payload)
        finally:
            origin_id = provider.id_mapping.try_pop_id(call_id, call_id)
        if provider.is_debug:
            logger.debug("<== upstream {} id={}", payload.get("method"), origin_id)
        if wrap:
            envelope = dict(response)
            envelope["id"] = origin_id
            return envelope
        return response.get("result")
