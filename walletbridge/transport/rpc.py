"""
Upstream JSON-RPC transport

Forwards every method the provider does not handle itself to a regular
Ethereum node over HTTP.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from loguru import logger

from walletbridge.utils.exceptions import RpcTransportError, sanitize_error_message


class RpcClient:
    """JSON-RPC over HTTP POST"""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            rpc_url: Node endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def __repr__(self) -> str:
        return f"RpcClient({sanitize_error_message(self.rpc_url)!r})"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Send one JSON-RPC payload and return the response envelope.

        Raises:
            RpcTransportError: on network/HTTP failure, a non-JSON body, or an
                envelope that carries ``error`` without ``result``.
        """
        if not self.rpc_url:
            raise RpcTransportError("no upstream rpc url configured")
        client = await self._get_client()
        method = payload.get("method")
        try:
            resp = await client.post(
                self.rpc_url,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise RpcTransportError(f"rpc timeout: {method}", is_retryable=True) from exc
        except httpx.RequestError as exc:
            raise RpcTransportError(
                f"rpc network error: {method}: {sanitize_error_message(str(exc))}",
                is_retryable=True,
            ) from exc

        if resp.status_code >= 400:
            raise RpcTransportError(
                f"rpc http error {resp.status_code}: {method}",
                status_code=resp.status_code,
                is_retryable=resp.status_code >= 500 or resp.status_code == 429,
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise RpcTransportError(f"rpc bad response: non-json body for {method}") from exc

        if not isinstance(body, dict):
            raise RpcTransportError(f"rpc bad response: unexpected body for {method}")

        if body.get("result") is None and body.get("error"):
            error = body["error"] if isinstance(body["error"], dict) else {"message": str(body["error"])}
            logger.debug("<== rpc error {} {}", method, error)
            raise RpcTransportError(str(error.get("message") or "rpc error"), rpc_error=error)

        return body

    async def get_block_number(self) -> int:
        """Latest block number from the upstream node."""
        body = await self.call({"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []})
        return int(str(body.get("result") or "0x0"), 16)
