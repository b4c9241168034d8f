"""Upstream transport for methods the wallet host does not own."""

from walletbridge.transport.rpc import RpcClient

__all__ = ["RpcClient"]
