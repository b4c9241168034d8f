"""Request correlation and dispatch core."""

from walletbridge.provider.id_mapping import IdMapping
from walletbridge.provider.methods import HostHandler, RpcMethod
from walletbridge.provider.pending import PendingCall, PendingCallRegistry, shape_result

__all__ = [
    "IdMapping",
    "HostHandler",
    "RpcMethod",
    "PendingCall",
    "PendingCallRegistry",
    "shape_result",
]
