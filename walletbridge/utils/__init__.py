"""Utility functions for walletbridge."""

from walletbridge.utils.encoding import bytes_to_hex, gen_id, is_utf8, message_to_bytes
from walletbridge.utils.exceptions import (
    WalletBridgeError,
    ProviderRpcError,
    HostError,
    RpcTransportError,
    ConfigError,
    ErrorCategory,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "bytes_to_hex",
    "gen_id",
    "is_utf8",
    "message_to_bytes",
    "WalletBridgeError",
    "ProviderRpcError",
    "HostError",
    "RpcTransportError",
    "ConfigError",
    "ErrorCategory",
    "classify_exception",
    "sanitize_error_message",
]
