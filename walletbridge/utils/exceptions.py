"""
Errors raised by walletbridge.

Every error carries a string code and an ErrorCategory. Errors that reach
provider callers are ProviderRpcError, which serializes to the EIP-1193
``{code, message}`` shape. Messages that may contain RPC URLs go through
sanitize_error_message before they are logged or printed.
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


class WalletBridgeError(Exception):
    """Base exception for all walletbridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# EIP-1193 provider error codes
UNSUPPORTED_METHOD = 4200
NOT_READY = 4100
REQUEST_TIMEOUT = 4900
INVALID_PARAMS = -32602

_RPC_CODE_NAMES = {
    UNSUPPORTED_METHOD: ("UNSUPPORTED_METHOD", ErrorCategory.UNSUPPORTED),
    INVALID_PARAMS: ("INVALID_PARAMS", ErrorCategory.VALIDATION),
    NOT_READY: ("NOT_READY", ErrorCategory.RECOVERABLE),
    REQUEST_TIMEOUT: ("REQUEST_TIMEOUT", ErrorCategory.TIMEOUT),
}


class ProviderRpcError(WalletBridgeError):
    """Structured provider error surfaced to callers as ``{code, message}``."""

    def __init__(self, rpc_code: int, message: str, data: Any = None):
        code, category = _RPC_CODE_NAMES.get(rpc_code, ("PROVIDER_ERROR", ErrorCategory.FATAL))
        details = {"rpc_code": rpc_code}
        if data is not None:
            details["data"] = data
        super().__init__(message, code=code, category=category, details=details)
        self.rpc_code = rpc_code
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.rpc_code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload

    def __str__(self) -> str:
        return f"[{self.rpc_code}] {self.message}"

    @classmethod
    def from_payload(cls, raw: Any) -> Exception:
        """Normalize an error delivered by the wallet host.

        Exceptions pass through untouched, ``{code, message}`` objects become
        a ProviderRpcError and anything else is wrapped in a HostError.
        """
        if isinstance(raw, Exception):
            return raw
        if isinstance(raw, str):
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError:
                return HostError(raw)
            if isinstance(decoded, dict):
                raw = decoded
            else:
                return HostError(raw)
        if isinstance(raw, dict):
            code = raw.get("code")
            message = raw.get("message")
            if isinstance(code, int) and not isinstance(code, bool):
                return cls(code, str(message or "provider error"), raw.get("data"))
            if message:
                return HostError(str(message))
        return HostError(str(raw))


class HostError(WalletBridgeError):
    """Error reported by the wallet host without a structured code."""

    def __init__(self, message: str):
        super().__init__(message, code="HOST_ERROR", category=ErrorCategory.FATAL)


class RpcTransportError(WalletBridgeError):
    """Upstream JSON-RPC transport failure."""

    def __init__(
        self,
        message: str,
        *,
        rpc_error: dict[str, Any] | None = None,
        status_code: int | None = None,
        is_retryable: bool = False,
    ):
        category = ErrorCategory.RETRYABLE if is_retryable else ErrorCategory.FATAL
        super().__init__(
            message,
            code="RPC_TRANSPORT_ERROR",
            category=category,
            details={"rpc_error": rpc_error, "status_code": status_code, "is_retryable": is_retryable},
        )
        self.rpc_error = rpc_error
        self.status_code = status_code


class ConfigError(WalletBridgeError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="CONFIG_ERROR", category=ErrorCategory.VALIDATION, details=details)


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information (API keys in RPC URLs, tokens) from messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).
    """
    if isinstance(exc, WalletBridgeError):
        return exc.code, exc.category, exc.category == ErrorCategory.RETRYABLE

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False
