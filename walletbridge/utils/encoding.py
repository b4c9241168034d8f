"""Message/buffer helpers shared by the provider and typed-data code."""

from __future__ import annotations

import random
import string
import time
from typing import Any

_HEX_DIGITS = frozenset(string.hexdigits)


def message_to_bytes(message: Any) -> bytes:
    """Convert an ``eth_sign`` message param to raw bytes.

    Strings are read as hex (first ``0x`` removed); decoding stops at the first
    character pair that is not valid hex. Byte-like values and lists of ints are
    copied. Anything else yields ``b""``.
    """
    if isinstance(message, str):
        text = message.replace("0x", "", 1)
        out = bytearray()
        for i in range(0, len(text) - 1, 2):
            pair = text[i : i + 2]
            if pair[0] not in _HEX_DIGITS or pair[1] not in _HEX_DIGITS:
                break
            out.append(int(pair, 16))
        return bytes(out)
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    if isinstance(message, list):
        try:
            return bytes(int(x) & 0xFF for x in message)
        except (TypeError, ValueError):
            return b""
    return b""


def bytes_to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def is_utf8(data: bytes) -> bool:
    """True when ``data`` decodes as strict UTF-8."""
    try:
        bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def gen_id() -> int:
    """Millisecond timestamp plus jitter, used to seed request id counters."""
    return int(time.time() * 1000) + random.randrange(1000)
