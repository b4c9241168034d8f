"""Wire frames exchanged with the wallet host."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from walletbridge.provider.methods import HostHandler


@dataclass(slots=True)
class HostFrame:
    """Outbound ``{id, name, object}`` message."""

    id: int
    name: HostHandler
    object: Any

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name.value, "object": self.object}

    def encode(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(slots=True)
class LogFrame:
    """Outbound ``{type, data}`` message carrying a forwarded log line."""

    type: str
    data: Any

    def encode(self) -> str:
        return json.dumps({"type": self.type, "data": self.data}, ensure_ascii=False, default=str)


def coerce_request_id(raw: Any) -> Any:
    """Host replies may carry numeric ids as strings; map them back to ints."""
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit():
            return int(text)
    return raw


def decode_event_payload(message: Any) -> Any:
    """JSON-decode string event payloads, keeping invalid JSON as the raw string."""
    if isinstance(message, str):
        try:
            return json.loads(message)
        except json.JSONDecodeError:
            return message
    return message
