"""Caller id -> internal integer id rewriting."""

from __future__ import annotations

import itertools
from typing import Any, Callable

from walletbridge.utils.encoding import gen_id

# One counter for every provider in the process, so ids never collide across
# sibling providers that share a host channel.
_counter = itertools.count(gen_id())


def next_internal_id() -> int:
    return next(_counter)


def is_plain_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class IdMapping:
    """Rewrites caller ids into unique integers and restores them on response."""

    def __init__(self) -> None:
        self._origin_ids: dict[int, Any] = {}

    def __len__(self) -> int:
        return len(self._origin_ids)

    def __contains__(self, internal_id: object) -> bool:
        return internal_id in self._origin_ids

    def try_intify_id(
        self,
        payload: dict[str, Any],
        *,
        taken: Callable[[int], bool] | None = None,
    ) -> int:
        """Ensure ``payload["id"]`` is a usable internal id and return it.

        A plain int that is not already in flight is kept as-is. Anything else
        (strings, None, missing, booleans, ints already in use) is replaced by
        a fresh internal id and the original value is remembered.
        """
        current = payload.get("id")
        if is_plain_int(current) and not (taken and taken(current)):
            return current
        new_id = next_internal_id()
        while new_id in self._origin_ids or (taken and taken(new_id)):
            new_id = next_internal_id()
        self._origin_ids[new_id] = current
        payload["id"] = new_id
        return new_id

    def try_pop_id(self, internal_id: Any, default: Any = None) -> Any:
        """Remove and return the original id for ``internal_id``, else ``default``."""
        return self._origin_ids.pop(internal_id, default)

    def try_restore_id(self, payload: dict[str, Any]) -> None:
        """Put the caller's original id back into a response envelope."""
        internal_id = payload.get("id")
        if internal_id in self._origin_ids:
            payload["id"] = self._origin_ids.pop(internal_id)
