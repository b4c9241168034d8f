"""Directory of provider instances living in sibling execution contexts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

from loguru import logger

if TYPE_CHECKING:
    from walletbridge.provider.facade import WalletProvider


class ProviderDirectory:
    """Tracks providers that share one wallet host channel.

    Providers are grouped by identity marker (``kind``). Lookups across
    contexts only read another provider's pending ids and delegate to its
    public entry points; nothing here touches another provider's internals.
    """

    def __init__(self) -> None:
        self._providers: list[WalletProvider] = []

    def __len__(self) -> int:
        return len(self._providers)

    def register(self, provider: WalletProvider) -> None:
        if provider not in self._providers:
            self._providers.append(provider)

    def unregister(self, provider: WalletProvider) -> None:
        if provider in self._providers:
            self._providers.remove(provider)

    def siblings(self, provider: WalletProvider) -> Iterator[WalletProvider]:
        """Other providers carrying the same identity marker."""
        for other in list(self._providers):
            if other is not provider and other.kind == provider.kind:
                yield other

    def delegate_resolve(self, origin: WalletProvider, call_id: Any, result: Any) -> bool:
        """Hand a result nobody claimed locally to the sibling that owns ``call_id``."""
        for sibling in self.siblings(origin):
            try:
                if sibling.has_pending(call_id):
                    return sibling.deliver_result(call_id, result)
            except Exception as exc:
                logger.warning("Delivering response {} to sibling provider failed: {}", call_id, exc)
        return False

    def propagate_address(self, origin: WalletProvider, address: str, ready: bool) -> None:
        """Push a login/logout into every sibling without a host round trip."""
        for sibling in self.siblings(origin):
            sibling.apply_address(address, ready)
