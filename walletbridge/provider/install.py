"""Create the well-known provider instances for one execution context."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from walletbridge.config.schema import BridgeConfig
from walletbridge.host.sinks import HostSink, install_log_forwarding
from walletbridge.provider.directory import ProviderDirectory
from walletbridge.provider.facade import WalletProvider


@dataclass
class InstalledProviders:
    ethereum: WalletProvider
    branded: WalletProvider
    directory: ProviderDirectory
    log_handler_id: int | None = None

    def all(self) -> list[WalletProvider]:
        return [self.ethereum, self.branded]

    async def close(self) -> None:
        if self.log_handler_id is not None:
            logger.remove(self.log_handler_id)
            self.log_handler_id = None
        for provider in self.all():
            await provider.close()


def install_providers(
    config: BridgeConfig,
    *,
    sink: HostSink | None = None,
    directory: ProviderDirectory | None = None,
) -> InstalledProviders:
    """Build the generic ``ethereum`` provider and the wallet-branded alias.

    Both share one identity marker and one directory, so a host reply for a
    call made through either instance reaches its caller.
    """
    directory = directory or ProviderDirectory()
    ethereum = WalletProvider(config.provider, sink=sink, directory=directory)
    branded = WalletProvider(config.provider, sink=sink, directory=directory)
    handler_id = None
    if sink is not None and config.forward_logs_to_host:
        handler_id = install_log_forwarding(sink, level="DEBUG" if config.provider.is_debug else "INFO")
    return InstalledProviders(
        ethereum=ethereum,
        branded=branded,
        directory=directory,
        log_handler_id=handler_id,
    )
