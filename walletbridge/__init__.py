"""
walletbridge - Ethereum provider bridge to an external wallet host
"""

__version__ = "0.1.0"
__logo__ = "🌉"

from walletbridge.provider.directory import ProviderDirectory
from walletbridge.provider.facade import WalletProvider
from walletbridge.provider.install import InstalledProviders, install_providers
from walletbridge.utils.exceptions import ProviderRpcError

__all__ = [
    "ProviderDirectory",
    "WalletProvider",
    "InstalledProviders",
    "install_providers",
    "ProviderRpcError",
]
