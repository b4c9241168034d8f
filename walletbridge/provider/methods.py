"""Closed sets of provider RPC methods and wallet host handler tags."""

from __future__ import annotations

from enum import Enum


class RpcMethod(str, Enum):
    """Methods the provider handles itself or routes to the wallet host.

    Anything that does not parse into a member is forwarded upstream.
    """

    ETH_ACCOUNTS = "eth_accounts"
    ETH_COINBASE = "eth_coinbase"
    NET_VERSION = "net_version"
    ETH_CHAIN_ID = "eth_chainId"
    ETH_SIGN = "eth_sign"
    PERSONAL_SIGN = "personal_sign"
    PERSONAL_EC_RECOVER = "personal_ecRecover"
    ETH_SIGN_TYPED_DATA = "eth_signTypedData"
    ETH_SIGN_TYPED_DATA_V3 = "eth_signTypedData_v3"
    ETH_SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"
    ETH_SEND_TRANSACTION = "eth_sendTransaction"
    ETH_REQUEST_ACCOUNTS = "eth_requestAccounts"
    WALLET_WATCH_ASSET = "wallet_watchAsset"
    WALLET_ADD_ETHEREUM_CHAIN = "wallet_addEthereumChain"
    ETH_NEW_FILTER = "eth_newFilter"
    ETH_NEW_BLOCK_FILTER = "eth_newBlockFilter"
    ETH_NEW_PENDING_TRANSACTION_FILTER = "eth_newPendingTransactionFilter"
    ETH_UNINSTALL_FILTER = "eth_uninstallFilter"
    ETH_SUBSCRIBE = "eth_subscribe"

    @classmethod
    def parse(cls, name: object) -> RpcMethod | None:
        """Return the member for ``name`` or None for unrecognized methods."""
        if not isinstance(name, str):
            return None
        try:
            return cls(name)
        except ValueError:
            return None


class HostHandler(str, Enum):
    """Handler tags understood by the wallet host (``name`` of a host frame)."""

    SIGN_PERSONAL_MESSAGE = "signPersonalMessage"
    SIGN_MESSAGE = "signMessage"
    EC_RECOVER = "ecRecover"
    SIGN_TYPED_MESSAGE = "signTypedMessage"
    SIGN_TRANSACTION = "signTransaction"
    REQUEST_ACCOUNTS = "requestAccounts"
    WATCH_ASSET = "watchAsset"
    ADD_ETHEREUM_CHAIN = "addEthereumChain"


LOCAL_METHODS = frozenset(
    {
        RpcMethod.ETH_ACCOUNTS,
        RpcMethod.ETH_COINBASE,
        RpcMethod.NET_VERSION,
        RpcMethod.ETH_CHAIN_ID,
    }
)

UNSUPPORTED_METHODS = frozenset(
    {
        RpcMethod.ETH_NEW_FILTER,
        RpcMethod.ETH_NEW_BLOCK_FILTER,
        RpcMethod.ETH_NEW_PENDING_TRANSACTION_FILTER,
        RpcMethod.ETH_UNINSTALL_FILTER,
        RpcMethod.ETH_SUBSCRIBE,
    }
)

HOST_METHODS = frozenset(set(RpcMethod) - LOCAL_METHODS - UNSUPPORTED_METHODS)
