"""Configuration module for walletbridge."""

from walletbridge.config.loader import load_config, save_config, get_config_path
from walletbridge.config.schema import BridgeConfig, ProviderConfig

__all__ = [
    "BridgeConfig",
    "ProviderConfig",
    "load_config",
    "save_config",
    "get_config_path",
]
