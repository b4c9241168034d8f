"""Configuration schema using Pydantic.

Provider settings accept the camelCase keys page templates use
(``chainId``, ``rpcUrl``, ``isDebug``) as well as snake_case.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings


def parse_chain_id(value: Any) -> int:
    """Accept ints, decimal strings and 0x-prefixed hex strings."""
    if isinstance(value, bool):
        raise ValueError("chain id must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text[2:], 16)
        return int(text, 10)
    raise ValueError(f"invalid chain id: {value!r}")


class ProviderConfig(BaseModel):
    """Settings for one in-page provider instance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    address: str = ""  # Current wallet address, empty until the host logs in
    chain_id: int = 1
    rpc_url: str = ""  # Upstream node for non-wallet methods
    is_debug: bool = False
    request_timeout: float | None = None  # Seconds to wait for the host; None waits forever
    rpc_timeout: float = 30.0
    identity: str = "walletbridge"  # Providers sharing this marker see each other as siblings

    @field_validator("address", mode="before")
    @classmethod
    def _address(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("chain_id", mode="before")
    @classmethod
    def _chain_id(cls, value: Any) -> int:
        return parse_chain_id(value)


class BridgeConfig(BaseSettings):
    """Root configuration for walletbridge."""
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    log_level: str = "INFO"
    forward_logs_to_host: bool = False

    model_config = ConfigDict(
        env_prefix="WALLETBRIDGE_",
        env_nested_delimiter="__",
    )
