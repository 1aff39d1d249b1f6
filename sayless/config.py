import os

from pathlib import Path
from typing import Any, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.oneinch_api_key:
            fallback = os.getenv("INCH_API_KEY") or os.getenv("ONEINCH_KEY")
            if fallback:
                object.__setattr__(self, "oneinch_api_key", fallback)

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # 1inch (balances, history, token search, spot prices)
    oneinch_api_key: str = Field(
        default="",
        description="1inch developer portal API key",
        validation_alias=AliasChoices("oneinch_api_key", "ONEINCH_API_KEY"),
    )
    oneinch_base_url: str = Field(
        default="https://api.1inch.dev",
        description="Base URL for the 1inch APIs",
    )

    # Circle (developer-controlled wallets and testnet faucet)
    circle_api_key: str = Field(default="", description="Circle API key")
    circle_base_url: str = Field(
        default="https://api.circle.com",
        description="Base URL for the Circle APIs",
    )
    circle_entity_secret_ciphertext: str = Field(
        default="",
        description="Registered entity secret ciphertext used for wallet creation",
    )
    circle_wallet_set_id: str = Field(
        default="",
        description="Wallet set that newly created wallets are added to",
    )

    # Name resolution
    eth_rpc_url: str = Field(
        default="",
        description="Ethereum mainnet JSON-RPC endpoint used for ENS lookups",
    )
    name_suffix: str = Field(default="eth", description="Suffix appended to bare names")

    # Dispatch
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound for a single provider call",
    )
    history_default_limit: int = Field(
        default=10,
        ge=1,
        description="Transactions returned when the user does not ask for a count",
    )
    history_max_limit: int = Field(
        default=100,
        ge=1,
        description="Largest transaction count accepted before rejecting locally",
    )

    # Conversation
    max_spelling_attempts: int = Field(
        default=5,
        ge=1,
        description="Rejected spellings allowed before confirmation gives up",
    )
    session_timeout_minutes: int = Field(
        default=30,
        ge=1,
        description="Idle minutes before a session is discarded",
    )

    @property
    def has_oneinch_key(self) -> bool:
        return bool(self.oneinch_api_key)

    @property
    def has_circle_key(self) -> bool:
        return bool(self.circle_api_key)

    @property
    def has_rpc_url(self) -> bool:
        return bool(self.eth_rpc_url)

    def secret_values(self) -> List[str]:
        """Every configured credential, for scrubbing user-visible text."""
        candidates = [
            self.oneinch_api_key,
            self.circle_api_key,
            self.circle_entity_secret_ciphertext,
            self.eth_rpc_url,
        ]
        return [value for value in candidates if value]


# Global settings instance
settings = Settings()
