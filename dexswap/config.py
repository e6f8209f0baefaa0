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
        """Pick up the legacy RPC environment variable when no URL is set."""

        super().model_post_init(__context)

        if not self.rpc_url:
            fallback = os.getenv("ETH_RPC_URL") or os.getenv("WEB3_PROVIDER_URI")
            if fallback:
                object.__setattr__(self, "rpc_url", fallback)

    log_level: str = Field(default="INFO", description="Logging level")

    # Ledger access
    rpc_url: str = Field(
        default="",
        description="JSON-RPC endpoint used for allowance and balance reads",
        validation_alias=AliasChoices("rpc_url", "RPC_URL", "DEXSWAP_RPC_URL"),
    )
    network: str = Field(default="ETH", description="Network symbol swaps are built for")

    # Aggregator
    dexag_base_url: str = Field(
        default="",
        description="Override the default dex.ag API base URL",
    )
    request_timeout_seconds: int = Field(default=20, description="HTTP request timeout")

    # Swap policy
    disabled_symbols: List[str] = Field(
        default_factory=lambda: ["USDT"],
        description="Currency symbols that may not be swapped through the aggregator",
    )
    swap_valid_seconds: int = Field(
        default=600,
        ge=1,
        description="Validity window attached to a pending swap order",
    )

    @property
    def has_rpc_url(self) -> bool:
        return bool(self.rpc_url)


# Global settings instance
settings = Settings()
