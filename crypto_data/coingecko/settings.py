"""
CoinGecko client settings using Pydantic for environment-based configuration.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoinGeckoSettings(BaseSettings):
    """CoinGecko upstream configuration using Pydantic settings."""

    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko REST API base URL",
    )

    coingecko_timeout_seconds: float = Field(
        default=20, gt=0, description="Total timeout in seconds for each request"
    )

    coingecko_max_attempts: int = Field(
        default=3, ge=1, description="Maximum number of attempts per fetch"
    )

    coingecko_backoff_base_ms: int = Field(
        default=1000,
        ge=0,
        description="Base delay in milliseconds for exponential backoff",
    )

    coingecko_user_agent: str = Field(
        default="CryptoDataFunction/1.0",
        description="User-Agent header sent to CoinGecko",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create a global instance
coingecko_settings = CoinGeckoSettings()
