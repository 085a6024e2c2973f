"""
Data models for the crypto data application.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    """Supported request actions."""

    COIN = "coin"
    TOP = "top"


class RawParams(BaseModel):
    """Request parameters as extracted, before validation."""

    model_config = ConfigDict(frozen=True)

    action: str = "top"
    coin: str = ""
    currency: str = "usd"
    limit: str = "10"


class RequestParams(BaseModel):
    """Validated request parameters."""

    model_config = ConfigDict(frozen=True)

    action: Action
    coin_id: str = ""
    currency: str = "usd"
    limit: Annotated[int, Field(ge=1, le=250)] = 10


class NormalizedCoin(BaseModel):
    """Fixed-schema coin record returned to clients."""

    id: str = ""
    name: str = "Unknown"
    symbol: str = ""
    image: str = ""
    current_price: float = 0
    market_cap: float = 0
    market_cap_rank: int = 0
    total_volume: float = 0
    price_change_24h: float = 0
    price_change_percentage_24h: float = 0
    circulating_supply: float = 0
    total_supply: float = 0
    max_supply: float = 0
    last_updated: str = ""
    error_note: Annotated[
        str | None, Field(description="Set when market data was unavailable")
    ] = None


class MarketList(BaseModel):
    """Top coins by market cap."""

    currency: str
    total_results: int
    results: list[NormalizedCoin]
