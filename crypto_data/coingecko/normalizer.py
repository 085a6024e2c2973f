"""
Normalization of loosely-typed CoinGecko payloads into fixed-schema records.

CoinGecko responses are treated as optional everywhere: any field may be
missing, null or of an unexpected type. Values are read through typed accessors
that return None on absence or type mismatch, and every output field has an
explicit default. Non-finite numbers (NaN, Infinity) count as missing since
they cannot be sent back as JSON.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, Final

from ..shared.models import Action, MarketList, NormalizedCoin

FALLBACK_CURRENCY: Final[str] = "usd"
MARKET_DATA_UNAVAILABLE: Final[str] = "Market data not available for this coin"

FIELD_DEFAULTS: Final[dict[str, Any]] = {
    name: field.default for name, field in NormalizedCoin.model_fields.items()
}

# Fields copied from a market list record as-is.
MARKET_NUMBER_FIELDS: Final[tuple[str, ...]] = (
    "current_price",
    "market_cap",
    "total_volume",
    "price_change_24h",
    "price_change_percentage_24h",
    "circulating_supply",
    "total_supply",
    "max_supply",
)

# Currency-independent fields copied from a coin's market_data.
COIN_NUMBER_FIELDS: Final[tuple[str, ...]] = (
    "price_change_percentage_24h",
    "circulating_supply",
    "total_supply",
    "max_supply",
)

logger = logging.getLogger(__name__)


def get_number(data: Any, key: str) -> float | int | None:
    """Return a finite numeric field, or None if missing, not a number, NaN or inf."""
    if not isinstance(data, Mapping):
        return None
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return value


def get_str(data: Any, key: str) -> str | None:
    """Return a string field, or None if missing or not a string."""
    if not isinstance(data, Mapping):
        return None
    value = data.get(key)
    return value if isinstance(value, str) else None


def get_mapping(data: Any, key: str) -> Mapping[str, Any] | None:
    """Return an object field, or None if missing or not an object."""
    if not isinstance(data, Mapping):
        return None
    value = data.get(key)
    return value if isinstance(value, Mapping) else None


def _or_default(value: Any, field: str) -> Any:
    return FIELD_DEFAULTS[field] if value is None else value


def _rank(value: float | int | None) -> int:
    if value is None:
        return FIELD_DEFAULTS["market_cap_rank"]
    return int(value)


def _upper(value: str | None) -> str:
    return value.upper() if value else ""


def normalize_coin(payload: Any, coin_id: str, currency: str) -> NormalizedCoin:
    """
    Map a /coins/{id} payload into a NormalizedCoin.

    Args:
        payload: Decoded JSON from CoinGecko
        coin_id: Requested coin id, used when the payload has none
        currency: Requested currency code

    Returns:
        NormalizedCoin: Record with defaults for every missing field
    """
    market_data = get_mapping(payload, "market_data")
    rank = get_number(payload, "market_cap_rank")
    if rank is None:
        rank = get_number(market_data, "market_cap_rank")

    image = get_str(get_mapping(payload, "image"), "large")
    last_updated = get_str(payload, "last_updated")

    identity = {
        "id": get_str(payload, "id") or coin_id,
        "name": get_str(payload, "name") or "Unknown",
        "symbol": _upper(get_str(payload, "symbol")),
        "image": _or_default(image, "image"),
        "market_cap_rank": _rank(rank),
        "last_updated": _or_default(last_updated, "last_updated"),
    }

    if market_data is None:
        logger.warning(f"No market data in CoinGecko payload for '{coin_id}'")
        return NormalizedCoin(**identity, error_note=MARKET_DATA_UNAVAILABLE)

    current_prices = get_mapping(market_data, "current_price")
    current_price = get_number(current_prices, currency)
    if current_price is None:
        current_price = get_number(current_prices, FALLBACK_CURRENCY)

    scoped = {
        "current_price": current_price,
        "market_cap": get_number(get_mapping(market_data, "market_cap"), currency),
        "total_volume": get_number(get_mapping(market_data, "total_volume"), currency),
        "price_change_24h": get_number(
            get_mapping(market_data, "price_change_24h_in_currency"), currency
        ),
    }
    unscoped = {field: get_number(market_data, field) for field in COIN_NUMBER_FIELDS}

    numbers = {
        field: _or_default(value, field)
        for field, value in (scoped | unscoped).items()
    }
    return NormalizedCoin(**identity, **numbers)


def normalize_market_record(record: Any) -> NormalizedCoin:
    """Map one /coins/markets entry into a NormalizedCoin."""
    rank = get_number(record, "market_cap_rank")
    numbers = {
        field: _or_default(get_number(record, field), field)
        for field in MARKET_NUMBER_FIELDS
    }
    return NormalizedCoin(
        id=_or_default(get_str(record, "id"), "id"),
        name=get_str(record, "name") or "Unknown",
        symbol=_upper(get_str(record, "symbol")),
        image=_or_default(get_str(record, "image"), "image"),
        market_cap_rank=_rank(rank),
        last_updated=_or_default(get_str(record, "last_updated"), "last_updated"),
        **numbers,
    )


def normalize_market_list(payload: Any, currency: str) -> MarketList:
    """
    Map a /coins/markets payload into a MarketList.

    Upstream ordering is preserved. An entry that is not an object still yields
    a record made of defaults, so total_results always matches the upstream
    list length.
    """
    records = payload if isinstance(payload, list) else []
    if payload is not None and not isinstance(payload, list):
        logger.warning(f"Unexpected market list payload type: {type(payload).__name__}")

    return MarketList(
        currency=currency.upper(),
        total_results=len(records),
        results=[normalize_market_record(record) for record in records],
    )


def normalize_response(
    action: Action, currency: str, coin_id: str, payload: Any
) -> NormalizedCoin | MarketList:
    """Normalize an upstream payload according to the request action."""
    if action is Action.COIN:
        return normalize_coin(payload, coin_id, currency)
    return normalize_market_list(payload, currency)
