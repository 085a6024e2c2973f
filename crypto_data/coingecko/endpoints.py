"""
CoinGecko endpoint URLs for validated request parameters.
"""

from typing import Final
from urllib.parse import quote, urlencode

from ..shared.models import Action, RequestParams

COIN_DETAIL_QUERY: Final[dict[str, str]] = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "false",
    "developer_data": "false",
    "sparkline": "false",
}


def build_upstream_url(params: RequestParams, base_url: str) -> str:
    """
    Build the CoinGecko URL for a request.

    Args:
        params: Validated request parameters
        base_url: CoinGecko API base URL, e.g. 'https://api.coingecko.com/api/v3'

    Returns:
        str: Absolute upstream URL
    """
    base = base_url.rstrip("/")

    if params.action is Action.COIN:
        coin_path = quote(params.coin_id, safe="")
        return f"{base}/coins/{coin_path}?{urlencode(COIN_DETAIL_QUERY)}"

    markets_query = {
        "vs_currency": params.currency,
        "order": "market_cap_desc",
        "per_page": params.limit,
        "page": 1,
        "sparkline": "false",
        "price_change_percentage": "1h,24h,7d",
    }
    return f"{base}/coins/markets?{urlencode(markets_query, safe=',')}"
