"""
Test configuration for the crypto data tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path before importing our modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import our modules after path setup
from crypto_data.coingecko.client import CoinGeckoClient  # noqa: E402
from fakes import FakeResponse, FakeSession, RecordingSleep  # noqa: E402


@pytest.fixture
def recording_sleep():
    """Provide a sleep replacement that records delays."""
    return RecordingSleep()


@pytest.fixture
def make_client(recording_sleep):
    """Build a CoinGeckoClient around a FakeSession with scripted outcomes."""

    def _make(*outcomes: FakeResponse | Exception) -> CoinGeckoClient:
        return CoinGeckoClient(
            FakeSession(*outcomes),
            max_attempts=3,
            backoff_base_ms=1000,
            base_url="https://api.coingecko.com/api/v3",
            sleep=recording_sleep,
        )

    return _make


@pytest.fixture
def bitcoin_payload():
    """Provide a trimmed /coins/bitcoin payload."""
    return {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "image": {
            "thumb": "https://assets.coingecko.com/coins/images/1/thumb/bitcoin.png",
            "large": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
        },
        "market_cap_rank": 1,
        "market_data": {
            "current_price": {"usd": 43000.5, "eur": 39500.25, "gbp": 34000},
            "market_cap": {"usd": 840000000000, "eur": 772000000000},
            "total_volume": {"usd": 28000000000, "eur": 25700000000},
            "price_change_24h": 1050.5,
            "price_change_24h_in_currency": {"usd": 1050.5, "eur": 960.1},
            "price_change_percentage_24h": 2.5,
            "circulating_supply": 19600000.0,
            "total_supply": 21000000.0,
            "max_supply": 21000000.0,
        },
        "last_updated": "2025-01-15T12:00:00.000Z",
    }


@pytest.fixture
def markets_payload():
    """Provide a trimmed /coins/markets payload."""
    return [
        {
            "id": "bitcoin",
            "symbol": "btc",
            "name": "Bitcoin",
            "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
            "current_price": 43000.5,
            "market_cap": 840000000000,
            "market_cap_rank": 1,
            "total_volume": 28000000000,
            "price_change_24h": 1050.5,
            "price_change_percentage_24h": 2.5,
            "circulating_supply": 19600000.0,
            "total_supply": 21000000.0,
            "max_supply": 21000000.0,
            "last_updated": "2025-01-15T12:00:00.000Z",
        },
        {
            "id": "ethereum",
            "symbol": "eth",
            "name": "Ethereum",
            "image": "https://assets.coingecko.com/coins/images/279/large/ethereum.png",
            "current_price": 2300.1,
            "market_cap": 275000000000,
            "market_cap_rank": 2,
            "total_volume": 15000000000,
            "price_change_24h": -12.4,
            "price_change_percentage_24h": -0.53,
            "circulating_supply": 120000000.0,
            "total_supply": 120000000.0,
            "max_supply": None,
            "last_updated": "2025-01-15T12:00:00.000Z",
        },
    ]
