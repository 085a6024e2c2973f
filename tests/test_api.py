"""
Tests for the API functionality.
"""

import pytest
from fakes import FakeResponse
from fastapi.testclient import TestClient

from crypto_data.api.service import app
from crypto_data.coingecko.client import get_coingecko_client

ROUTE = "/api/CryptoDataFunction"


@pytest.fixture
def api(make_client):
    """Provide a TestClient and the fake upstream it talks to."""

    def _api(*outcomes):
        upstream = make_client(*outcomes)
        app.dependency_overrides[get_coingecko_client] = lambda: upstream
        return TestClient(app), upstream._session

    yield _api
    app.dependency_overrides.clear()


class TestAPI:
    """Test cases for the service endpoints."""

    def setup_method(self):
        """Set up test client."""
        self.client = TestClient(app)

    def test_health_check(self):
        """Test the health check endpoint."""
        response = self.client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    def test_404_endpoint(self):
        """Test non-existent endpoint."""
        response = self.client.get("/nonexistent")
        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Endpoint not found"


class TestCryptoDataEndpoint:
    """Test cases for the crypto data endpoint."""

    def test_top_default(self, api, markets_payload):
        """Test the default request: top 10 in USD."""
        client, upstream = api(FakeResponse(200, markets_payload))

        response = client.get(ROUTE)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["source"] == "CoinGecko API v3"
        assert data["timestamp"].endswith("Z")
        assert data["data"]["currency"] == "USD"
        assert data["data"]["total_results"] == 2
        assert data["request_info"] == {
            "action": "top",
            "coin": "",
            "currency": "usd",
            "limit": 10,
        }
        assert data["api_info"] == {
            "rate_limit_status": "OK",
            "response_cached": False,
        }
        assert "per_page=10" in upstream.calls[0]["url"]

    def test_coin_success(self, api, bitcoin_payload):
        """Test a single coin lookup, with parameters normalized."""
        client, upstream = api(FakeResponse(200, bitcoin_payload))

        response = client.get(
            ROUTE, params={"action": "coin", "coin": "Bitcoin", "currency": "EUR"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == "bitcoin"
        assert data["symbol"] == "BTC"
        assert data["current_price"] == 39500.25
        assert "error_note" not in data
        assert "/coins/bitcoin?" in upstream.calls[0]["url"]

    def test_success_headers(self, api, markets_payload):
        """Test the headers sent with a successful response."""
        client, _ = api(FakeResponse(200, markets_payload))

        response = client.get(ROUTE)

        assert response.headers["content-type"] == "application/json"
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["cache-control"] == "public, max-age=60"

    def test_invalid_action(self, api):
        """Test that an unknown action is rejected before any upstream call."""
        client, upstream = api(FakeResponse(200, []))

        response = client.get(ROUTE, params={"action": "invalid"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert "Invalid action" in data["error"]
        assert data["debug_info"]["error_type"] == "InvalidParameter"
        assert "cache-control" not in response.headers
        assert upstream.calls == []

    def test_missing_coin(self, api):
        """Test that action=coin requires a coin id."""
        client, _ = api(FakeResponse(200, {}))

        response = client.get(ROUTE, params={"action": "coin"})

        assert response.status_code == 400
        assert "Coin parameter is required" in response.json()["error"]

    @pytest.mark.parametrize("limit", ["999", "0", "-1", "abc", "2.5"])
    def test_invalid_limit(self, api, limit):
        """Test that limits outside [1, 250] or non-integers are rejected."""
        client, _ = api(FakeResponse(200, []))

        response = client.get(ROUTE, params={"action": "top", "limit": limit})

        assert response.status_code == 400
        data = response.json()
        assert "Limit must be a valid number" in data["error"]
        assert data["request_info"]["limit"] == limit

    def test_max_limit_accepted(self, api):
        """Test that limit=250 is accepted and forwarded."""
        client, upstream = api(FakeResponse(200, []))

        response = client.get(ROUTE, params={"limit": "250"})

        assert response.status_code == 200
        assert response.json()["data"]["total_results"] == 0
        assert "per_page=250" in upstream.calls[0]["url"]

    def test_upstream_not_found(self, api, recording_sleep):
        """Test that an unknown coin yields 404 after a single attempt."""
        client, upstream = api(
            FakeResponse(404, {"error": "coin not found"}, "Not Found")
        )

        response = client.get(
            ROUTE, params={"action": "coin", "coin": "nonexistent-coin-12345"}
        )

        assert response.status_code == 404
        data = response.json()
        assert "nonexistent-coin-12345" in data["error"]
        assert data["debug_info"]["error_type"] == "NotFound"
        assert len(upstream.calls) == 1
        assert recording_sleep.delays == []

    def test_upstream_rate_limited(self, api, recording_sleep):
        """Test that persistent throttling yields 429 after three attempts."""
        client, upstream = api(
            FakeResponse(429, "Too Many Requests", "Too Many Requests")
        )

        response = client.get(ROUTE, params={"action": "top"})

        assert response.status_code == 429
        assert "after 3 attempts" in response.json()["error"]
        assert len(upstream.calls) == 3
        assert recording_sleep.delays == [3.0, 7.0]

    def test_upstream_internal_server_error(self, api):
        """Test that persistent 500 responses yield 503."""
        client, upstream = api(FakeResponse(500, "oops", "Internal Server Error"))

        response = client.get(ROUTE)

        assert response.status_code == 503
        assert response.json()["debug_info"]["error_type"] == "UpstreamFault"
        assert len(upstream.calls) == 3

    def test_upstream_bad_gateway(self, api):
        """Test that other 5xx responses are reported as unknown failures."""
        client, upstream = api(FakeResponse(502, "bad gateway", "Bad Gateway"))

        response = client.get(ROUTE)

        assert response.status_code == 500
        data = response.json()
        assert data["debug_info"]["error_type"] == "Unknown"
        assert "Failed to fetch data" in data["error"]
        assert "HTTP 502 Bad Gateway" in data["error"]
        assert len(upstream.calls) == 3

    def test_unknown_currency_passes_through(self, api):
        """Test that an unlisted currency is forwarded and echoed."""
        client, upstream = api(FakeResponse(200, []))

        response = client.get(ROUTE, params={"currency": "xyz"})

        assert response.status_code == 200
        data = response.json()
        assert data["request_info"]["currency"] == "xyz"
        assert data["data"]["currency"] == "XYZ"
        assert "vs_currency=xyz" in upstream.calls[0]["url"]

    def test_post_body_overrides_query(self, api, bitcoin_payload):
        """Test that JSON body values take precedence over the query string."""
        client, upstream = api(FakeResponse(200, bitcoin_payload))

        response = client.post(
            ROUTE,
            params={"action": "top"},
            json={"action": "coin", "coin": "bitcoin"},
        )

        assert response.status_code == 200
        assert response.json()["request_info"]["action"] == "coin"
        assert "/coins/bitcoin?" in upstream.calls[0]["url"]

    def test_malformed_body_is_ignored(self, api, markets_payload):
        """Test that a body that is not JSON falls back to query values."""
        client, _ = api(FakeResponse(200, markets_payload))

        response = client.post(ROUTE, params={"limit": "2"}, content=b"not json")

        assert response.status_code == 200
        assert response.json()["request_info"]["limit"] == 2
