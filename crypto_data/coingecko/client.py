"""
CoinGecko REST client with bounded retries and exponential backoff.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, Final

import aiohttp

from ..shared.errors import ErrorKind, UpstreamError, classify_failure
from .settings import coingecko_settings

ERROR_BODY_PREVIEW_LENGTH: Final[int] = 200

logger = logging.getLogger(__name__)


class CoinGeckoClient:
    """Fetches JSON documents from the CoinGecko API."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        max_attempts: int | None = None,
        timeout_seconds: float | None = None,
        backoff_base_ms: int | None = None,
        base_url: str | None = None,
        user_agent: str | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the client around an open aiohttp session."""
        self._session = session
        self.base_url = base_url or coingecko_settings.coingecko_base_url
        self.max_attempts = max_attempts or coingecko_settings.coingecko_max_attempts
        self.timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or coingecko_settings.coingecko_timeout_seconds
        )
        self.backoff_base_ms = (
            coingecko_settings.coingecko_backoff_base_ms
            if backoff_base_ms is None
            else backoff_base_ms
        )
        self.headers = {
            "User-Agent": user_agent or coingecko_settings.coingecko_user_agent,
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }
        self._sleep = sleep

    def backoff_delay_ms(self, attempt: int) -> int:
        """Delay before the given 1-based attempt: 0, then 3x, 7x the base."""
        if attempt <= 1:
            return 0
        return self.backoff_base_ms * (2**attempt - 1)

    async def fetch(self, url: str, resource: str = "") -> Any:
        """
        Fetch a JSON document, retrying transient failures.

        Args:
            url: Absolute CoinGecko URL
            resource: Requested coin id, used in the not-found message

        Returns:
            Any: The decoded JSON body of the first successful attempt

        Raises:
            UpstreamError: When the resource does not exist (no retry) or
                every attempt failed
        """
        for attempt in range(1, self.max_attempts + 1):
            if delay_ms := self.backoff_delay_ms(attempt):
                logger.info(
                    f"Waiting {delay_ms}ms before attempt {attempt}/{self.max_attempts}"
                )
                await self._sleep(delay_ms / 1000)

            try:
                data = await self._get_json(url)
            except UpstreamError as e:
                if e.kind is ErrorKind.NOT_FOUND:
                    logger.info(f"CoinGecko resource not found: {url}")
                    raise UpstreamError(
                        self._not_found_message(resource), e.kind, e.status
                    ) from e

                if attempt == self.max_attempts:
                    logger.error(
                        f"CoinGecko request failed after {attempt} attempts: {e}"
                    )
                    raise UpstreamError(
                        self._exhausted_message(e), e.kind, e.status
                    ) from e

                logger.warning(
                    f"CoinGecko attempt {attempt}/{self.max_attempts} failed "
                    f"({e.kind.value}): {e}, retrying..."
                )
                continue

            logger.debug(f"Fetched {url} on attempt {attempt}")
            return data

    async def _get_json(self, url: str) -> Any:
        """Perform a single GET and decode the JSON body."""
        try:
            async with self._session.get(
                url, headers=self.headers, timeout=self.timeout
            ) as response:
                if 200 <= response.status < 300:
                    return await self._decode_body(response)

                text = await response.text(errors="replace")
                reason = response.reason or ""
                kind = classify_failure(response.status, f"{reason} {text}")
                raise UpstreamError(
                    f"HTTP {response.status} {reason}: "
                    f"{text[:ERROR_BODY_PREVIEW_LENGTH]}".strip(),
                    kind,
                    response.status,
                )
        except TimeoutError as e:
            raise UpstreamError(
                f"Request timed out after {self.timeout.total}s", ErrorKind.TIMEOUT
            ) from e
        except aiohttp.ClientConnectionError as e:
            kind = classify_failure(None, str(e))
            if kind is ErrorKind.UNKNOWN:
                kind = ErrorKind.NETWORK
            raise UpstreamError(str(e) or type(e).__name__, kind) from e
        except aiohttp.ClientError as e:
            raise UpstreamError(
                str(e) or type(e).__name__, classify_failure(None, str(e))
            ) from e

    @staticmethod
    async def _decode_body(response: aiohttp.ClientResponse) -> Any:
        """Decode a 2xx body, rejecting anything that is not JSON."""
        try:
            data = await response.json(content_type=None)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamError(
                f"Invalid JSON in response: {e}", ErrorKind.UNKNOWN, response.status
            ) from e

        if data is None:
            raise UpstreamError(
                "Empty response body", ErrorKind.UNKNOWN, response.status
            )
        return data

    @staticmethod
    def _not_found_message(resource: str) -> str:
        if resource:
            return f"Cryptocurrency '{resource}' not found. Please check the coin ID."
        return "Requested resource not found on CoinGecko API."

    def _exhausted_message(self, error: UpstreamError) -> str:
        attempts = self.max_attempts
        match error.kind:
            case ErrorKind.RATE_LIMITED:
                return (
                    f"Rate limit exceeded after {attempts} attempts. "
                    "CoinGecko API is throttling requests, please try again later."
                )
            case ErrorKind.UPSTREAM_FAULT:
                return (
                    f"CoinGecko API internal server error after {attempts} attempts. "
                    "Service temporarily unavailable."
                )
            case ErrorKind.TIMEOUT:
                return f"Request to CoinGecko API timed out after {attempts} attempts."
            case ErrorKind.NETWORK:
                return (
                    f"Network error contacting CoinGecko API after {attempts} "
                    f"attempts: {error.message}"
                )
            case _:
                return (
                    f"Failed to fetch data from CoinGecko API after {attempts} "
                    f"attempts: {error.message}"
                )


async def get_coingecko_client() -> AsyncGenerator[CoinGeckoClient, None]:
    """
    Dependency function to provide a client with its own session.

    Returns:
        CoinGeckoClient: Client bound to a session closed after the request
    """
    async with aiohttp.ClientSession() as session:
        yield CoinGeckoClient(session)
