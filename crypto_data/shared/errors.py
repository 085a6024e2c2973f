"""
Error types for the crypto data application.
"""

from enum import Enum
from typing import Final


class ErrorKind(str, Enum):
    """Failure categories shared by validation and the upstream client."""

    INVALID_PARAMETER = "InvalidParameter"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    UPSTREAM_FAULT = "UpstreamFault"
    TIMEOUT = "Timeout"
    NETWORK = "Network"
    UNKNOWN = "Unknown"


HTTP_STATUS_BY_KIND: Final[dict[ErrorKind, int]] = {
    ErrorKind.INVALID_PARAMETER: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_FAULT: 503,
    ErrorKind.TIMEOUT: 503,
    ErrorKind.NETWORK: 503,
    ErrorKind.UNKNOWN: 500,
}

# Checked in order; the first matching indicator wins.
TEXT_INDICATORS: Final[tuple[tuple[ErrorKind, tuple[str, ...]], ...]] = (
    (ErrorKind.RATE_LIMITED, ("rate limit", "too many requests", "429")),
    (ErrorKind.NOT_FOUND, ("not found", "404")),
    (ErrorKind.UPSTREAM_FAULT, ("internal server error", "500")),
)


class CryptoDataError(Exception):
    """Base exception carrying an error kind."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def http_status(self) -> int:
        """HTTP status code the handler answers with for this error."""
        return HTTP_STATUS_BY_KIND[self.kind]


class InvalidParameterError(CryptoDataError):
    """A request parameter broke the parameter contract."""

    kind = ErrorKind.INVALID_PARAMETER


class UpstreamError(CryptoDataError):
    """The CoinGecko API call failed."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: int | None = None,
    ):
        super().__init__(message, kind)
        self.status = status


def classify_failure(status: int | None, text: str = "") -> ErrorKind:
    """
    Classify an upstream failure.

    The HTTP status decides when it is 429, 404 or 500; otherwise the error
    text is matched against known indicators.

    Args:
        status: HTTP status code, or None when no response was received
        text: Error text (reason phrase, response body or exception message)

    Returns:
        ErrorKind: The failure category
    """
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 500:
        return ErrorKind.UPSTREAM_FAULT

    lowered = text.lower()
    for kind, indicators in TEXT_INDICATORS:
        if any(indicator in lowered for indicator in indicators):
            return kind
    return ErrorKind.UNKNOWN
