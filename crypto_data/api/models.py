"""
API-specific data models for the crypto data application.
"""

from datetime import datetime
from typing import Annotated, Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..shared.models import MarketList, NormalizedCoin

TIMESTAMP_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%SZ"
SOURCE_NAME: Final[str] = "CoinGecko API v3"


class RequestInfo(BaseModel):
    """Echo of the request parameters."""

    action: str
    coin: str
    currency: str
    limit: int | str


class ApiInfo(BaseModel):
    """Upstream status details attached to successful responses."""

    rate_limit_status: str = "OK"
    response_cached: bool = False


class DebugInfo(BaseModel):
    """Error details attached to failed responses."""

    error_type: Annotated[str, Field(description="Error kind or exception name")]
    line_number: Annotated[int, Field(description="Line the error was raised on")]


class SuccessResponse(BaseModel):
    """Envelope for successful responses."""

    model_config = ConfigDict(validate_assignment=True)

    success: bool = True
    timestamp: Annotated[datetime, Field(description="Response time (UTC)")]
    data: NormalizedCoin | MarketList
    source: str = SOURCE_NAME
    request_info: RequestInfo
    api_info: ApiInfo = Field(default_factory=ApiInfo)

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize datetime to ISO format with second precision."""
        return value.strftime(TIMESTAMP_FORMAT)


class ErrorResponse(BaseModel):
    """Envelope for error responses."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    success: bool = False
    error: Annotated[str, Field(description="Human-readable error message")]
    timestamp: Annotated[datetime, Field(description="Response time (UTC)")]
    request_info: RequestInfo
    debug_info: DebugInfo

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize datetime to ISO format with second precision."""
        return value.strftime(TIMESTAMP_FORMAT)


class RawRequest(BaseModel):
    """Inbound request as handed over by the host."""

    model_config = ConfigDict(frozen=True)

    query: dict[str, Any] = Field(default_factory=dict)
    body: bytes | str | dict[str, Any] | None = None


class HttpResult(BaseModel):
    """Status, headers and JSON body to send back to the client."""

    model_config = ConfigDict(frozen=True)

    status: int
    headers: dict[str, str]
    body: dict[str, Any]
