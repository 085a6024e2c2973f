"""
Request handling pipeline: parameters, upstream fetch and response envelopes.
"""

import logging
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from ..coingecko.client import CoinGeckoClient
from ..coingecko.endpoints import build_upstream_url
from ..coingecko.normalizer import normalize_response
from ..shared.errors import CryptoDataError
from ..shared.models import MarketList, NormalizedCoin, RawParams, RequestParams
from .models import (
    DebugInfo,
    ErrorResponse,
    HttpResult,
    RawRequest,
    RequestInfo,
    SuccessResponse,
)
from .params import extract_params
from .settings import api_settings
from .validators import validate_params

JSON_CONTENT_TYPE: Final[str] = "application/json"
INTERNAL_ERROR_STATUS: Final[int] = 500
PACKAGE_ROOT: Final[Path] = Path(__file__).resolve().parent.parent

logger = logging.getLogger(__name__)


def _base_headers() -> dict[str, str]:
    return {
        "Content-Type": JSON_CONTENT_TYPE,
        "Access-Control-Allow-Origin": "*",
    }


def _raised_at_line(exc: BaseException) -> int:
    """
    Return the line in this package closest to where the exception was raised.

    Library frames are skipped; 0 when no frame belongs to the package.
    """
    for frame in reversed(traceback.extract_tb(exc.__traceback__)):
        if Path(frame.filename).resolve().is_relative_to(PACKAGE_ROOT):
            return frame.lineno or 0
    return 0


def build_success_result(
    params: RequestParams, data: NormalizedCoin | MarketList
) -> HttpResult:
    """Wrap normalized data into the success envelope."""
    envelope = SuccessResponse(
        timestamp=datetime.now(UTC),
        data=data,
        request_info=RequestInfo(
            action=params.action.value,
            coin=params.coin_id,
            currency=params.currency,
            limit=params.limit,
        ),
    )
    headers = _base_headers()
    headers["Cache-Control"] = f"public, max-age={api_settings.cache_max_age}"
    return HttpResult(
        status=200,
        headers=headers,
        body=envelope.model_dump(mode="json", exclude_none=True),
    )


def build_error_result(raw: RawParams, exc: Exception) -> HttpResult:
    """Wrap an exception into the error envelope with its HTTP status."""
    if isinstance(exc, CryptoDataError):
        status = exc.http_status
        error_type = exc.kind.value
    else:
        status = INTERNAL_ERROR_STATUS
        error_type = type(exc).__name__

    envelope = ErrorResponse(
        error=str(exc) or error_type,
        timestamp=datetime.now(UTC),
        request_info=RequestInfo(**raw.model_dump()),
        debug_info=DebugInfo(error_type=error_type, line_number=_raised_at_line(exc)),
    )
    return HttpResult(
        status=status,
        headers=_base_headers(),
        body=envelope.model_dump(mode="json"),
    )


async def handle(request: RawRequest, client: CoinGeckoClient) -> HttpResult:
    """
    Process one crypto data request end to end.

    Args:
        request: Query string values and raw body
        client: CoinGecko client used for the upstream call

    Returns:
        HttpResult: Success envelope with status 200, or error envelope with
            the status matching the failure
    """
    raw = extract_params(request.query, request.body)
    logger.info(
        f"Processing request: action={raw.action}, coin={raw.coin}, "
        f"currency={raw.currency}, limit={raw.limit}"
    )

    try:
        params = validate_params(raw)
        url = build_upstream_url(params, client.base_url)
        payload = await client.fetch(url, resource=params.coin_id)
        data = normalize_response(
            params.action, params.currency, params.coin_id, payload
        )
    except CryptoDataError as e:
        logger.warning(f"Request failed ({e.kind.value}): {e}")
        return build_error_result(raw, e)
    except Exception as e:
        logger.error(f"Unexpected error while processing request: {e}", exc_info=e)
        return build_error_result(raw, e)

    logger.info(f"Request succeeded: action={params.action.value}")
    return build_success_result(params, data)
