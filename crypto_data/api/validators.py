"""
Custom validators for API parameters.
"""

import logging
import re
from typing import Final

from ..shared.errors import InvalidParameterError
from ..shared.models import Action, RawParams, RequestParams

MIN_LIMIT: Final[int] = 1
MAX_LIMIT: Final[int] = 250
DEFAULT_LIMIT: Final[int] = 10
DEFAULT_LIMIT_TEXT: Final[str] = "10"

SUPPORTED_CURRENCIES: Final[frozenset[str]] = frozenset(
    {"usd", "eur", "gbp", "jpy", "aud", "cad", "chf", "cny", "sek", "nzd", "btc", "eth"}
)

INTEGER_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")

logger = logging.getLogger(__name__)


def validate_action(action: str) -> Action:
    """Validate the action name."""
    try:
        return Action(action)
    except ValueError:
        raise InvalidParameterError(
            f"Invalid action '{action}'. Supported actions are 'coin' and 'top'."
        ) from None


def validate_limit(limit: str) -> int:
    """
    Validate and convert the limit value.

    A value that does not parse falls back to the default only when the raw
    text is the default itself.

    Raises:
        InvalidParameterError: If the limit is not an integer in [1, 250]
    """
    message = f"Limit must be a valid number between {MIN_LIMIT} and {MAX_LIMIT}."

    if INTEGER_PATTERN.fullmatch(limit):
        value = int(limit)
    elif limit == DEFAULT_LIMIT_TEXT:
        value = DEFAULT_LIMIT
    else:
        raise InvalidParameterError(message)

    if not MIN_LIMIT <= value <= MAX_LIMIT:
        raise InvalidParameterError(message)
    return value


def validate_currency(currency: str) -> str:
    """Check the currency against the known list; unknown codes pass through."""
    if currency not in SUPPORTED_CURRENCIES:
        logger.warning(
            f"Currency '{currency}' is not in the supported list, "
            f"passing it through to CoinGecko"
        )
    return currency


def validate_params(raw: RawParams) -> RequestParams:
    """
    Validate extracted parameters.

    Args:
        raw: Parameters as extracted from the request

    Returns:
        RequestParams: Validated, immutable parameters

    Raises:
        InvalidParameterError: On the first rule that is broken
    """
    action = validate_action(raw.action)

    if action is Action.COIN and not raw.coin:
        raise InvalidParameterError(
            "Coin parameter is required when action is 'coin'."
        )

    limit = validate_limit(raw.limit)
    currency = validate_currency(raw.currency)

    return RequestParams(
        action=action, coin_id=raw.coin, currency=currency, limit=limit
    )
