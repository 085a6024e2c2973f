"""
Extraction of request parameters from the query string and JSON body.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Final

from ..shared.models import RawParams

PARAMETER_NAMES: Final[tuple[str, ...]] = ("action", "coin", "currency", "limit")

logger = logging.getLogger(__name__)


def _clean(value: Any) -> str:
    return str(value).strip().lower()


def _read_body(body: bytes | str | Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Decode a request body into a JSON object, or an empty mapping."""
    if body is None:
        return {}
    if isinstance(body, Mapping):
        return body

    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if not body.strip():
            return {}
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(f"Ignoring malformed request body: {e}")
        return {}

    if not isinstance(data, Mapping):
        logger.debug(f"Ignoring request body of type {type(data).__name__}")
        return {}
    return data


def extract_params(
    query: Mapping[str, Any] | None = None,
    body: bytes | str | Mapping[str, Any] | None = None,
) -> RawParams:
    """
    Extract request parameters with defaults.

    Query values are read first and body values override them. Every value is
    trimmed and lower-cased. A malformed body is ignored, so this never raises.

    Args:
        query: Query string values
        body: Raw request body, expected to hold a JSON object

    Returns:
        RawParams: Unvalidated parameters
    """
    values = RawParams().model_dump()

    for source in (query or {}, _read_body(body)):
        for name in PARAMETER_NAMES:
            if (value := source.get(name)) is not None:
                values[name] = _clean(value)

    return RawParams(**values)
