"""FastAPI application proxying CoinGecko market data."""

import logging
from datetime import UTC, datetime
from typing import Annotated, Final

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ..coingecko.client import CoinGeckoClient, get_coingecko_client
from .handler import handle
from .models import TIMESTAMP_FORMAT, RawRequest
from .settings import api_settings

ERROR_NOT_FOUND: Final[str] = "Endpoint not found"
ERROR_INTERNAL_ERROR: Final[str] = "An internal server error occurred"

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Crypto Data API",
    description="Cryptocurrency market data from CoinGecko in a stable JSON shape",
    version="1.0.0",
)


@app.get("/", response_model=dict[str, str])
async def root() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        dict[str, str]: Health status information
    """
    return {"message": "Crypto Data API is running", "status": "healthy"}


@app.api_route(api_settings.api_route, methods=["GET", "POST"])
async def crypto_data(
    request: Request,
    client: Annotated[CoinGeckoClient, Depends(get_coingecko_client)],
) -> JSONResponse:
    """
    Return market data for one coin or the top coins by market cap.

    Parameters are read from the query string (action, coin, currency, limit)
    and may be overridden by a JSON body.

    Args:
        request: Incoming request
        client: CoinGecko client dependency

    Returns:
        JSONResponse: Success or error envelope
    """
    body = await request.body()
    result = await handle(
        RawRequest(query=dict(request.query_params), body=body or None), client
    )
    return JSONResponse(
        status_code=result.status, content=result.body, headers=result.headers
    )


def _error_content(message: str) -> dict[str, object]:
    return {
        "success": False,
        "error": message,
        "timestamp": datetime.now(UTC).strftime(TIMESTAMP_FORMAT),
    }


@app.exception_handler(404)
async def not_found_handler(_: Request, __: Exception) -> JSONResponse:
    """Handle 404 errors.

    Returns:
        JSONResponse: Error response in JSON format
    """
    return JSONResponse(status_code=404, content=_error_content(ERROR_NOT_FOUND))


@app.exception_handler(500)
async def internal_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle internal server errors.

    Args:
        exc: The exception that was raised

    Returns:
        JSONResponse: Error response in JSON format
    """
    logger.error(f"Internal server error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content=_error_content(ERROR_INTERNAL_ERROR))


async def main() -> None:
    """Main entry point for the API server."""
    config = uvicorn.Config(
        app,
        host=api_settings.api_host,
        port=api_settings.api_port,
        log_level=api_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
