"""
Main entrypoint for the Crypto Data application.
Usage: python run.py [api|query] [key=value ...]
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

USAGE = """Usage: python run.py [api|query] [key=value ...]
  api            - Start the Crypto Data API
  query          - Run a single request and print the JSON response,
                   e.g. python run.py query action=coin coin=bitcoin currency=eur"""


def setup_logging() -> None:
    """
    Set up consistent logging configuration for the application.
    Uses environment variables for configuration.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_format = os.getenv(
        "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    log_file = os.getenv("LOG_FILE", "crypto_data.log")
    log_to_file = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    numeric_level = getattr(logging, log_level, logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )


logger = logging.getLogger(__name__)


def parse_query_args(args: list[str]) -> dict[str, str]:
    """Turn ['action=top', 'limit=3'] into a query mapping."""
    query: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got '{arg}'")
        query[key.strip()] = value
    return query


async def run_query(query: dict[str, str]) -> int:
    """Run one request through the handler and print the envelope."""
    import aiohttp

    from crypto_data.api.handler import handle
    from crypto_data.api.models import RawRequest
    from crypto_data.coingecko.client import CoinGeckoClient

    async with aiohttp.ClientSession() as session:
        result = await handle(RawRequest(query=query), CoinGeckoClient(session))

    print(json.dumps(result.body, indent=2))
    return 0 if result.body.get("success") else 1


async def main() -> int:
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command = sys.argv[1].lower()

    setup_logging()

    if command == "api":
        if len(sys.argv) != 2:
            print(USAGE)
            sys.exit(1)

        from crypto_data.api.service import main as run_service

        logger.info("Starting API service...")
        await run_service()
        return 0

    if command == "query":
        return await run_query(parse_query_args(sys.argv[2:]))

    print(f"Unknown command: {command}")
    print(USAGE)
    sys.exit(1)


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        sys.exit(0)
    except Exception as e:
        print(f"Application failed: {e}")
        sys.exit(1)
