import os
from typing import Optional

import httpx

from config.logging import get_logger
from config.settings import (
    BASE_CURRENCY,
    EXCHANGE_API_BASE,
    EXCHANGE_API_KEY_ENV,
    FETCH_TIMEOUT_SEC,
)
from services.exchange.errors import FetchError
from services.exchange.rates import RateTable

logger = get_logger("ExchangeRatesClient")


class ExchangeRatesClient:
    """Fetches the latest rate table for a base currency.

    One attempt per call; every failure is raised as FetchError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = FETCH_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv(EXCHANGE_API_KEY_ENV)
        self.base_url = (base_url or EXCHANGE_API_BASE).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get_latest(self, base: str) -> httpx.Response:
        url = f"{self.base_url}/latest"
        headers = {"apikey": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(url, params={"base": base}, headers=headers)
            response.raise_for_status()
            return response

    async def fetch_rates(self, base: str = BASE_CURRENCY) -> RateTable:
        if not self.api_key:
            raise FetchError(f"{EXCHANGE_API_KEY_ENV} is not set.")

        base = base.upper()
        logger.info("Fetching latest rates (base=%s)", base)
        try:
            response = await self._get_latest(base)
        except httpx.TimeoutException as exc:
            logger.warning("Rate request timed out after %.1fs", self.timeout)
            raise FetchError(f"Rate request timed out after {self.timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Rate request failed with HTTP %s", status)
            raise FetchError(f"Rate request failed with HTTP {status}") from exc
        except httpx.RequestError as exc:
            logger.warning("Rate provider unreachable: %s", exc)
            raise FetchError(str(exc) or f"Rate provider unreachable: {exc.__class__.__name__}") from exc
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            # Header values must be ASCII; a mistyped key fails while building the request.
            logger.warning("Rate request could not be sent: %s", exc.__class__.__name__)
            raise FetchError(f"Rate request could not be sent: {exc.__class__.__name__}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Rate response is not valid JSON")
            raise FetchError("Rate response is not valid JSON") from exc

        table = RateTable.from_payload(payload, base=base)
        logger.info("Fetched %d rates (base=%s)", len(table.rates), table.base)
        return table
