"""
Rate table and conversion math.

Every rate is quoted against a single base currency. The base itself is
always priced at 1.0, whether or not the provider includes it in the
payload, so cross conversions go through the base: amount / from_rate
gives base units, which are then projected with to_rate.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from config.logging import get_logger
from config.settings import BASE_CURRENCY, FETCH_FAILED_MESSAGE
from services.exchange.errors import FetchError, RatesUnavailable

logger = get_logger("RateTable")

BASE_RATE = 1.0


def _normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _clean_rates(raw: Mapping[Any, Any]) -> Dict[str, float]:
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Skipping non-numeric rate for %s: %r", code, value)
            continue
        rate = float(value)
        if not math.isfinite(rate) or rate <= 0:
            logger.warning("Skipping non-positive rate for %s: %r", code, value)
            continue
        code = _normalize_code(code) if isinstance(code, str) else ""
        if not code:
            continue
        rates[code] = rate
    return rates


@dataclass(frozen=True)
class RateTable:
    base: str = BASE_CURRENCY
    rates: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "base", _normalize_code(self.base))
        object.__setattr__(self, "rates", MappingProxyType(_clean_rates(self.rates)))

    @classmethod
    def from_payload(cls, payload: Any, base: str = BASE_CURRENCY) -> "RateTable":
        if not isinstance(payload, dict):
            raise FetchError("Unexpected rate response: expected a JSON object.")
        if payload.get("success") is not True:
            raise FetchError(FETCH_FAILED_MESSAGE)

        raw_rates = payload.get("rates")
        if not isinstance(raw_rates, dict):
            raise FetchError("Unexpected rate response: 'rates' is missing or not an object.")

        reported_base = payload.get("base")
        if isinstance(reported_base, str) and reported_base.strip():
            base = reported_base
        return cls(base=base, rates=raw_rates)

    @property
    def is_empty(self) -> bool:
        return not self.rates

    def supports(self, code: str) -> bool:
        code = _normalize_code(code)
        return code == self.base or code in self.rates

    def rate_for(self, code: str) -> float:
        code = _normalize_code(code)
        if code == self.base:
            return BASE_RATE
        try:
            return self.rates[code]
        except KeyError as exc:
            raise RatesUnavailable() from exc


@dataclass(frozen=True)
class ConversionRequest:
    amount: float = 0.0
    from_currency: str = ""
    to_currency: str = ""


@dataclass(frozen=True)
class ConversionResult:
    value: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def convert_amount(table: RateTable, request: ConversionRequest) -> float:
    if table.is_empty or not table.supports(request.from_currency) or not table.supports(request.to_currency):
        raise RatesUnavailable()

    from_rate = table.rate_for(request.from_currency)
    to_rate = table.rate_for(request.to_currency)

    from_code = _normalize_code(request.from_currency)
    if from_code == _normalize_code(request.to_currency):
        return request.amount
    if from_code == table.base:
        return request.amount * to_rate
    base_amount = request.amount / from_rate
    return base_amount * to_rate
