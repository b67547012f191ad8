from typing import List, Optional

import pytest

from services.exchange.errors import FetchError
from services.exchange.rates import RateTable

SAMPLE_RATES = {"EUR": 1.0, "USD": 1.1, "IDR": 17000.0}


class FakeRateSource:
    """Stands in for ExchangeRatesClient; returns or raises what it is told to."""

    def __init__(self, tables: Optional[List[RateTable]] = None, error: Optional[Exception] = None):
        self.tables = list(tables or [])
        self.error = error
        self.calls: List[str] = []

    async def fetch_rates(self, base: str) -> RateTable:
        self.calls.append(base)
        if self.error is not None:
            raise self.error
        return self.tables.pop(0) if len(self.tables) > 1 else self.tables[0]


@pytest.fixture
def sample_table() -> RateTable:
    return RateTable(base="EUR", rates=SAMPLE_RATES)


@pytest.fixture
def fake_source(sample_table) -> FakeRateSource:
    return FakeRateSource(tables=[sample_table])


@pytest.fixture
def failing_source() -> FakeRateSource:
    return FakeRateSource(error=FetchError("Connection refused"))


@pytest.fixture
def make_source():
    return FakeRateSource
