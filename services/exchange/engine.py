"""
ConversionEngine: command-driven state for a currency converter front end.

Collaborators read `engine.state` (an immutable snapshot) or subscribe to
receive every new snapshot, and drive the engine with set_amount,
set_from_currency, set_to_currency, convert and load_rates. Errors never
escape a command; they are published as `state.error`.

Rate fetches are serialized: a second load waits for the one in flight,
then fetches again, so the latest started fetch is the last to publish.
"""

import asyncio
import math
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Protocol, Set

from config.logging import get_logger
from config.settings import BASE_CURRENCY, DEFAULT_FROM_CURRENCY, DEFAULT_TO_CURRENCY
from services.exchange.errors import FetchError, RatesUnavailable
from services.exchange.rates import ConversionRequest, ConversionResult, RateTable, convert_amount

logger = get_logger("ConversionEngine")


class RateSource(Protocol):
    async def fetch_rates(self, base: str) -> RateTable: ...


@dataclass(frozen=True)
class ConverterState:
    rates: RateTable = field(default_factory=RateTable)
    amount: float = 0.0
    from_currency: str = DEFAULT_FROM_CURRENCY
    to_currency: str = DEFAULT_TO_CURRENCY
    result: float = 0.0
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def request(self) -> ConversionRequest:
        return ConversionRequest(
            amount=self.amount,
            from_currency=self.from_currency,
            to_currency=self.to_currency,
        )

    def to_dict(self) -> dict:
        return {
            "base": self.rates.base,
            "rates": dict(self.rates.rates),
            "amount": self.amount,
            "from_currency": self.from_currency,
            "to_currency": self.to_currency,
            "result": self.result,
            "is_loading": self.is_loading,
            "error": self.error,
        }


StateListener = Callable[[ConverterState], None]


def parse_amount(raw: Optional[str]) -> float:
    text = (raw or "").strip()
    # float() accepts digit separators ("1_000"); amount text does not.
    if "_" in text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


class ConversionEngine:
    def __init__(self, provider: RateSource, base: str = BASE_CURRENCY):
        self._provider = provider
        self._base = base.upper()
        self._state = ConverterState(rates=RateTable(base=self._base))
        self._listeners: List[StateListener] = []
        self._fetch_lock = asyncio.Lock()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def base(self) -> str:
        return self._base

    @property
    def state(self) -> ConverterState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, **changes) -> ConverterState:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener %r failed", listener)
        return self._state

    def set_amount(self, raw: Optional[str]) -> None:
        amount = parse_amount(raw)
        logger.debug("set_amount(%r) -> %s", raw, amount)
        self._publish(amount=amount)

    def set_from_currency(self, code: str) -> None:
        logger.debug("set_from_currency(%s)", code)
        self._publish(from_currency=code)

    def set_to_currency(self, code: str) -> None:
        logger.debug("set_to_currency(%s)", code)
        self._publish(to_currency=code)

    async def load_rates(self) -> bool:
        async with self._fetch_lock:
            self._publish(is_loading=True, error=None)
            try:
                table = await self._provider.fetch_rates(self._base)
            except FetchError as exc:
                logger.warning("Rate load failed: %s", exc)
                self._publish(is_loading=False, error=str(exc))
                return False
            except asyncio.CancelledError:
                self._publish(is_loading=False)
                raise
            except Exception as exc:
                logger.exception("Rate source %r failed", self._provider)
                self._publish(is_loading=False, error=str(exc) or exc.__class__.__name__)
                return False
            self._publish(rates=table, is_loading=False, error=None)
            return True

    def start_loading(self) -> "asyncio.Task[bool]":
        task = asyncio.get_running_loop().create_task(self.load_rates())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def convert(self) -> ConversionResult:
        state = self._state
        try:
            value = convert_amount(state.rates, state.request)
        except RatesUnavailable as exc:
            logger.debug("convert %s -> %s: %s", state.from_currency, state.to_currency, exc)
            self._publish(error=str(exc))
            return ConversionResult(value=state.result, error=str(exc))

        logger.debug("convert %s %s -> %s %s", state.amount, state.from_currency, value, state.to_currency)
        self._publish(result=value, error=None)
        return ConversionResult(value=value)
