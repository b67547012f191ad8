from typing import Any, Dict, Optional

from services.exchange.engine import ConversionEngine
from services.exchange.exchange_rates import ExchangeRatesClient


class ExchangeRatesTool:
    name = "exchange_rates"

    def __init__(self, engine: Optional[ConversionEngine] = None):
        self.engine = engine or ConversionEngine(ExchangeRatesClient())

    async def run(self, **kwargs: Any) -> Dict[str, Any]:
        base = (kwargs.get("base") or "USD").upper()
        target = kwargs.get("target")
        amount = kwargs.get("amount")
        if not target:
            raise ValueError("ExchangeRatesTool requires a target currency.")
        target = target.upper()

        self.engine.set_amount("" if amount is None else str(amount))
        self.engine.set_from_currency(base)
        self.engine.set_to_currency(target)

        if self.engine.state.rates.is_empty and not await self.engine.load_rates():
            return self._payload(base, target)

        outcome = self.engine.convert()
        if not outcome.ok:
            return self._payload(base, target)

        rates = self.engine.state.rates
        rate = rates.rate_for(target) / rates.rate_for(base)
        return self._payload(base, target, rate=rate, converted=outcome.value)

    def _payload(
        self,
        base: str,
        target: str,
        rate: Optional[float] = None,
        converted: Optional[float] = None,
    ) -> Dict[str, Any]:
        return {
            "base": base,
            "target": target,
            "rate": rate,
            "amount": self.engine.state.amount,
            "converted": converted,
            "error": self.engine.state.error,
        }
