from config.settings import RATES_UNAVAILABLE_MESSAGE


class ExchangeError(Exception):
    """Base class for rate retrieval and conversion failures."""


class FetchError(ExchangeError):
    """Rate retrieval failed: transport error, API-level failure or unreadable payload."""


class RatesUnavailable(ExchangeError):
    """No usable rate for the selected currency pair."""

    def __init__(self, message: str = RATES_UNAVAILABLE_MESSAGE):
        super().__init__(message)
