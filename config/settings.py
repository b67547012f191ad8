import logging
import os

LOG_LEVEL = getattr(logging, os.getenv("EXCHANGE_LOG_LEVEL", "INFO").upper(), logging.INFO)
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"

# apilayer Exchange Rates Data API: https://apilayer.com/marketplace/exchangerates_data-api
EXCHANGE_API_BASE = os.getenv("EXCHANGE_API_BASE", "https://api.apilayer.com/exchangerates_data")
EXCHANGE_API_KEY_ENV = "EXCHANGE_API_KEY"
FETCH_TIMEOUT_SEC = 10.0

BASE_CURRENCY = "EUR"
SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "IDR", "SGD")
DEFAULT_FROM_CURRENCY = "USD"
DEFAULT_TO_CURRENCY = "IDR"

RATES_UNAVAILABLE_MESSAGE = "Currency rates not available"
FETCH_FAILED_MESSAGE = "Failed to fetch rates"
