import asyncio
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query

ROOT_DIR = Path(__file__).resolve().parents[1]

# Settings read the environment at import time.
load_dotenv(dotenv_path=ROOT_DIR / ".env")

from config.logging import get_logger
from config.settings import SUPPORTED_CURRENCIES
from services.exchange.engine import ConversionEngine, ConverterState
from services.exchange.exchange_rates import ExchangeRatesClient

logger = get_logger("ConverterUI")


def format_result(state: ConverterState) -> Optional[str]:
    # A zero result is hidden, same as an empty form.
    if state.result <= 0:
        return None
    return f"Result: {state.result:.2f} {state.to_currency}"


def _state_payload(state: ConverterState) -> Dict[str, Any]:
    payload = state.to_dict()
    payload["display"] = format_result(state)
    return payload


def create_app(engine: Optional[ConversionEngine] = None) -> FastAPI:
    engine = engine or ConversionEngine(ExchangeRatesClient())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.startup_load = engine.start_loading()
        yield
        task = app.state.startup_load
        if not task.done():
            logger.info("Cancelling rate load still running at shutdown")
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    app = FastAPI(title="Currency Converter", lifespan=lifespan)
    app.state.engine = engine

    @app.get("/api/currencies")
    async def list_currencies():
        return {"base": engine.base, "currencies": list(SUPPORTED_CURRENCIES)}

    @app.get("/api/state")
    async def get_state():
        return _state_payload(engine.state)

    @app.post("/api/amount")
    async def set_amount(value: str = Query("", description="Raw amount text")):
        engine.set_amount(value)
        return _state_payload(engine.state)

    @app.post("/api/from")
    async def set_from_currency(code: str = Query(..., description="Currency code")):
        engine.set_from_currency(code)
        return _state_payload(engine.state)

    @app.post("/api/to")
    async def set_to_currency(code: str = Query(..., description="Currency code")):
        engine.set_to_currency(code)
        return _state_payload(engine.state)

    @app.post("/api/convert")
    async def convert():
        engine.convert()
        return _state_payload(engine.state)

    @app.post("/api/rates/refresh")
    async def refresh_rates():
        logger.info("Rate refresh requested")
        engine.start_loading()
        return _state_payload(engine.state)

    return app


app = create_app()
