import asyncio

from fastapi.testclient import TestClient

from services.exchange.engine import ConversionEngine, ConverterState
from ui.app import create_app, format_result


def _client(engine: ConversionEngine) -> TestClient:
    # Without the context manager the startup load is not triggered.
    return TestClient(create_app(engine))


def test_format_result_hides_zero():
    assert format_result(ConverterState()) is None
    assert format_result(ConverterState(result=154545.4545, to_currency="IDR")) == "Result: 154545.45 IDR"


def test_currencies_endpoint(fake_source):
    response = _client(ConversionEngine(fake_source)).get("/api/currencies")
    assert response.status_code == 200
    assert response.json() == {
        "base": "EUR",
        "currencies": ["USD", "EUR", "GBP", "JPY", "AUD", "CAD", "CHF", "CNY", "IDR", "SGD"],
    }


def test_convert_flow(fake_source):
    engine = ConversionEngine(fake_source)
    asyncio.run(engine.load_rates())
    client = _client(engine)

    client.post("/api/amount", params={"value": "10"})
    client.post("/api/from", params={"code": "USD"})
    client.post("/api/to", params={"code": "IDR"})
    payload = client.post("/api/convert").json()

    assert abs(payload["result"] - 154545.45) < 0.01
    assert payload["display"] == "Result: 154545.45 IDR"
    assert payload["error"] is None
    assert payload["rates"] == {"EUR": 1.0, "USD": 1.1, "IDR": 17000.0}


def test_convert_without_rates_reports_error(fake_source):
    client = _client(ConversionEngine(fake_source))

    payload = client.post("/api/convert").json()

    assert payload["error"] == "Currency rates not available"
    assert payload["display"] is None


def test_bad_amount_text_becomes_zero(fake_source):
    client = _client(ConversionEngine(fake_source))
    assert client.post("/api/amount", params={"value": "abc"}).json()["amount"] == 0.0


def test_startup_loads_rates(fake_source):
    engine = ConversionEngine(fake_source)
    with TestClient(create_app(engine)) as client:
        payload = client.get("/api/state").json()

    assert fake_source.calls == ["EUR"]
    assert payload["rates"]["IDR"] == 17000.0
    assert payload["is_loading"] is False


def test_refresh_surfaces_fetch_error(failing_source):
    engine = ConversionEngine(failing_source)
    with TestClient(create_app(engine)) as client:
        client.post("/api/rates/refresh")
        payload = client.get("/api/state").json()

    assert payload["error"] == "Connection refused"
    assert payload["rates"] == {}


def test_shutdown_cancels_pending_startup_load():
    class HangingSource:
        async def fetch_rates(self, base):
            await asyncio.Event().wait()

    engine = ConversionEngine(HangingSource())
    app = create_app(engine)
    with TestClient(app) as client:
        assert client.get("/api/state").json()["is_loading"] is True

    assert app.state.startup_load.cancelled()
    assert engine.state.is_loading is False
