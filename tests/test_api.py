"""HTTP surface tests using FastAPI's TestClient with an injected scanner."""

import json

import pytest
from fastapi.testclient import TestClient

import api.api_server as api_server
from api.api_server import create_app
from data_fetch.provider import ScreenerCandidate
from fundamentals.fundamental_scorer import FundamentalMetrics
from screener.signal_scanner import SignalScanner
from utils.errors import ProviderConfigurationError
from utils.universe_loader import UniverseLoader

from tests.conftest import FakeProvider, make_series, rising


@pytest.fixture
def provider():
    return FakeProvider(
        series={"AAA": make_series("AAA", rising(60)), "BBB": make_series("BBB", rising(60, start=10.0))},
        metrics={"AAA": FundamentalMetrics(symbol="AAA", roic=25.0, pe_ratio=8.0)},
        candidates=[ScreenerCandidate(symbol="AAA", company_name="Alpha", sector="Technology")],
    )


@pytest.fixture
def client(tmp_path, provider, instant_batch_engine, monkeypatch):
    path = tmp_path / "universes.json"
    path.write_text(json.dumps({"pair": ["AAA", "BBB"], "tech": ["AAA"]}))
    scanner = SignalScanner(
        provider=provider,
        universe_loader=UniverseLoader(universe_file=path),
        batch_engine=instant_batch_engine,
        screener_batch_engine=instant_batch_engine,
        clock=lambda: "2024-05-01T20:30:00.000Z",
    )
    monkeypatch.setattr(api_server, "RESULTS_DIR", tmp_path)
    yield TestClient(create_app(scanner))
    api_server.scanner_instance = None


def test_root(client):
    assert client.get("/").json()["status"] == "running"


def test_momentum_info_lists_universes(client):
    data = client.get("/momentum").json()
    assert data["lists"] == ["pair", "tech"]
    assert data["strategies"] == ["long_trend", "short_trend"]
    assert data["universes"] == [{"id": "pair", "name": "pair", "count": 2}, {"id": "tech", "name": "tech", "count": 1}]


def test_momentum_scan_by_list(client, provider):
    response = client.post("/momentum", json={"list": "pair"})

    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["total"] == 2
    assert data["timestamp"] == "2024-05-01T20:30:00.000Z"
    assert {s["symbol"] for s in data["signals"]} == {"AAA", "BBB"}


def test_momentum_scan_custom_symbols(client, provider):
    response = client.post("/momentum", json={"customSymbols": ["aaa"], "strategy": "long_trend"})
    assert response.status_code == 200
    assert provider.price_calls == ["AAA"]


@pytest.mark.parametrize(
    "body",
    [{"list": "nasdaq_all"}, {"customSymbols": []}, {"customSymbols": ["AAA"], "strategy": "scalp"}],
)
def test_momentum_bad_request(client, body):
    assert client.post("/momentum", json=body).status_code == 400


def test_screener(client):
    response = client.post("/screener", json={"sector": "Technology", "sortBy": "valuation"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["stocks"][0]["symbol"] == "AAA"
    assert data["stocks"][0]["rank"] == 1
    assert data["filters"]["sector"] == "Technology"


def test_screener_bad_sort_key(client, provider):
    assert client.post("/screener", json={"sortBy": "growth"}).status_code == 400
    assert provider.screener_calls == []


def test_screener_missing_key_is_server_error(client, provider, monkeypatch):
    def unconfigured(filters):
        raise ProviderConfigurationError("FMP API key not configured")

    monkeypatch.setattr(provider, "get_screener_candidates", unconfigured)
    response = client.post("/screener", json={})
    assert response.status_code == 500
    assert "not configured" in response.json()["detail"]


def test_indicators(client):
    bars = [{"date": f"2024-03-{day:02d}", "close": 100.0 + day, "volume": 1000} for day in range(1, 31)]
    data = client.post("/indicators", json={"symbol": "xyz", "bars": bars}).json()

    assert data["symbol"] == "XYZ"
    assert data["bars"] == 30
    assert data["indicators"]["price"] == 130.0
    assert data["indicators"]["volumeSignal"] == "normal"
    assert data["indicators"]["rsiSignal"] == "overbought"


def test_indicators_without_bars(client):
    assert client.post("/indicators", json={"bars": []}).status_code == 400


def test_latest_results_missing(client):
    assert client.get("/results/latest", params={"universe": "tech"}).json() == {
        "signals": [], "summary": None, "timestamp": None,
    }


def test_latest_results_stored(client, tmp_path):
    stored = {"signals": [], "summary": {"total": 0}, "timestamp": "2024-05-01T20:30:00.000Z"}
    (tmp_path / "momentum_tech_latest.json").write_text(json.dumps(stored))
    assert client.get("/results/latest", params={"universe": "tech"}).json() == stored


def test_latest_results_rejects_path_names(client):
    assert client.get("/results/latest", params={"universe": "../secrets"}).status_code == 400
