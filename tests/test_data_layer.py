"""Tests for normalization, provider parsing and the composite DataFetcher."""

import json
import threading
import time
from datetime import date

import pandas as pd
import pytest

from data_cleaner.normalizer import DataNormalizer
from data_fetch.data_fetcher import DataFetcher
from data_fetch.fallback_fetcher import FallbackFetcher
from data_fetch.fmp_client import FMPClient, parse_key_metrics
from data_fetch.provider import MarketDataProvider, ScreenerFilters
from fundamentals import financial_fetcher
from fundamentals.financial_fetcher import FinancialFetcher
from fundamentals.fundamental_scorer import FundamentalMetrics
from utils.errors import InvalidRequestError, ProviderConfigurationError
from utils.helpers import chunked, retry_on_failure, round_half_up, validate_ticker
from utils.universe_loader import UniverseLoader


class TestDataNormalizer:
    def test_normalize_cleans_and_sorts(self):
        df = pd.DataFrame(
            {
                "Open": [None, 11.0, 12.0, 13.0],
                "High": [10.5, 11.5, 12.5, 13.5],
                "Low": [9.5, 10.5, 11.5, 12.5],
                "Close": [10.0, 11.0, None, 13.5],
                "Volume": [100, None, 300, 400],
            },
            index=pd.to_datetime(["2024-01-03", "2024-01-02", "2024-01-04", "2024-01-03"]),
        )
        series = DataNormalizer().normalize(df, "AAA", "Alpha")

        assert series.name == "Alpha"
        assert [bar.date for bar in series.bars] == [date(2024, 1, 2), date(2024, 1, 3)]
        # duplicated 2024-01-03 keeps the last row; null close row dropped
        assert list(series.closes) == [11.0, 13.5]
        assert series.bars[0].volume == 0.0

    def test_missing_open_falls_back_to_close(self):
        df = pd.DataFrame(
            {"Open": [None], "High": [None], "Low": [None], "Close": [5.0], "Volume": [10]},
            index=pd.to_datetime(["2024-01-02"]),
        )
        bar = DataNormalizer().normalize(df, "AAA").latest
        assert (bar.open, bar.high, bar.low) == (5.0, 5.0, 5.0)

    def test_missing_columns(self):
        df = pd.DataFrame({"Close": [1.0]}, index=pd.to_datetime(["2024-01-02"]))
        assert DataNormalizer().normalize(df, "AAA") is None

    def test_from_records(self):
        records = [
            {"date": "2024-01-02", "close": 10, "volume": 5},
            {"date": "2024-01-01", "open": 9, "high": 9.5, "low": 8.5, "close": 9, "volume": 4},
            {"date": None, "close": 1},
        ]
        series = DataNormalizer().from_records(records, "AAA")
        assert len(series) == 2
        assert list(series.closes) == [9.0, 10.0]

    def test_is_usable(self):
        normalizer = DataNormalizer(min_bars=3)
        series = DataNormalizer().from_records(
            [{"date": f"2024-01-0{i}", "close": i} for i in range(1, 4)], "AAA"
        )
        assert normalizer.is_usable(series)
        assert not normalizer.is_usable(series, min_bars=4)
        assert not normalizer.is_usable(None)
        assert not normalizer.is_usable({"bars": []})


class TestFallbackParse:
    def test_parse_chart_skips_null_closes(self):
        payload = {
            "chart": {
                "result": [{
                    "meta": {"shortName": "Alpha Inc", "symbol": "AAA"},
                    "timestamp": [1704205800, 1704292200, 1704378600],
                    "indicators": {"quote": [{
                        "open": [10.0, None, 12.0],
                        "high": [10.5, 11.5, 12.5],
                        "low": [9.5, 10.5, 11.5],
                        "close": [10.2, 11.1, None],
                        "volume": [1000, None, 3000],
                    }]},
                }]
            }
        }
        df, name = FallbackFetcher.parse_chart(payload, "AAA")

        assert name == "Alpha Inc"
        assert list(df["Close"]) == [10.2, 11.1]
        assert list(df["Open"]) == [10.0, 0]
        assert list(df["Volume"]) == [1000, 0]

    @pytest.mark.parametrize("payload", [None, {}, {"chart": {"result": []}}, {"chart": {"result": None}}])
    def test_malformed_payload(self, payload):
        assert FallbackFetcher.parse_chart(payload, "AAA") is None


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, payload):
        self.payload = payload
        self.headers = {}
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        return FakeResponse(self.payload)


class TestFMPClient:
    def test_parse_key_metrics_drops_non_numeric(self):
        metrics = parse_key_metrics("AAA", {"peRatio": 12.5, "roic": None, "roe": "n/a", "enterpriseValueOverEBITDA": 9})
        assert metrics.pe_ratio == 12.5
        assert metrics.roic is None
        assert metrics.roe is None
        assert metrics.enterprise_value_over_ebitda == 9.0

    def test_missing_key_raises(self):
        client = FMPClient(api_key="", session=FakeSession([]))
        assert not client.is_configured
        with pytest.raises(ProviderConfigurationError):
            client.stock_screener(ScreenerFilters(market_cap_min=1e9))

    def test_stock_screener_params_and_rows(self):
        session = FakeSession([
            {"symbol": "aaa", "companyName": "Alpha", "sector": "Technology", "marketCap": 5e9,
             "price": 10.0, "exchangeShortName": "NASDAQ"},
            {"symbol": "", "companyName": "Nameless"},
        ])
        client = FMPClient(api_key="k", session=session)
        candidates = client.stock_screener(ScreenerFilters(market_cap_min=1e9, sector="Technology", country="US"))

        url, params = session.requests[0]
        assert url.endswith("/stock-screener")
        assert params["marketCapMoreThan"] == 1_000_000_000
        assert params["isEtf"] == "false"
        assert params["sector"] == "Technology"
        assert params["apikey"] == "k"
        assert "marketCapLowerThan" not in params
        assert [(c.symbol, c.industry, c.exchange) for c in candidates] == [("AAA", "N/A", "NASDAQ")]

    def test_key_metrics_empty(self):
        assert FMPClient(api_key="k", session=FakeSession([])).key_metrics("AAA") is None


class TestFinancialFetcher:
    def test_csv_with_camel_case_headers(self, tmp_path):
        path = tmp_path / "fundamentals.csv"
        path.write_text("symbol,peRatio,roic,debtToEquity\naaa,12.5,18,\nBBB,,7,0.4\n")
        fetcher = FinancialFetcher(csv_path=path, enabled=True)

        aaa = fetcher.get("AAA")
        assert aaa.pe_ratio == 12.5
        assert aaa.roic == 18.0
        assert aaa.debt_to_equity is None
        assert fetcher.get("bbb").debt_to_equity == 0.4
        assert fetcher.get("ZZZ") is None

    def test_concurrent_first_reads_wait_for_the_load(self, tmp_path, monkeypatch):
        path = tmp_path / "fundamentals.csv"
        path.write_text("symbol,roic\nAAA,18\nBBB,7\n")
        fetcher = FinancialFetcher(csv_path=path, enabled=True)

        real_read_csv = financial_fetcher.pd.read_csv

        def slow_read_csv(*args, **kwargs):
            time.sleep(0.2)
            return real_read_csv(*args, **kwargs)

        monkeypatch.setattr(financial_fetcher.pd, "read_csv", slow_read_csv)

        out = {}

        def read(symbol):
            out[symbol] = fetcher.get(symbol)

        threads = [threading.Thread(target=read, args=(symbol,)) for symbol in ("AAA", "BBB")]
        for thread in threads:
            thread.start()
            time.sleep(0.05)
        for thread in threads:
            thread.join()

        assert out["AAA"].roic == 18.0
        assert out["BBB"].roic == 7.0

    def test_disabled(self, tmp_path):
        assert FinancialFetcher(csv_path=tmp_path / "missing.csv", enabled=False).get("AAA") is None


class StubYahoo:
    def __init__(self, df=None):
        self.df = df

    def fetch_data(self, ticker, lookback_days):
        return self.df


class StubFallback:
    def __init__(self, result=None):
        self.result = result
        self.calls = 0

    def fetch(self, ticker, lookback_days):
        self.calls += 1
        return self.result


class StubFMP:
    is_configured = True

    def __init__(self, metrics=None):
        self.metrics = metrics

    def key_metrics(self, symbol):
        return self.metrics

    def stock_screener(self, filters):
        return []


class StubCSV:
    def __init__(self, metrics=None):
        self.metrics = metrics

    def get(self, ticker):
        return self.metrics


def frame(closes):
    return pd.DataFrame(
        {"Open": closes, "High": closes, "Low": closes, "Close": closes, "Volume": [1] * len(closes)},
        index=pd.date_range("2024-01-01", periods=len(closes)),
    )


class TestDataFetcher:
    def test_is_a_market_data_provider(self):
        fetcher = DataFetcher(StubYahoo(), StubFallback(), StubFMP(), StubCSV())
        assert isinstance(fetcher, MarketDataProvider)

    def test_yahoo_first(self):
        fallback = StubFallback()
        fetcher = DataFetcher(StubYahoo(frame([1.0, 2.0])), fallback, StubFMP(), StubCSV())
        series = fetcher.get_price_history("AAA", 100)
        assert list(series.closes) == [1.0, 2.0]
        assert series.name == "AAA"
        assert fallback.calls == 0

    def test_fallback_supplies_name(self):
        fetcher = DataFetcher(StubYahoo(None), StubFallback((frame([3.0]), "Alpha Inc")), StubFMP(), StubCSV())
        series = fetcher.get_price_history("AAA", 100)
        assert series.name == "Alpha Inc"

    def test_both_sources_fail(self):
        fetcher = DataFetcher(StubYahoo(None), StubFallback(None), StubFMP(), StubCSV())
        assert fetcher.get_price_history("AAA", 100) is None

    def test_csv_metrics_win_over_fmp(self):
        csv = FundamentalMetrics(symbol="AAA", roic=1.0)
        fmp = FundamentalMetrics(symbol="AAA", roic=2.0)
        assert DataFetcher(StubYahoo(), StubFallback(), StubFMP(fmp), StubCSV(csv)).get_fundamental_metrics("AAA") is csv
        assert DataFetcher(StubYahoo(), StubFallback(), StubFMP(fmp), StubCSV(None)).get_fundamental_metrics("AAA") is fmp


class TestUniverseLoader:
    def test_bundled_universes(self):
        loader = UniverseLoader()
        assert loader.list_universes() == ["sp500_top", "tech", "momentum"]
        assert len(loader.get_symbols("sp500_top")) == 30
        assert "BRK-B" in loader.get_symbols("sp500_top")

    def test_describe(self, tmp_path):
        path = tmp_path / "u.json"
        path.write_text(json.dumps({"mine": {"name": "Mine", "symbols": ["a", "b", "A"]}}))
        assert UniverseLoader(path).describe() == [{"id": "mine", "name": "Mine", "count": 2}]

    def test_resolve_defaults_to_configured_universe(self):
        assert UniverseLoader().resolve()[:3] == ["AAPL", "MSFT", "AMZN"]

    def test_unknown_universe(self):
        with pytest.raises(InvalidRequestError):
            UniverseLoader().get_symbols("nasdaq_all")

    def test_invalid_custom_symbol(self):
        with pytest.raises(InvalidRequestError):
            UniverseLoader().resolve(custom_symbols=["AAPL", "BAD SYMBOL!"])

    def test_missing_file_has_no_universes(self, tmp_path):
        assert UniverseLoader(tmp_path / "none.json").list_universes() == []


class TestHelpers:
    @pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (72.5, 73), (-2.5, -3)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_chunked(self):
        assert chunked([1, 2, 3, 4, 5, 6, 7], 5) == [[1, 2, 3, 4, 5], [6, 7]]
        with pytest.raises(ValueError):
            chunked([1], 0)

    def test_retry_on_failure_backs_off_then_raises(self):
        delays = []
        attempts = []

        @retry_on_failure(max_retries=3, delay=1.0, backoff=2.0, exceptions=(ConnectionError,), sleep=delays.append)
        def flaky():
            attempts.append(1)
            raise ConnectionError("reset")

        with pytest.raises(ConnectionError):
            flaky()
        assert len(attempts) == 3
        assert delays == [1.0, 2.0]

    @pytest.mark.parametrize("symbol,valid", [("BRK-B", True), ("^GSPC", True), ("AAPL", True), ("BAD SYMBOL", False), ("", False)])
    def test_validate_ticker(self, symbol, valid):
        assert validate_ticker(symbol) is valid
