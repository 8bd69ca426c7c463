"""Tests for the command line entry point and the daily scheduler job."""

import json
from datetime import datetime

import pytest

import main
import scheduler
from screener.signal_scanner import SignalScanner
from utils.universe_loader import UniverseLoader

from tests.conftest import FakeProvider, make_series, rising


@pytest.fixture
def bot(tmp_path, instant_batch_engine, monkeypatch):
    path = tmp_path / "universes.json"
    path.write_text(json.dumps({"sp500_top": ["AAA"], "tech": ["AAA", "BBB"]}))
    scanner = SignalScanner(
        provider=FakeProvider(series={"AAA": make_series("AAA", rising(60)), "BBB": make_series("BBB", rising(60))}),
        universe_loader=UniverseLoader(universe_file=path),
        batch_engine=instant_batch_engine,
        screener_batch_engine=instant_batch_engine,
        clock=lambda: "2024-05-01T20:30:00.000Z",
    )
    results_dir = tmp_path / "results"
    results_dir.mkdir()
    monkeypatch.setattr(main, "RESULTS_DIR", results_dir)
    monkeypatch.setattr(main.app_config, "ensure_dirs", lambda: None)
    bot = main.SignalBot(scanner)
    monkeypatch.setattr(main, "SignalBot", lambda: bot)
    return bot


def test_universes_command(bot, capsys):
    assert main.main(["--json", "universes"]) == 0
    assert json.loads(capsys.readouterr().out) == ["sp500_top", "tech"]


def test_momentum_command_saves_latest(bot):
    assert main.main(["momentum", "--universe", "tech", "--save"]) == 0

    latest = json.loads((main.RESULTS_DIR / "momentum_tech_latest.json").read_text())
    assert latest["summary"]["total"] == 2
    assert len(list(main.RESULTS_DIR.glob("momentum_tech_*.json"))) == 2


def test_unknown_universe_exits_with_usage_error(bot, capsys):
    assert main.main(["momentum", "--universe", "nasdaq_all"]) == 2
    assert "Unknown universe" in capsys.readouterr().err


def test_indicators_command(bot, capsys):
    assert main.main(["--json", "indicators", "aaa"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["symbol"] == "AAA"
    assert data["indicators"]["price"] == 109.0


def test_indicators_table_shows_readings(bot, capsys):
    assert main.main(["indicators", "AAA"]) == 0
    out = capsys.readouterr().out
    assert "overbought" in out
    assert "109.0000" in out


def test_indicators_without_history(bot):
    assert main.main(["indicators", "ZZZ"]) == 2


class TestScheduler:
    def test_weekend_is_skipped(self, bot):
        saturday = scheduler.MARKET_TZ.localize(datetime(2024, 5, 4, 16, 30))
        assert scheduler.run_bot(bot, now=saturday) == 0
        assert list(main.RESULTS_DIR.iterdir()) == []

    def test_weekday_scans_configured_universes(self, bot, monkeypatch):
        monkeypatch.setitem(scheduler.SCHEDULER_CONFIG, "UNIVERSES", ["sp500_top", "missing", "tech"])
        wednesday = scheduler.MARKET_TZ.localize(datetime(2024, 5, 1, 16, 30))

        assert scheduler.run_bot(bot, now=wednesday) == 2
        assert (main.RESULTS_DIR / "momentum_sp500_top_latest.json").exists()
        assert (main.RESULTS_DIR / "momentum_tech_latest.json").exists()
