"""Ranking module"""

from .ranking_engine import RankingEngine, ScreenerResult, SignalSummary

__all__ = ["RankingEngine", "ScreenerResult", "SignalSummary"]
