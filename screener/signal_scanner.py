"""
Signal scanner

Entry point for the three engine operations: momentum scans over a symbol
universe, fundamental screening of provider candidates, and single-series
indicator snapshots. Per-symbol work runs in rate-limited concurrent groups;
symbols whose data cannot be fetched or is too short are dropped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from config import BATCH_CONFIG, SCREENER_CONFIG, SECTOR_MAP
from data_cleaner.normalizer import DataNormalizer
from data_cleaner.price_series import PriceSeries
from data_fetch.provider import MarketDataProvider, ScreenerCandidate, ScreenerFilters
from fundamentals.fundamental_scorer import FundamentalScorer
from indicators.indicator_engine import IndicatorEngine, IndicatorSet
from processing.batch_engine import BatchEngine, call_async
from ranking.ranking_engine import (
    RankingEngine,
    ScreenerResult,
    SignalSummary,
    validate_limit,
    validate_sort_key,
)
from utils.errors import InvalidRequestError
from utils.universe_loader import UniverseLoader
from utils.logger import setup_logger
from .momentum_composer import MomentumComposer, MomentumSignal

logger = setup_logger(__name__)


@dataclass(frozen=True)
class ScanRequest:
    """Momentum scan input; custom symbols take precedence over the universe"""
    universe: Optional[str] = None
    custom_symbols: Optional[Sequence[str]] = None
    strategy: Optional[str] = None


@dataclass(frozen=True)
class ScanResponse:
    signals: List[MomentumSignal]
    summary: SignalSummary
    timestamp: str

    def to_dict(self) -> Dict:
        return {
            'signals': [s.to_dict() for s in self.signals],
            'summary': self.summary.to_dict(),
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class ScreenerRequest:
    """Fundamental screen input; None fields take configured defaults"""
    market_cap_min: Optional[float] = None
    market_cap_max: Optional[float] = None
    sector: Optional[str] = None
    country: Optional[str] = None
    exchange: Optional[str] = None
    limit: Optional[int] = None
    sort_by: Optional[str] = None
    profile: Optional[str] = None


@dataclass(frozen=True)
class ScreenerResponse:
    stocks: List[ScreenerResult]
    filters: ScreenerFilters
    message: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.stocks)

    def to_dict(self) -> Dict:
        data = {
            'stocks': [s.to_dict() for s in self.stocks],
            'total': self.total,
            'filters': self.filters.to_dict(),
        }
        if self.message:
            data['message'] = self.message
        return data


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def map_sector(sector: Optional[str]) -> Optional[str]:
    """Friendly sector name to provider name; 'All Sectors' means no filter"""
    if not sector or sector == 'All Sectors':
        return None
    return SECTOR_MAP.get(sector, sector)


class SignalScanner:
    """Momentum scans, fundamental screens and indicator snapshots"""

    def __init__(
        self,
        provider: MarketDataProvider = None,
        universe_loader: UniverseLoader = None,
        batch_engine: BatchEngine = None,
        screener_batch_engine: BatchEngine = None,
        normalizer: DataNormalizer = None,
        indicator_engine: IndicatorEngine = None,
        ranking_engine: RankingEngine = None,
        clock: Callable[[], str] = utc_timestamp,
    ):
        """
        Initialize scanner

        Args:
            provider: Market data source (the Yahoo/FMP DataFetcher by default)
            universe_loader: Named universe source
            batch_engine: Grouping for momentum scans
            screener_batch_engine: Grouping for fundamental scoring
            normalizer: Length validation of fetched series
            indicator_engine: Indicator snapshot builder
            ranking_engine: Ordering and summaries
            clock: Timestamp source for scan responses
        """
        if provider is None:
            from data_fetch.data_fetcher import DataFetcher
            provider = DataFetcher()
        self.provider = provider
        self.universe_loader = universe_loader or UniverseLoader()
        self.batch_engine = batch_engine or BatchEngine()
        self.screener_batch_engine = screener_batch_engine or BatchEngine(
            batch_size=SCREENER_CONFIG["BATCH_SIZE"],
            batch_delay=SCREENER_CONFIG["BATCH_DELAY"],
        )
        self.normalizer = normalizer or DataNormalizer()
        self.indicator_engine = indicator_engine or IndicatorEngine()
        self.ranking_engine = ranking_engine or RankingEngine()
        self.clock = clock
        self.lookback_days = BATCH_CONFIG["LOOKBACK_DAYS"]

    def list_universes(self) -> List[str]:
        return self.universe_loader.list_universes()

    def describe_universes(self) -> List[Dict]:
        """Universe ids with display names and symbol counts"""
        return self.universe_loader.describe()

    def compute_indicators(self, series: Optional[PriceSeries]) -> IndicatorSet:
        """
        Indicator snapshot for one series

        Raises:
            InvalidRequestError: no bars to compute from
        """
        if series is None or len(series) == 0:
            raise InvalidRequestError("At least one price bar is required")
        return self.indicator_engine.calculate(series)

    async def scan_momentum(self, request: ScanRequest = None) -> ScanResponse:
        """
        Score every symbol of a universe and order the signals

        Args:
            request: Universe or custom symbols plus scoring strategy

        Returns:
            ScanResponse with actionable signals first

        Raises:
            InvalidRequestError: unknown universe/strategy or empty symbol list
        """
        request = request or ScanRequest()
        composer = MomentumComposer(strategy=request.strategy, indicator_engine=self.indicator_engine)
        symbols = self.universe_loader.resolve(request.universe, request.custom_symbols)

        logger.info(f"Momentum scan: {len(symbols)} symbols, strategy={composer.strategy.name}")

        async def analyze(symbol: str) -> Optional[MomentumSignal]:
            series = await call_async(self.provider.get_price_history, symbol, self.lookback_days)
            if not self.normalizer.is_usable(series):
                logger.debug(f"Skipping {symbol}: insufficient or missing price history")
                return None
            return composer.compose(series)

        signals = await self.batch_engine.process(symbols, analyze)
        ordered = self.ranking_engine.order_signals(signals)
        summary = self.ranking_engine.summarize(ordered)

        logger.info(
            f"Momentum scan complete: {summary.total}/{len(symbols)} scored, "
            f"{summary.strong_buy} strong buy, {summary.buy} buy"
        )
        return ScanResponse(signals=ordered, summary=summary, timestamp=self.clock())

    async def score_fundamentals(self, request: ScreenerRequest = None) -> ScreenerResponse:
        """
        Pre-screen with the provider, then score and rank candidates

        Args:
            request: Filters, limit, sort key and scoring profile

        Returns:
            ScreenerResponse with ranked rows

        Raises:
            InvalidRequestError: bad sort key, limit or profile
            ProviderConfigurationError: provider cannot screen (no API key)
        """
        request = request or ScreenerRequest()
        sort_by = validate_sort_key(request.sort_by)
        limit = validate_limit(request.limit)
        scorer = FundamentalScorer(request.profile)

        filters = ScreenerFilters(
            market_cap_min=SCREENER_CONFIG["MARKET_CAP_MIN"] if request.market_cap_min is None else request.market_cap_min,
            market_cap_max=request.market_cap_max,
            sector=map_sector(request.sector),
            country=SCREENER_CONFIG["COUNTRY"] if request.country is None else request.country,
            exchange=SCREENER_CONFIG["EXCHANGE"] if request.exchange is None else request.exchange,
        )

        candidates = await call_async(self.provider.get_screener_candidates, filters)
        if not candidates:
            logger.info(f"No candidates for filters {filters.to_dict()}")
            return ScreenerResponse(stocks=[], filters=filters, message='No stocks found matching criteria')

        top = list(candidates)[:min(limit, SCREENER_CONFIG["MAX_SCORED"])]
        logger.info(f"Scoring {len(top)} of {len(candidates)} candidates (profile={scorer.profile.name})")

        async def score(candidate: ScreenerCandidate) -> ScreenerResult:
            try:
                metrics = await call_async(self.provider.get_fundamental_metrics, candidate.symbol)
            except Exception as e:
                logger.warning(f"Metrics unavailable for {candidate.symbol}: {e}")
                metrics = None
            quality, valuation, total = scorer.score(metrics)
            return ScreenerResult(
                candidate=candidate,
                metrics=metrics,
                quality_score=quality,
                valuation_score=valuation,
                total_score=total,
            )

        scored = await self.screener_batch_engine.process(top, score)
        ranked = self.ranking_engine.rank_screener_results(scored, sort_by=sort_by, limit=limit)
        return ScreenerResponse(stocks=ranked, filters=filters)
