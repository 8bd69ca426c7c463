"""
Signal Engine - Main Entry Point
Usage:
    python main.py momentum --universe tech
    python main.py momentum --symbols AAPL MSFT NVDA --strategy long_trend
    python main.py screener --sector Technology --limit 10 --sort-by quality
    python main.py indicators AAPL
    python main.py serve
"""

import asyncio
import json
import sys
from datetime import datetime
from typing import Dict, List

from config import API_CONFIG, BATCH_CONFIG, RESULTS_DIR, app_config
from screener.momentum_composer import STRATEGIES
from screener.signal_scanner import (
    ScanRequest,
    ScanResponse,
    ScreenerRequest,
    ScreenerResponse,
    SignalScanner,
)
from utils.errors import InvalidRequestError, ProviderConfigurationError
from utils.helpers import format_percentage, normalize_symbol
from utils.logger import setup_logger

logger = setup_logger(__name__)


class SignalBot:
    """Runs scans through the SignalScanner and stores their results"""

    def __init__(self, scanner: SignalScanner = None):
        """Initialize bot"""
        self.scanner = scanner or SignalScanner()

    def run_momentum(self, universe: str = None, symbols: List[str] = None, strategy: str = None) -> ScanResponse:
        """
        Run a momentum scan

        Args:
            universe: Named universe id
            symbols: Explicit symbols (override the universe)
            strategy: Scoring strategy name

        Returns:
            Scan response
        """
        logger.info("=" * 50)
        logger.info("SIGNAL ENGINE - Momentum Scan")
        logger.info(f"Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 50)

        request = ScanRequest(universe=universe, custom_symbols=symbols, strategy=strategy)
        return asyncio.run(self.scanner.scan_momentum(request))

    def run_screener(self, **filters) -> ScreenerResponse:
        """Run the fundamental screener with ScreenerRequest keyword filters"""
        return asyncio.run(self.scanner.score_fundamentals(ScreenerRequest(**filters)))

    def analyze(self, symbol: str) -> Dict:
        """
        Indicator snapshot for one symbol

        Raises:
            InvalidRequestError: no price history available
        """
        symbol = normalize_symbol(symbol)
        series = self.scanner.provider.get_price_history(symbol, BATCH_CONFIG["LOOKBACK_DAYS"])
        if series is None:
            raise InvalidRequestError(f"No price history for {symbol}")
        indicators = self.scanner.compute_indicators(series)
        return {"symbol": symbol, "name": series.name, "bars": len(series), "indicators": indicators.to_dict()}

    def save_results(self, response: ScanResponse, universe: str) -> None:
        """
        Save scan results to the results directory

        Args:
            response: Scan response
            universe: Name used in the file names
        """
        app_config.ensure_dirs()
        payload = response.to_dict()

        latest_file = RESULTS_DIR / f"momentum_{universe}_latest.json"
        history_file = RESULTS_DIR / f"momentum_{universe}_{datetime.now().strftime('%Y%m%d')}.json"
        for path in (latest_file, history_file):
            with open(path, 'w') as f:
                json.dump(payload, f, indent=2, default=str)

        logger.info(f"Results saved: {response.summary.total} signals -> {latest_file}")


def print_momentum(response: ScanResponse, top: int = 10):
    summary = response.summary
    print("\n" + "=" * 60)
    print("MOMENTUM SCAN")
    print("=" * 60)
    print(f"Scored: {summary.total} | Strong Buy: {summary.strong_buy} | Buy: {summary.buy} "
          f"| Hold: {summary.hold} | Sell: {summary.sell}")
    print("-" * 60)
    for i, s in enumerate(response.signals[:top], 1):
        print(f"{i:>2}. {s.symbol:<6} {s.signal.value:<11} strength {s.strength:>3} "
              f"| ${s.price:,.2f} ({format_percentage(s.change_percent)}) | RSI {s.rsi}")
        print(f"    Target ${s.target_price:,.2f} (+{s.potential_gain}%) | Stop ${s.stop_loss:,.2f} "
              f"| R:R 1:{s.risk_reward}")
        if s.bullish_signals:
            print(f"    + {', '.join(s.bullish_signals)}")
        if s.bearish_signals:
            print(f"    - {', '.join(s.bearish_signals)}")


def print_screener(response: ScreenerResponse):
    print("\n" + "=" * 60)
    print("FUNDAMENTAL SCREENER")
    print("=" * 60)
    if response.message:
        print(response.message)
    for row in response.stocks:
        print(f"{row.rank:>2}. {row.symbol:<6} total {row.total_score:>3} | quality {row.quality_score:>3} "
              f"| valuation {row.valuation_score:>3} | {row.candidate.company_name or ''}")


def print_indicators(result: Dict):
    print(f"\n{'='*60}")
    print(f"INDICATORS: {result['symbol']} ({result['bars']} bars)")
    print(f"{'='*60}")
    for key, value in result["indicators"].items():
        shown = f"{value:,.4f}" if isinstance(value, float) else value
        print(f"  {key:<14} {shown}")


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="Signal Engine - momentum and fundamental scoring")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print raw JSON instead of a table"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    momentum = subparsers.add_parser("momentum", help="Run a momentum scan")
    momentum.add_argument("--universe", "-u", default=None, help="Named universe (e.g., sp500_top, tech)")
    momentum.add_argument("--symbols", nargs="+", help="Specific symbols to scan (e.g., AAPL MSFT)")
    momentum.add_argument("--strategy", choices=sorted(STRATEGIES), default=None, help="Scoring strategy")
    momentum.add_argument("--save", action="store_true", help="Save results to the results directory")
    momentum.add_argument("--top", type=int, default=10, help="Rows to print (default: 10)")

    screener = subparsers.add_parser("screener", help="Run the fundamental screener")
    screener.add_argument("--market-cap-min", type=float, default=None)
    screener.add_argument("--market-cap-max", type=float, default=None)
    screener.add_argument("--sector", default=None, help="Sector name (e.g., Technology)")
    screener.add_argument("--country", default=None)
    screener.add_argument("--exchange", default=None)
    screener.add_argument("--limit", type=int, default=None)
    screener.add_argument("--sort-by", default=None, help="total, quality or valuation")
    screener.add_argument("--profile", default=None, help="Scoring profile (screener, extended)")

    indicators = subparsers.add_parser("indicators", help="Indicator snapshot for one symbol")
    indicators.add_argument("symbol")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=API_CONFIG["HOST"])
    serve.add_argument("--port", type=int, default=API_CONFIG["PORT"])

    subparsers.add_parser("universes", help="List named universes")

    return parser


def main(argv: List[str] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn
        from api.api_server import create_app
        uvicorn.run(create_app(), host=args.host, port=args.port)
        return 0

    bot = SignalBot()

    try:
        if args.command == "universes":
            output = bot.scanner.list_universes()
            print(json.dumps(output, indent=2) if args.json else "\n".join(output))

        elif args.command == "momentum":
            response = bot.run_momentum(args.universe, args.symbols, args.strategy)
            if args.save:
                bot.save_results(response, "custom" if args.symbols else (args.universe or "default"))
            if args.json:
                print(json.dumps(response.to_dict(), indent=2))
            else:
                print_momentum(response, args.top)

        elif args.command == "screener":
            response = bot.run_screener(
                market_cap_min=args.market_cap_min,
                market_cap_max=args.market_cap_max,
                sector=args.sector,
                country=args.country,
                exchange=args.exchange,
                limit=args.limit,
                sort_by=args.sort_by,
                profile=args.profile,
            )
            if args.json:
                print(json.dumps(response.to_dict(), indent=2))
            else:
                print_screener(response)

        elif args.command == "indicators":
            result = bot.analyze(args.symbol)
            if args.json:
                print(json.dumps(result, indent=2))
            else:
                print_indicators(result)

    except InvalidRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ProviderConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print("\nDISCLAIMER: This is not financial advice. Trade at your own risk.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
