"""FastAPI server for the signal engine"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import json

from config import API_CONFIG, FMP_CONFIG, RESULTS_DIR, SCREENER_CONFIG
from data_cleaner.normalizer import DataNormalizer
from screener.momentum_composer import STRATEGIES
from screener.signal_scanner import ScanRequest, ScreenerRequest, SignalScanner
from utils.errors import InvalidRequestError, ProviderConfigurationError
from utils.logger import setup_logger

logger = setup_logger(__name__)

# Built lazily so importing the module never touches the network
scanner_instance: Optional[SignalScanner] = None

app = FastAPI(title="Signal Engine API", version="1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=API_CONFIG["CORS_ORIGINS"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class MomentumScanBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    universe: Optional[str] = Field(None, alias="list")
    custom_symbols: Optional[List[str]] = Field(None, alias="customSymbols")
    strategy: Optional[str] = None


class ScreenerBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    market_cap_min: Optional[float] = Field(None, alias="marketCapMin")
    market_cap_max: Optional[float] = Field(None, alias="marketCapMax")
    sector: Optional[str] = None
    country: Optional[str] = None
    exchange: Optional[str] = None
    limit: Optional[int] = None
    sort_by: Optional[str] = Field(None, alias="sortBy")
    profile: Optional[str] = None


class Bar(BaseModel):
    date: str
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: float
    volume: Optional[float] = None


class IndicatorsBody(BaseModel):
    symbol: str = "CUSTOM"
    bars: List[Bar]


def get_scanner() -> SignalScanner:
    global scanner_instance
    if scanner_instance is None:
        scanner_instance = SignalScanner()
    return scanner_instance


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Signal Engine API",
        "version": "1.0",
        "status": "running"
    }


@app.get("/momentum")
async def momentum_info():
    """Available universes and strategies"""
    try:
        scanner = get_scanner()
        universes = scanner.list_universes()
        details = scanner.describe_universes()
    except (OSError, ValueError) as e:
        logger.error(f"Error loading universes: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {
        "message": "Use POST to run momentum scanner",
        "lists": universes,
        "universes": details,
        "strategies": sorted(STRATEGIES),
        "example": {"list": "tech"},
    }


@app.post("/momentum")
async def run_momentum(body: MomentumScanBody):
    """
    Run a momentum scan

    Args:
        body: Universe id or custom symbols, optional strategy

    Returns:
        Ordered signals, summary and timestamp
    """
    request = ScanRequest(
        universe=body.universe,
        custom_symbols=body.custom_symbols,
        strategy=body.strategy,
    )
    try:
        response = await get_scanner().scan_momentum(request)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Scanner error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Scanner failed")
    return response.to_dict()


@app.get("/screener")
async def screener_info():
    """Screener availability"""
    return {
        "message": "Use POST to run screener",
        "apiKeyConfigured": bool(FMP_CONFIG["API_KEY"]),
        "sortKeys": list(SCREENER_CONFIG["SORT_KEYS"]),
        "example": {
            "marketCapMin": 1000000000,
            "sector": "Technology",
            "limit": 25
        },
    }


@app.post("/screener")
async def run_screener(body: ScreenerBody):
    """
    Run the fundamental screener

    Args:
        body: Filters, limit, sort key and scoring profile

    Returns:
        Ranked stocks, count and the filters applied
    """
    request = ScreenerRequest(
        market_cap_min=body.market_cap_min,
        market_cap_max=body.market_cap_max,
        sector=body.sector,
        country=body.country,
        exchange=body.exchange,
        limit=body.limit,
        sort_by=body.sort_by,
        profile=body.profile,
    )
    try:
        response = await get_scanner().score_fundamentals(request)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Screener error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to run screener")
    return response.to_dict()


@app.post("/indicators")
async def compute_indicators(body: IndicatorsBody):
    """
    Indicator snapshot for caller-supplied bars

    Args:
        body: Symbol and daily bars (oldest first or in any order)

    Returns:
        Indicator values
    """
    series = DataNormalizer().from_records(
        (bar.model_dump() for bar in body.bars), body.symbol.upper()
    )
    try:
        indicators = get_scanner().compute_indicators(series)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "symbol": body.symbol.upper(),
        "bars": len(series),
        "indicators": indicators.to_dict(),
    }


@app.get("/results/latest")
async def get_latest_results(universe: str = "sp500_top"):
    """
    Get the latest scheduled scan for a universe

    Returns:
        Stored scan response, or an empty one when nothing ran yet
    """
    if not universe.replace("_", "").isalnum():
        raise HTTPException(status_code=400, detail=f"Invalid universe '{universe}'")

    results_file = RESULTS_DIR / f"momentum_{universe}_latest.json"
    if not results_file.exists():
        return {"signals": [], "summary": None, "timestamp": None}

    try:
        with open(results_file, 'r') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error reading {results_file}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


def create_app(scanner: SignalScanner = None):
    """Create and configure FastAPI app"""
    global scanner_instance
    if scanner is not None:
        scanner_instance = scanner
    return app
