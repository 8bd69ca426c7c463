"""
Signal Engine - Configuration Module
Centralized configuration for all modules
"""

import os
from pathlib import Path
from dataclasses import dataclass

# Load environment variables from .env file
from dotenv import load_dotenv

load_dotenv()

# Base paths
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
RESULTS_DIR = BASE_DIR / "results"
LOG_DIR = BASE_DIR / "logs"

# Yahoo Finance settings
YAHOO_FINANCE_SETTINGS = {
    "interval": "1d",  # Daily candles
    "retry_count": 3,
    "retry_delay": 2,  # seconds
    "timeout": 30,
    "chart_url": "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}",
    "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}

# Financial Modeling Prep settings
FMP_CONFIG = {
    "API_KEY": os.getenv("FMP_API_KEY") or os.getenv("NEXT_PUBLIC_FMP_API_KEY", ""),
    "BASE_URL": "https://financialmodelingprep.com/api/v3",
    "TIMEOUT": 20,
    "SCREENER_FETCH_LIMIT": 100,  # Get more to filter
}

# Technical Indicator Settings
INDICATOR_CONFIG = {
    "SMA_PERIODS": [20, 50, 200],
    "RSI_PERIOD": 14,
    "RSI_NEUTRAL": 50.0,  # Returned when history is too short
    "MACD_FAST": 12,
    "MACD_SLOW": 26,
    "MACD_SIGNAL": 9,
    "VOLUME_AVG_PERIOD": 20,
    # Categorical readings on the snapshot
    "RSI_OVERSOLD": 30,
    "RSI_OVERBOUGHT": 70,
    "VOLUME_HIGH_RATIO": 1.5,
    "VOLUME_LOW_RATIO": 0.5,
}

# Momentum scoring
MOMENTUM_CONFIG = {
    "BASE_SCORE": 50,
    "DEFAULT_STRATEGY": "short_trend",
    "RSI_OVERSOLD": 30,
    "RSI_NEAR_OVERSOLD": 40,
    "RSI_OVERBOUGHT": 70,
    "RSI_NEAR_OVERBOUGHT": 60,
    "SMA20_TOLERANCE": 0.98,  # sma50 must hold above 98% of sma20
    "VOLUME_SURGE": 1.5,
    "VOLUME_HEAVY": 2.0,
    "NEAR_SUPPORT_PCT": 5,
}

# Signal Thresholds (strength, inclusive)
SIGNAL_THRESHOLDS = {
    "STRONG_BUY": 75,
    "BUY": 60,
    "SELL": 40,
    "STRONG_SELL": 25,
}

# Trade parameters
TRADE_CONFIG = {
    "STOP_LOSS_PCT": 0.08,
    "TARGET_TIERS": [  # (min strength, target pct), checked in order
        (70, 0.20),
        (60, 0.15),
    ],
    "DEFAULT_TARGET_PCT": 0.10,
}

# Batch Settings
BATCH_CONFIG = {
    "BATCH_SIZE": 5,
    "BATCH_DELAY": 0.3,  # seconds between groups (provider rate limit)
    "MIN_BARS": 50,  # Minimum usable bars to accept a symbol
    "LOOKBACK_DAYS": 100,
}

# Fundamental screener settings
SCREENER_CONFIG = {
    "MARKET_CAP_MIN": 1_000_000_000,  # $1B minimum by default
    "COUNTRY": "US",
    "EXCHANGE": "NYSE,NASDAQ",
    "LIMIT": 25,
    "MAX_SCORED": 30,  # Candidates scored in detail per request
    "SORT_KEYS": ("total", "quality", "valuation"),
    "DEFAULT_SORT": "total",
    "SCORING_PROFILE": "screener",
    "BATCH_SIZE": 3,
    "BATCH_DELAY": 0.25,
}

# Friendly sector names -> provider sector names (must match exactly)
SECTOR_MAP = {
    "Technology": "Technology",
    "Healthcare": "Healthcare",
    "Financials": "Financial Services",
    "Consumer Cyclical": "Consumer Cyclical",
    "Consumer Defensive": "Consumer Defensive",
    "Industrials": "Industrials",
    "Energy": "Energy",
    "Basic Materials": "Basic Materials",
    "Utilities": "Utilities",
    "Real Estate": "Real Estate",
    "Communication Services": "Communication Services",
}

# Fundamentals settings (optional offline source)
FUNDAMENTALS_CONFIG = {
    "CSV_ENABLED": os.getenv("SIGNAL_FUNDAMENTALS_CSV") is not None,
    "CSV_PATH": Path(os.getenv("SIGNAL_FUNDAMENTALS_CSV", DATA_DIR / "fundamentals.csv")),
}

# Named symbol universes
UNIVERSE_CONFIG = {
    "FILE": Path(os.getenv("SIGNAL_UNIVERSE_FILE", DATA_DIR / "universes.json")),
    "DEFAULT": "sp500_top",
}

# API Server Settings
API_CONFIG = {
    "HOST": os.getenv("SIGNAL_API_HOST", "0.0.0.0"),
    "PORT": int(os.getenv("SIGNAL_API_PORT", "8000")),
    "CORS_ORIGINS": ["*"],
}

# Scheduler Settings
SCHEDULER_CONFIG = {
    "TIMEZONE": "America/New_York",
    "RUN_AT": "16:30",  # After the New York close
    "UNIVERSES": ["sp500_top"],
    "POLL_SECONDS": 30,
}

# Logging Settings
LOGGING_CONFIG = {
    "LEVEL": os.getenv("SIGNAL_LOG_LEVEL", "INFO"),
    "FORMAT": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "FILE": LOG_DIR / "signal_engine.log",
    "MAX_BYTES": 10 * 1024 * 1024,  # 10MB
    "BACKUP_COUNT": 5,
}


@dataclass
class AppConfig:
    """Application configuration dataclass"""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    results_dir: Path = RESULTS_DIR
    log_dir: Path = LOG_DIR

    def ensure_dirs(self):
        """Create writable directories on demand"""
        for dir_path in [self.results_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Global config instance
app_config = AppConfig()
