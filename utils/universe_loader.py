"""Named symbol universes loaded from a JSON file"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from config import UNIVERSE_CONFIG
from utils.errors import InvalidRequestError
from utils.helpers import unique_symbols, validate_ticker
from utils.logger import setup_logger

logger = setup_logger(__name__)


class UniverseLoader:
    """Load universes from a JSON file with flexible format support"""

    def __init__(self, universe_file: Path = None):
        """
        Initialize universe loader

        Args:
            universe_file: Path to universe file (defaults to data/universes.json)
        """
        self.universe_file = Path(universe_file or UNIVERSE_CONFIG["FILE"])
        self.default = UNIVERSE_CONFIG["DEFAULT"]
        self._universes: Optional[Dict[str, Dict]] = None

    def _load(self) -> Dict[str, Dict]:
        """
        Parse the universe file

        Supports two shapes per entry:
        - {"tech": ["NVDA", "AMD"]}
        - {"tech": {"name": "Tech & Growth", "symbols": ["NVDA", "AMD"]}}

        Returns:
            Mapping of universe id to {"name", "symbols"}
        """
        if self._universes is not None:
            return self._universes

        if not self.universe_file.exists():
            logger.warning(f"Universe file not found: {self.universe_file}")
            self._universes = {}
            return self._universes

        with open(self.universe_file, 'r', encoding='utf-8') as f:
            raw = json.load(f)

        universes = {}
        for universe_id, entry in raw.items():
            if isinstance(entry, dict):
                name = entry.get("name") or universe_id
                symbols = entry.get("symbols") or []
            else:
                name, symbols = universe_id, entry or []
            universes[universe_id] = {"name": name, "symbols": unique_symbols(symbols)}

        logger.info(f"Loaded {len(universes)} universes from {self.universe_file}")
        self._universes = universes
        return universes

    def list_universes(self) -> List[str]:
        return list(self._load().keys())

    def describe(self) -> List[Dict]:
        """Universe ids with display names and sizes"""
        return [
            {"id": universe_id, "name": entry["name"], "count": len(entry["symbols"])}
            for universe_id, entry in self._load().items()
        ]

    def get_symbols(self, universe_id: str) -> List[str]:
        universes = self._load()
        if universe_id not in universes:
            raise InvalidRequestError(
                f"Unknown universe '{universe_id}'. Available: {', '.join(universes) or 'none'}"
            )
        return list(universes[universe_id]["symbols"])

    def resolve(self, universe_id: Optional[str] = None, custom_symbols: Sequence[str] = None) -> List[str]:
        """
        Resolve the symbols to scan

        Custom symbols win over the universe id; with neither, the default
        universe is used.

        Args:
            universe_id: Named universe
            custom_symbols: Explicit symbol list

        Returns:
            Upper-cased, de-duplicated symbols in input order

        Raises:
            InvalidRequestError: unknown universe, empty list or malformed symbol
        """
        if custom_symbols is not None:
            symbols = unique_symbols(custom_symbols)
            invalid = [s for s in symbols if not validate_ticker(s)]
            if invalid:
                raise InvalidRequestError(f"Invalid symbols: {', '.join(invalid)}")
        else:
            symbols = self.get_symbols(universe_id or self.default)

        if not symbols:
            raise InvalidRequestError("No symbols to scan")
        return symbols
