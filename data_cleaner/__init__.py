"""Price series model and normalization"""

from .price_series import PriceBar, PriceSeries
from .normalizer import DataNormalizer, has_min_length

__all__ = ["PriceBar", "PriceSeries", "DataNormalizer", "has_min_length"]
