"""Utility modules for the signal engine"""

from .logger import setup_logger
from .errors import InvalidRequestError, ProviderConfigurationError
from .helpers import (
    format_percentage,
    safe_divide,
    round_to_precision,
    retry_on_failure,
)

__all__ = [
    "setup_logger",
    "InvalidRequestError",
    "ProviderConfigurationError",
    "format_percentage",
    "safe_divide",
    "round_to_precision",
    "retry_on_failure",
]
