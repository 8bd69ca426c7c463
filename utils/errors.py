"""Exceptions surfaced to callers of the signal engine"""


class InvalidRequestError(ValueError):
    """Malformed scan/screener request (unknown universe, bad sort key, bad limit)"""


class ProviderConfigurationError(RuntimeError):
    """A data provider cannot run at all, e.g. a missing API key"""
