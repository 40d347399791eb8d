"""Exception taxonomy shared across eustat modules."""

from __future__ import annotations


class EustatError(Exception):
    """Base class for every error raised by eustat."""


class ConfigurationError(EustatError):
    """Raised for unusable configuration, e.g. a missing explicit cache directory."""


class NotFoundError(EustatError):
    """Raised when the bulk-download service does not know a dataset id."""


class NetworkError(EustatError):
    """Raised when the bulk-download request fails in transport."""


class ValidationError(EustatError, ValueError):
    """Raised for bad arguments or period labels that cannot be converted."""


class CacheMissError(EustatError):
    """Raised when a cache entry is absent. Consumed by the dataset service."""


class CacheCorruptionError(EustatError):
    """Raised when a cache entry exists but cannot be read back."""


__all__ = [
    "CacheCorruptionError",
    "CacheMissError",
    "ConfigurationError",
    "EustatError",
    "NetworkError",
    "NotFoundError",
    "ValidationError",
]
