"""Fetch, tidy and cache Eurostat bulk-download datasets."""

from eustat.config import EustatConfig, load_config
from eustat.errors import (
    CacheCorruptionError,
    CacheMissError,
    ConfigurationError,
    EustatError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from eustat.io.cache import clean_cache
from eustat.services.datasets import get_dataset

__version__ = "0.1.0"

__all__ = [
    "CacheCorruptionError",
    "CacheMissError",
    "ConfigurationError",
    "EustatConfig",
    "EustatError",
    "NetworkError",
    "NotFoundError",
    "ValidationError",
    "clean_cache",
    "get_dataset",
    "load_config",
]
