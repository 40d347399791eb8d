"""Configuration models and loaders for eustat."""

from .loader import DEFAULT_CONFIG_PATH, ENV_CACHE_DIR, ENV_UPDATE, dump_example_config, load_config
from .models import CacheConfig, EustatConfig, SourceConfig

__all__ = [
    "CacheConfig",
    "DEFAULT_CONFIG_PATH",
    "ENV_CACHE_DIR",
    "ENV_UPDATE",
    "EustatConfig",
    "SourceConfig",
    "dump_example_config",
    "load_config",
]
