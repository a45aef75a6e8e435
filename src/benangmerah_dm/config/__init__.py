"""Configuration management for the data manager."""

from .config import load_config, parse_config
from .schemas import DataManagerConfig, InstanceConfig, LoggingConfig, StoreConfig

__all__ = [
    "DataManagerConfig",
    "InstanceConfig",
    "LoggingConfig",
    "StoreConfig",
    "load_config",
    "parse_config",
]
