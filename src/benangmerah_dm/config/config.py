"""Configuration management utilities."""

import json
import logging
from pathlib import Path
from typing import Any

from dacite import Config, from_dict
import yaml

from ..errors import ConfigError
from .schemas import DataManagerConfig

logger = logging.getLogger(__name__)


def load_config(config_path: str | Path) -> DataManagerConfig:
    """Load configuration from a YAML or JSON file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            config_data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            config_data = json.load(f)
        else:
            raise ConfigError(f"Unsupported configuration format: {config_path.suffix}")

    config = parse_config(config_data or {})
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def parse_config(config_data: dict[str, Any]) -> DataManagerConfig:
    """Build and validate a configuration object from plain data."""
    try:
        config: DataManagerConfig = from_dict(
            data_class=DataManagerConfig, data=config_data, config=Config(strict=True)
        )
    except Exception as e:
        raise ConfigError(f"Failed to parse configuration: {e}") from e

    settings = config.data_manager
    if settings.concurrency < 1:
        raise ConfigError("data_manager.concurrency must be at least 1")
    if settings.fragment_length < 1:
        raise ConfigError("data_manager.fragment_length must be at least 1")

    instances = config.instances
    if instances.source == "yaml" and not instances.path:
        raise ConfigError("instances.path is required for the 'yaml' source")

    return config
