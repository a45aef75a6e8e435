"""Configuration schemas for the data manager."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal


@dataclass
class StoreConfig:
    """Configuration for the backing triple store."""

    type: Literal["sparql", "memory"] = "sparql"
    endpoint: str = "http://localhost:8890/sparql"
    update_endpoint: str | None = None
    timeout: int = 300


@dataclass
class DataManagerSettings:
    """Configuration for fragmenting and submission."""

    concurrency: int = 1
    fragment_length: int = 1048576
    instances_graph_uri: str = "tag:benangmerah.net:driver-instances"
    graph_template: str = "{ID}"


@dataclass
class InstanceConfig:
    """Inline declaration of a driver instance."""

    id: str
    driver_name: str
    enabled: bool = True
    options: dict[str, Any] | None = None
    options_yaml: str | None = None
    label: str | None = None
    comment: str | None = None
    graph_uri: str | None = None


@dataclass
class InstancesConfig:
    """Where driver instance records are read from."""

    source: Literal["config", "yaml", "sparql"] = "config"
    path: str | Path | None = None
    items: list[InstanceConfig] = field(default_factory=list[InstanceConfig])


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: str | Path | None = None
    max_file_size: str = "10MB"
    backup_count: int = 5


@dataclass
class DataManagerConfig:
    """Main data manager configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    data_manager: DataManagerSettings = field(default_factory=DataManagerSettings)
    instances: InstancesConfig = field(default_factory=InstancesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
