"""Sources of driver instance records."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
import logging
from pathlib import Path
from typing import Any

import yaml

from .config.models import InstanceRecord
from .config.schemas import InstanceConfig
from .errors import ReloadError
from .store.base import BackingStore

logger = logging.getLogger(__name__)

BM_NAMESPACE = "http://benangmerah.net/ontology/"

INSTANCES_QUERY = """\
PREFIX bm: <{bm}>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
SELECT ?id ?driverName ?optionsYAML ?enabled ?label ?comment
WHERE {{
  GRAPH <{graph}> {{
    ?id a bm:DriverInstance ;
        bm:driverName ?driverName .
    OPTIONAL {{ ?id bm:optionsYAML ?optionsYAML }}
    OPTIONAL {{ ?id bm:enabled ?enabled }}
    OPTIONAL {{ ?id rdfs:label ?label }}
    OPTIONAL {{ ?id rdfs:comment ?comment }}
  }}
}}
ORDER BY ?id
"""


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def record_from_config(item: InstanceConfig) -> InstanceRecord:
    """Convert an inline instance declaration into a record.

    Inline ``options`` mappings are dumped back to YAML so every record
    carries its options the same way, whatever the source.
    """
    options_yaml = item.options_yaml
    if options_yaml is None and item.options is not None:
        options_yaml = yaml.safe_dump(item.options, sort_keys=False)

    return InstanceRecord(
        id=item.id,
        driver_name=item.driver_name,
        enabled=item.enabled,
        options_yaml=options_yaml or "",
        label=item.label,
        comment=item.comment,
        graph_uri=item.graph_uri,
    )


class InstanceSource(ABC):
    """Declarative store of driver instance records."""

    @abstractmethod
    def load(self) -> list[InstanceRecord]:
        """Return every configured instance.

        Raises:
            ReloadError: If the records cannot be read
        """
        pass


class StaticInstanceSource(InstanceSource):
    """Instance records held in memory."""

    def __init__(self, records: Iterable[InstanceRecord] = ()):
        self.records = list(records)

    @classmethod
    def from_config(cls, items: Iterable[InstanceConfig]) -> "StaticInstanceSource":
        return cls(record_from_config(item) for item in items)

    def load(self) -> list[InstanceRecord]:
        return list(self.records)


class YamlInstanceSource(InstanceSource):
    """Instance records listed in a YAML file.

    The file holds either a list of instances or a mapping with an
    ``instances`` key; each entry has the fields of ``InstanceConfig``.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[InstanceRecord]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ReloadError(f"Failed to read instances from {self.path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("instances")
        if data is None:
            return []
        if not isinstance(data, list):
            raise ReloadError(f"Expected a list of instances in {self.path}")

        records: list[InstanceRecord] = []
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry:
                raise ReloadError(f"Invalid instance entry in {self.path}: {entry!r}")
            options = entry.get("options")
            records.append(
                record_from_config(
                    InstanceConfig(
                        id=str(entry["id"]),
                        driver_name=str(entry.get("driver_name", "")),
                        enabled=_as_bool(entry.get("enabled", True)),
                        options=options if isinstance(options, dict) else None,
                        options_yaml=entry.get("options_yaml"),
                        label=entry.get("label"),
                        comment=entry.get("comment"),
                        graph_uri=entry.get("graph_uri"),
                    )
                )
            )

        logger.info(f"Loaded {len(records)} instances from {self.path}")
        return records


class SparqlInstanceSource(InstanceSource):
    """Instance records stored as ``bm:DriverInstance`` resources in a graph."""

    def __init__(
        self,
        store: BackingStore,
        instances_graph_uri: str = "tag:benangmerah.net:driver-instances",
    ):
        self.store = store
        self.instances_graph_uri = instances_graph_uri

    def load(self) -> list[InstanceRecord]:
        query = INSTANCES_QUERY.format(bm=BM_NAMESPACE, graph=self.instances_graph_uri)
        try:
            rows = self.store.select(query)
        except Exception as e:
            raise ReloadError(f"Failed to query driver instances: {e}") from e

        records: dict[str, InstanceRecord] = {}
        for row in rows:
            instance_id = str(row["id"])
            if instance_id in records:
                continue
            records[instance_id] = InstanceRecord(
                id=instance_id,
                driver_name=str(row.get("driverName") or ""),
                enabled=_as_bool(row.get("enabled")),
                options_yaml=str(row.get("optionsYAML") or ""),
                label=row.get("label"),
                comment=row.get("comment"),
            )

        logger.info(f"Loaded {len(records)} instances from <{self.instances_graph_uri}>")
        return list(records.values())
