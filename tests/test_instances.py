"""Tests for instance sources."""

from pathlib import Path

import pytest
from src.benangmerah_dm.config.schemas import InstanceConfig
from src.benangmerah_dm.errors import ReloadError
from src.benangmerah_dm.instances import (
    SparqlInstanceSource,
    StaticInstanceSource,
    YamlInstanceSource,
)
from src.benangmerah_dm.store.memory import MemoryStore
import yaml


def test_static_source_dumps_inline_options() -> None:
    source = StaticInstanceSource.from_config(
        [InstanceConfig(id="a", driver_name="file", options={"path": "data.ttl"})]
    )

    (record,) = source.load()

    assert record.id == "a"
    assert yaml.safe_load(record.options_yaml) == {"path": "data.ttl"}


def test_yaml_source_reads_instances(tmp_path: Path) -> None:
    path = tmp_path / "instances.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "instances": [
                    {
                        "id": "http://example.org/a",
                        "driver_name": "http",
                        "options": {"url": "http://example.org/a.ttl"},
                        "label": "A",
                    },
                    {
                        "id": "http://example.org/b",
                        "driver_name": "file",
                        "enabled": "false",
                        "options_yaml": "path: b.nt",
                    },
                ]
            }
        ),
        encoding="utf-8",
    )

    records = YamlInstanceSource(path).load()

    assert [r.id for r in records] == ["http://example.org/a", "http://example.org/b"]
    assert records[0].label == "A"
    assert yaml.safe_load(records[0].options_yaml) == {"url": "http://example.org/a.ttl"}
    assert records[1].enabled is False
    assert records[1].options_yaml == "path: b.nt"


def test_yaml_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ReloadError):
        YamlInstanceSource(tmp_path / "missing.yaml").load()


def test_yaml_source_rejects_bad_entries(tmp_path: Path) -> None:
    path = tmp_path / "instances.yaml"
    path.write_text("- driver_name: file\n", encoding="utf-8")

    with pytest.raises(ReloadError):
        YamlInstanceSource(path).load()


def test_sparql_source_reads_driver_instances() -> None:
    store = MemoryStore()
    store.update(
        """
        PREFIX bm: <http://benangmerah.net/ontology/>
        PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
        INSERT DATA { GRAPH <tag:benangmerah.net:driver-instances> {
          <http://example.org/a> a bm:DriverInstance ;
            bm:driverName "http" ;
            bm:optionsYAML "url: http://example.org/a.ttl" ;
            bm:enabled true ;
            rdfs:label "Source A" .
          <http://example.org/b> a bm:DriverInstance ;
            bm:driverName "file" .
        } }
        """
    )

    records = SparqlInstanceSource(store).load()

    assert [r.id for r in records] == ["http://example.org/a", "http://example.org/b"]
    assert records[0].driver_name == "http"
    assert records[0].enabled is True
    assert records[0].options_yaml == "url: http://example.org/a.ttl"
    assert records[0].label == "Source A"
    assert records[1].enabled is False
    assert records[1].options_yaml == ""
