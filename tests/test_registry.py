"""Tests for the instance registry."""

import pytest
from src.benangmerah_dm.config.models import InstanceRecord, SessionState
from src.benangmerah_dm.drivers.catalogue import DriverCatalogue
from src.benangmerah_dm.errors import ReloadError, SessionNotFoundError
from src.benangmerah_dm.instances import InstanceSource, StaticInstanceSource
from src.benangmerah_dm.registry import InstanceRegistry
from src.benangmerah_dm.submission.queue import SubmissionQueue


class CountingSource(InstanceSource):
    def __init__(self, records: list[InstanceRecord]):
        self.records = records
        self.loads = 0

    def load(self) -> list[InstanceRecord]:
        self.loads += 1
        return list(self.records)


class FailingSource(InstanceSource):
    def load(self) -> list[InstanceRecord]:
        raise ConnectionError("store down")


def _records() -> list[InstanceRecord]:
    return [
        InstanceRecord(id="good", driver_name="list", options_yaml="statements: []"),
        InstanceRecord(id="broken", driver_name="list", options_yaml="a: [1"),
        InstanceRecord(id="named", driver_name="list", graph_uri="http://g/named"),
    ]


@pytest.fixture
def registry(
    queue: SubmissionQueue, catalogue: DriverCatalogue
) -> InstanceRegistry:
    return InstanceRegistry(
        CountingSource(_records()),
        queue,
        catalogue=catalogue,
        graph_template="http://example.org/graph/{ID}",
    )


def test_reload_builds_sessions_and_survives_bad_yaml(
    registry: InstanceRegistry,
) -> None:
    registry.reload()

    assert registry.initialized
    assert [s.id for s in registry.sessions()] == ["good", "broken", "named"]
    assert registry.get("good").state == SessionState.ACTIVE
    assert registry.get("broken").state == SessionState.DISABLED
    assert registry.get("named").state == SessionState.ACTIVE


def test_graph_uri_from_template_or_record(registry: InstanceRegistry) -> None:
    registry.reload()

    assert registry.get("good").graph_uri == "http://example.org/graph/good"
    assert registry.get("named").graph_uri == "http://g/named"


def test_reload_is_idempotent_unless_forced(registry: InstanceRegistry) -> None:
    source = registry.source
    assert isinstance(source, CountingSource)

    registry.reload()
    registry.reload()
    assert source.loads == 1

    registry.reload(force=True)
    assert source.loads == 2


def test_sessions_persist_across_reloads(registry: InstanceRegistry) -> None:
    registry.reload()
    session = registry.get("good")
    source = registry.source
    assert isinstance(source, CountingSource)

    source.records = [source.records[0]]
    registry.reload(force=True)

    assert registry.get("good") is session
    assert "broken" in registry
    assert len(registry) == 3


def test_get_unknown_session(registry: InstanceRegistry) -> None:
    registry.reload()

    with pytest.raises(SessionNotFoundError):
        registry.get("nope")


def test_source_failure_raises_reload_error(
    queue: SubmissionQueue, catalogue: DriverCatalogue
) -> None:
    registry = InstanceRegistry(FailingSource(), queue, catalogue=catalogue)

    with pytest.raises(ReloadError):
        registry.reload()
    assert registry.initialized is False


def test_no_graph_template_uses_default_graph(
    queue: SubmissionQueue, catalogue: DriverCatalogue
) -> None:
    registry = InstanceRegistry(
        StaticInstanceSource([InstanceRecord(id="x", driver_name="list")]),
        queue,
        catalogue=catalogue,
        graph_template=None,
    )
    registry.reload()

    assert registry.get("x").graph_uri is None


def test_driver_catalogue_exposed(registry: InstanceRegistry) -> None:
    assert "list" in registry.available_drivers
    assert "file" in registry.available_drivers
    assert registry.driver_details["list"].origin == "registered"
    assert registry.driver_details["file"].origin == "builtin"
