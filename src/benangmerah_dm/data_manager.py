"""Data manager service wiring the store, the submission queue and the registry."""

import logging
import os
import time
from typing import TypedDict

from dotenv import load_dotenv

from .config.models import LogEntry
from .config.schemas import DataManagerConfig, InstancesConfig, StoreConfig
from .drivers.catalogue import DriverCatalogue
from .errors import DataManagerError
from .instances import (
    InstanceSource,
    SparqlInstanceSource,
    StaticInstanceSource,
    YamlInstanceSource,
)
from .registry import InstanceRegistry
from .session import DriverSession
from .store.base import BackingStore
from .store.memory import MemoryStore
from .store.sparql import SparqlStore
from .submission.queue import SubmissionQueue

logger = logging.getLogger(__name__)


class SessionSummary(TypedDict):
    id: str
    driver: str | None
    state: str
    graph_uri: str | None
    query_count: int
    pending: int
    last_log: str | None


class ManagerSummary(TypedDict):
    available_drivers: list[str]
    sessions: list[SessionSummary]
    queue_length: int
    running: int
    completed: int
    failed: int


def create_store(config: StoreConfig) -> BackingStore:
    """Create the backing store described by the configuration."""
    if config.type == "memory":
        return MemoryStore()

    return SparqlStore(
        endpoint=config.endpoint,
        update_endpoint=config.update_endpoint,
        user=os.getenv("SPARQL_USER"),
        password=os.getenv("SPARQL_PASSWORD"),
        timeout=config.timeout,
    )


def create_instance_source(
    config: InstancesConfig, store: BackingStore, instances_graph_uri: str
) -> InstanceSource:
    """Create the instance source described by the configuration."""
    if config.source == "yaml":
        if not config.path:
            raise DataManagerError("instances.path is required for the 'yaml' source")
        return YamlInstanceSource(config.path)
    if config.source == "sparql":
        return SparqlInstanceSource(store, instances_graph_uri)
    return StaticInstanceSource.from_config(config.items)


class DataManager:
    """Process-wide data manager.

    Created once at startup; owns the single submission queue shared by all
    driver sessions and exposes the operations used by the control layer.
    """

    def __init__(
        self,
        config: DataManagerConfig,
        store: BackingStore | None = None,
        catalogue: DriverCatalogue | None = None,
        source: InstanceSource | None = None,
    ):
        load_dotenv()

        self.config = config
        settings = config.data_manager
        self.store = store if store is not None else create_store(config.store)
        self.queue = SubmissionQueue(self.store, concurrency=settings.concurrency)
        self.source = (
            source
            if source is not None
            else create_instance_source(
                config.instances, self.store, settings.instances_graph_uri
            )
        )
        self.registry = InstanceRegistry(
            self.source,
            self.queue,
            catalogue=catalogue,
            fragment_length=settings.fragment_length,
            graph_template=settings.graph_template or None,
        )
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.logger.info(
            f"Initialized data manager (store: {config.store.type}, "
            f"concurrency: {settings.concurrency}, "
            f"fragment length: {settings.fragment_length})"
        )

    def reload(self, force: bool = False) -> None:
        self.registry.reload(force)

    def session(self, session_id: str) -> DriverSession:
        self.registry.reload()
        return self.registry.get(session_id)

    def fetch(self, session_id: str) -> None:
        """Trigger a fetch for one instance."""
        self.session(session_id).fetch()

    def fetch_all(self) -> list[str]:
        """Trigger a fetch for every enabled instance.

        Returns:
            Ids of the sessions that were fetched
        """
        self.registry.reload()
        fetched: list[str] = []
        for session in self.registry.sessions():
            if not session.enabled:
                continue
            try:
                session.fetch()
                fetched.append(session.id)
            except DataManagerError as e:
                self.logger.error(f"Error fetching {session.id}: {e}")
        return fetched

    def clear(self, session_id: str) -> int:
        """Clear the graph of one instance."""
        return self.session(session_id).clear()

    def logs(self, session_id: str) -> list[LogEntry]:
        return self.session(session_id).logs

    def pending_length(self) -> int:
        return self.queue.pending_length()

    def wait_idle(self, timeout: float | None = None, poll: float = 0.05) -> bool:
        """Wait until the queue is drained and every fetched session is idle.

        Returns:
            False if the timeout expired first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0)
            if not self.queue.wait(remaining):
                return False
            if not any(s.draining for s in self.registry.sessions()):
                return True
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll)

    def summary(self) -> ManagerSummary:
        sessions: list[SessionSummary] = []
        for session in self.registry.sessions():
            last_log = session.last_log
            sessions.append(
                {
                    "id": session.id,
                    "driver": session.record.driver_name if session.record else None,
                    "state": session.state.value,
                    "graph_uri": session.graph_uri,
                    "query_count": session.query_count,
                    "pending": session.pending_submission_count,
                    "last_log": last_log.message if last_log else None,
                }
            )

        return {
            "available_drivers": self.registry.available_drivers,
            "sessions": sessions,
            "queue_length": self.queue.pending_length(),
            "running": self.queue.running(),
            "completed": self.queue.completed_count,
            "failed": self.queue.failed_count,
        }

    def shutdown(self, wait: bool = True) -> None:
        self.queue.shutdown(wait=wait)
