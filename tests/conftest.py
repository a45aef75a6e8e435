"""Shared test fixtures for the data manager tests."""

from collections.abc import Iterator
import threading
import time
from typing import Any

import pytest
from src.benangmerah_dm.drivers.base import Driver
from src.benangmerah_dm.drivers.catalogue import DriverCatalogue
from src.benangmerah_dm.errors import SubmissionError
from src.benangmerah_dm.store.base import BackingStore
from src.benangmerah_dm.submission.queue import SubmissionQueue


class RecordingStore(BackingStore):
    """Store that records updates and can fail or stall on demand."""

    def __init__(self, delay: float = 0.0):
        super().__init__()
        self.delay = delay
        self.queries: list[str] = []
        self.started: list[str] = []
        self.fail_on: set[int] = set()
        self.active = 0
        self.max_active = 0
        self.gate: threading.Event | None = None
        self._lock = threading.Lock()
        self._calls = 0

    def update(self, query: str) -> None:
        with self._lock:
            self._calls += 1
            call = self._calls
            self.started.append(query)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                self.gate.wait(timeout=5)
            if self.delay:
                time.sleep(self.delay)
            if call in self.fail_on:
                raise SubmissionError(f"store rejected call {call}", status_code=500)
            with self._lock:
                self.queries.append(query)
        finally:
            with self._lock:
                self.active -= 1

    def select(self, query: str) -> list[dict[str, Any]]:
        return []


class ListDriver(Driver):
    """Emits the statements given in its ``statements`` option."""

    def set_options(self, options: dict[str, Any] | None) -> None:
        super().set_options(options)
        if options and options.get("explode"):
            raise RuntimeError("bad options")

    def fetch(self) -> None:
        for statement in self.options.get("statements", []):
            self.emit_statement(statement)
        self.emit_log("info", "listed")
        if not self.options.get("hold"):
            self.emit_finished()


class ThreadedListDriver(ListDriver):
    """ListDriver that emits from its own thread after an optional ``delay``."""

    def fetch(self) -> None:
        delay = float(self.options.get("delay", 0))

        def run() -> None:
            time.sleep(delay)
            ListDriver.fetch(self)

        threading.Thread(target=run, daemon=True).start()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def queue(store: RecordingStore) -> Iterator[SubmissionQueue]:
    submission_queue = SubmissionQueue(store, concurrency=1)
    yield submission_queue
    submission_queue.shutdown(wait=True)


@pytest.fixture
def catalogue() -> DriverCatalogue:
    return DriverCatalogue(
        drivers={"list": ListDriver, "threaded": ThreadedListDriver}, discover=False
    )


@pytest.fixture
def make_statement():
    """Build marker-terminated statements of an exact byte width."""

    def _make(n: int, width: int = 10) -> str:
        body = f"<s{n}>"
        padding = width - len(body) - len(" .\n")
        return body + "x" * padding + " .\n"

    return _make
