"""Driver contract for data sources feeding triples into a session."""

from abc import ABC, abstractmethod
import logging
from typing import Any, Protocol

from rdflib import Graph
from rdflib.term import Node

from ..fragments.writer import format_statement


class DriverListener(Protocol):
    """Receiver of a driver's events."""

    def on_triple(self, statement: str) -> None: ...

    def on_log(self, level: str, message: str) -> None: ...

    def on_finished(self) -> None: ...


class Driver(ABC):
    """Abstract base class for drivers.

    A driver is configured with ``set_options`` and, when ``fetch`` is
    called, emits its data as N-Triples statements to every subscribed
    listener, followed by exactly one ``finished`` event.
    """

    def __init__(self) -> None:
        self.options: dict[str, Any] = {}
        self._listeners: list[DriverListener] = []
        self.logger = logging.getLogger(f"driver.{self.__class__.__name__}")

    def set_options(self, options: dict[str, Any] | None) -> None:
        """Apply instance options.

        Raises:
            Exception: If the options are not usable by this driver
        """
        self.options = dict(options or {})

    @abstractmethod
    def fetch(self) -> None:
        """Fetch the source's data and emit it to the listeners."""
        pass

    def subscribe(self, listener: DriverListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DriverListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit_triple(self, subject: Node, predicate: Node, obj: Node) -> None:
        self.emit_statement(format_statement(subject, predicate, obj))

    def emit_statement(self, statement: str) -> None:
        for listener in list(self._listeners):
            listener.on_triple(statement)

    def emit_graph(self, graph: Graph) -> int:
        """Emit every triple of an rdflib graph, returning how many were sent."""
        count = 0
        for subject, predicate, obj in graph:
            self.emit_triple(subject, predicate, obj)
            count += 1
        return count

    def emit_log(self, level: str, message: str) -> None:
        for listener in list(self._listeners):
            listener.on_log(level, message)

    def emit_finished(self) -> None:
        for listener in list(self._listeners):
            listener.on_finished()
