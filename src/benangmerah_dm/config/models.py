"""Runtime data model for the data manager."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import itertools
import time
from typing import Literal

STATEMENT_MARKER = ".\n"

_command_ids = itertools.count(1)


def next_command_id() -> int:
    """Return a process-wide unique, increasing command id."""

    return next(_command_ids)


def now_ms() -> int:
    """Current time as epoch milliseconds."""

    return int(time.time() * 1000)


class LogLevel(str, Enum):
    """Severity of a session log entry.

    FINISH is reported as INFO to the Python logger but marks a session
    that has gone idle.
    """

    INFO = "info"
    ERROR = "error"
    FINISH = "finish"


class SessionState(str, Enum):
    """Lifecycle states of a driver session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    FINISHED = "finished"
    IDLE = "idle"
    DISABLED = "disabled"


@dataclass(frozen=True)
class LogEntry:
    """One line in a session's log."""

    level: LogLevel
    message: str
    timestamp: int


@dataclass(frozen=True)
class SubmissionCommand:
    """A single write operation against the backing store."""

    command_id: int
    session_id: str
    graph_uri: str | None
    statements: str = ""
    operation: Literal["insert", "clear"] = "insert"

    @classmethod
    def insert(
        cls, session_id: str, graph_uri: str | None, statements: str
    ) -> SubmissionCommand:
        return cls(next_command_id(), session_id, graph_uri or None, statements)

    @classmethod
    def clear(cls, session_id: str, graph_uri: str) -> SubmissionCommand:
        if not graph_uri:
            raise ValueError("Clearing requires a graph URI")
        return cls(next_command_id(), session_id, graph_uri, "", "clear")

    @property
    def query(self) -> str:
        """SPARQL Update text for this command."""

        if self.operation == "clear":
            return f"CLEAR GRAPH <{self.graph_uri}>"
        if self.graph_uri:
            return f"INSERT DATA {{ GRAPH <{self.graph_uri}> {{\n{self.statements}}} }}\n"
        return f"INSERT DATA {{\n{self.statements}}}\n"

    @property
    def length(self) -> int:
        return len(self.query.encode("utf-8"))


@dataclass(frozen=True)
class InstanceRecord:
    """Declarative configuration of one driver instance."""

    id: str
    driver_name: str
    enabled: bool = True
    options_yaml: str = ""
    label: str | None = None
    comment: str | None = None
    graph_uri: str | None = None


@dataclass(frozen=True)
class DriverDetails:
    """Catalogue entry describing an available driver kind."""

    name: str
    summary: str = ""
    version: str | None = None
    origin: str = "builtin"
