"""Driver sessions binding one driver instance to its fragment and submission state."""

import logging
import threading
from typing import Any

import yaml

from .config.models import (
    InstanceRecord,
    LogEntry,
    LogLevel,
    SessionState,
    SubmissionCommand,
    now_ms,
)
from .drivers.base import Driver
from .drivers.catalogue import DriverCatalogue
from .errors import (
    ConfigError,
    DriverFault,
    SessionUnavailableError,
    SubmissionError,
)
from .fragments.writer import DEFAULT_FRAGMENT_LENGTH, FragmentWriter
from .submission.queue import SubmissionQueue

logger = logging.getLogger(__name__)

_PYTHON_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FINISH: logging.INFO,
}


def parse_options(options_yaml: str | None) -> dict[str, Any]:
    """Parse an instance's options YAML blob.

    Raises:
        ConfigError: If the YAML is malformed or not a mapping
    """
    if not options_yaml or not options_yaml.strip():
        return {}

    try:
        options = yaml.safe_load(options_yaml)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid options YAML: {e}") from e

    if options is None:
        return {}
    if not isinstance(options, dict):
        raise ConfigError(
            f"Options YAML must be a mapping, got {type(options).__name__}"
        )
    return options


class DriverSession:
    """Runtime binding between one configured data source and its submissions.

    Sessions are created once per instance id and re-configured in place on
    registry reloads. Submission completions arrive on queue worker threads,
    so the pending counter, the finished flag and the log are guarded by a
    lock.
    """

    def __init__(
        self,
        session_id: str,
        queue: SubmissionQueue,
        fragment_length: int = DEFAULT_FRAGMENT_LENGTH,
        graph_uri: str | None = None,
    ):
        self.id = session_id
        self.queue = queue
        self.fragment_length = fragment_length
        self.graph_uri = graph_uri
        self.record: InstanceRecord | None = None
        self.options: dict[str, Any] = {}
        self.driver: Driver | None = None
        self.driver_name: str | None = None

        self._lock = threading.RLock()
        self._logs: list[LogEntry] = []
        self._state = SessionState.UNINITIALIZED
        self._finished = False
        self._fetching = False
        self._awaiting_idle = False
        self._pending = 0
        self._query_count = 0
        self.writer = self._new_writer()

    def _new_writer(self) -> FragmentWriter:
        return FragmentWriter(
            self.id, self.graph_uri, self._enqueue, self.fragment_length
        )

    # Logging

    def log(self, level: LogLevel | str, message: object) -> LogEntry:
        """Append an entry to the session log and mirror it to the logger."""
        try:
            level = LogLevel(level)
        except ValueError:
            level = LogLevel.INFO

        entry = LogEntry(level=level, message=str(message), timestamp=now_ms())
        with self._lock:
            self._logs.append(entry)
        logger.log(_PYTHON_LEVELS[level], f"{self.id}: {entry.message}")
        return entry

    @property
    def logs(self) -> list[LogEntry]:
        with self._lock:
            return list(self._logs)

    @property
    def last_log(self) -> LogEntry | None:
        with self._lock:
            return self._logs[-1] if self._logs else None

    # State

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._finished

    @property
    def pending_submission_count(self) -> int:
        with self._lock:
            return self._pending

    @property
    def query_count(self) -> int:
        with self._lock:
            return self._query_count

    @property
    def is_idle(self) -> bool:
        with self._lock:
            return self._state == SessionState.IDLE

    @property
    def draining(self) -> bool:
        """True from a fetch or clear until the session goes idle."""
        with self._lock:
            if self._pending > 0:
                return True
            return self._awaiting_idle and self._state != SessionState.DISABLED

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._state != SessionState.DISABLED and self.driver is not None

    def _disable(self, error: Exception | str) -> None:
        with self._lock:
            self._state = SessionState.DISABLED
        self.log(LogLevel.ERROR, error)

    # Setup

    def configure(self, record: InstanceRecord, catalogue: DriverCatalogue) -> None:
        """(Re-)initialize the session from an instance record.

        Configuration and driver errors disable the session and are logged;
        they are never raised to the caller.
        """
        with self._lock:
            self.record = record
            self._state = SessionState.INITIALIZING

        try:
            options = parse_options(record.options_yaml)
        except ConfigError as e:
            self._disable(e)
            return

        if not record.enabled:
            self._disable("Disabled.")
            return

        driver_class = catalogue.get(record.driver_name)
        if driver_class is None:
            self._disable(ConfigError("Driver does not exist."))
            return

        graph_uri = record.graph_uri or None
        if (
            self.driver is not None
            and type(self.driver) is driver_class
            and options == self.options
            and graph_uri == self.graph_uri
        ):
            with self._lock:
                if self._is_drained():
                    self._state = SessionState.IDLE
                    self._awaiting_idle = False
                else:
                    self._state = SessionState.ACTIVE
            return

        self.log(LogLevel.INFO, "Initialising...")
        try:
            driver = driver_class()
            driver.set_options(options)
        except Exception as e:
            self._disable(DriverFault(f"{record.driver_name}: {e}"))
            return

        if self.driver is not None:
            self.driver.unsubscribe(self)

        with self._lock:
            self.options = options
            self.driver_name = record.driver_name
            self.graph_uri = graph_uri
            self.driver = driver
            self._fetching = False
            self._awaiting_idle = False
            if self.writer.buffer.statement_count == 0:
                self.writer = self._new_writer()
            else:
                self.writer.graph_uri = graph_uri
            driver.subscribe(self)
            self._state = SessionState.ACTIVE

        self.log(LogLevel.FINISH, "Initialised.")

    # Driver events

    def on_triple(self, statement: str) -> None:
        self.writer.add_statement(statement)

    def on_log(self, level: str, message: str) -> None:
        self.log(level, message)

    def on_finished(self) -> None:
        with self._lock:
            self._fetching = False
            if self._state == SessionState.DISABLED:
                self._awaiting_idle = False
                return
            self._finished = True
            _, dropped = self.writer.end()
            if dropped:
                self.log(
                    LogLevel.ERROR,
                    f"Discarded {dropped} bytes of unterminated statement.",
                )
            self._state = SessionState.FINISHED
            self.log(LogLevel.INFO, "Finished fetching.")
            self._check_idle()

    # Operations

    def fetch(self) -> None:
        """Ask the bound driver to (re-)emit its data.

        Raises:
            SessionUnavailableError: If the session has no usable driver
        """
        with self._lock:
            if self._state == SessionState.DISABLED or self.driver is None:
                raise SessionUnavailableError(
                    f"Instance {self.id} has no active driver"
                )
            driver = self.driver
            self._finished = False
            self._fetching = True
            self._awaiting_idle = True
            self.writer.reset()
            self._state = SessionState.ACTIVE

        self.log(LogLevel.INFO, "Fetching...")
        try:
            driver.fetch()
        except Exception as e:
            self.log(LogLevel.ERROR, DriverFault(f"Fetch failed: {e}"))
            if not self.finished:
                self.on_finished()

    def clear(self) -> int:
        """Submit a CLEAR GRAPH for this session's graph.

        Returns:
            The id of the submitted command
        """
        if not self.graph_uri:
            raise SessionUnavailableError(f"Instance {self.id} has no graph to clear")

        command = SubmissionCommand.clear(self.id, self.graph_uri)
        with self._lock:
            if not self._fetching:
                self._finished = True
                if self._state != SessionState.DISABLED:
                    self._state = SessionState.FINISHED
                    self._awaiting_idle = True
            self._enqueue(command)
            self._check_idle()
        return command.command_id

    # Submission accounting

    def _enqueue(self, command: SubmissionCommand) -> None:
        with self._lock:
            self._query_count += 1
            self._pending += 1
            self.log(
                LogLevel.INFO,
                f"Queued SPARQL query #{command.command_id} (length={command.length})",
            )
            try:
                self.queue.submit(command, self._completion(command.command_id))
            except Exception as e:
                self._pending -= 1
                self.log(LogLevel.ERROR, SubmissionError(f"Could not queue query: {e}"))

    def _completion(self, command_id: int):
        def on_complete(error: SubmissionError | None) -> None:
            self._on_submission_complete(command_id, error)

        return on_complete

    def _on_submission_complete(
        self, command_id: int, error: SubmissionError | None
    ) -> None:
        with self._lock:
            self._pending -= 1
            if error is not None:
                self.log(LogLevel.ERROR, f"Query #{command_id} failed: {error}")
            else:
                self.log(LogLevel.INFO, f"Query #{command_id} completed.")
            self._check_idle()

    def _is_drained(self) -> bool:
        return self._finished and self._pending == 0

    def _check_idle(self) -> None:
        with self._lock:
            if self._state == SessionState.DISABLED or not self._is_drained():
                return
            if self._state == SessionState.IDLE:
                return
            self._state = SessionState.IDLE
            self._awaiting_idle = False
            self.log(LogLevel.INFO, f"{self._query_count} queries completed.")
            self.log(LogLevel.FINISH, "Idle.")

    def __repr__(self) -> str:
        return (
            f"DriverSession(id={self.id!r}, state={self._state.value}, "
            f"pending={self._pending}, queries={self._query_count})"
        )
