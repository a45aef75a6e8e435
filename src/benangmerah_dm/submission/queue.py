"""Process-wide submission queue.

One queue is created at startup by the data manager and shared by every
driver session; it is the only place that writes to the backing store.
Commands start in submission order on a pool of ``concurrency`` worker
threads. A failed command is reported to its completion callback and is
not retried.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
import logging
import threading
import time

from ..config.models import SubmissionCommand
from ..errors import SubmissionError
from ..store.base import BackingStore

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[SubmissionError | None], None]


class SubmissionQueue:
    """Bounded-concurrency worker pool executing commands against a store."""

    def __init__(self, store: BackingStore, concurrency: int = 1):
        """Initialize the queue.

        Args:
            store: Backing store receiving every command
            concurrency: Maximum number of commands executing at once
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.store = store
        self.concurrency = concurrency
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="submission"
        )
        self._cond = threading.Condition()
        self._tokens: dict[int, str] = {}
        self._queued = 0
        self._running = 0
        self.completed_count = 0
        self.failed_count = 0

    def submit(
        self, command: SubmissionCommand, on_complete: CompletionCallback
    ) -> int:
        """Enqueue a command; ``on_complete(error)`` runs once it is done.

        Returns:
            The command id, which stays in ``tokens()`` until completion
        """
        with self._cond:
            self._tokens[command.command_id] = command.session_id
            self._queued += 1

        try:
            self._executor.submit(self._execute, command, on_complete)
        except RuntimeError:
            with self._cond:
                self._tokens.pop(command.command_id, None)
                self._queued -= 1
                self._cond.notify_all()
            raise
        return command.command_id

    def _execute(
        self, command: SubmissionCommand, on_complete: CompletionCallback
    ) -> None:
        with self._cond:
            self._queued -= 1
            self._running += 1

        self.logger.debug(
            f"Executing command {command.command_id} for {command.session_id} "
            f"(length={command.length})"
        )
        start = time.monotonic()
        error: SubmissionError | None = None
        try:
            self.store.update(command.query)
        except SubmissionError as e:
            error = e
        except Exception as e:
            error = SubmissionError(str(e))
            error.__cause__ = e

        elapsed_ms = (time.monotonic() - start) * 1000
        if error is None:
            self.logger.debug(
                f"Command {command.command_id} completed in {elapsed_ms:.0f}ms"
            )
        else:
            self.logger.error(
                f"Command {command.command_id} for {command.session_id} failed: {error}"
            )

        try:
            on_complete(error)
        except Exception as e:
            self.logger.error(
                f"Completion callback for command {command.command_id} raised: {e}"
            )
        finally:
            with self._cond:
                self._tokens.pop(command.command_id, None)
                self._running -= 1
                if error is None:
                    self.completed_count += 1
                else:
                    self.failed_count += 1
                self._cond.notify_all()

    def pending_length(self) -> int:
        """Number of commands waiting for a free worker."""
        with self._cond:
            return self._queued

    def running(self) -> int:
        """Number of commands currently executing."""
        with self._cond:
            return self._running

    def outstanding(self) -> int:
        """Commands submitted but not yet completed."""
        with self._cond:
            return self._queued + self._running

    def tokens(self) -> dict[int, str]:
        """Snapshot of outstanding command ids mapped to their session ids."""
        with self._cond:
            return dict(self._tokens)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every submitted command has completed.

        Returns:
            False if the timeout expired first
        """
        with self._cond:
            return self._cond.wait_for(
                lambda: self._queued + self._running == 0, timeout=timeout
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting commands and optionally wait for the backlog."""
        self._executor.shutdown(wait=wait)
