"""Fragment writer turning buffered statements into bulk-insert commands."""

from collections.abc import Callable
import logging

from rdflib.term import Node

from ..config.models import STATEMENT_MARKER, SubmissionCommand
from .buffer import StatementBuffer

logger = logging.getLogger(__name__)

DEFAULT_FRAGMENT_LENGTH = 1048576


def format_statement(subject: Node, predicate: Node, obj: Node) -> str:
    """Render one triple of rdflib terms as an N-Triples statement."""
    return f"{subject.n3()} {predicate.n3()} {obj.n3()} {STATEMENT_MARKER}"


class FragmentWriter:
    """Flushes a session's statements in size-bounded fragments.

    Every time the committed fragment reaches ``fragment_length`` bytes a
    ``SubmissionCommand`` is built from it and handed to ``sink``. ``end()``
    forces a last flush when the stream is over.
    """

    def __init__(
        self,
        session_id: str,
        graph_uri: str | None,
        sink: Callable[[SubmissionCommand], None],
        fragment_length: int = DEFAULT_FRAGMENT_LENGTH,
    ):
        if fragment_length < 1:
            raise ValueError("fragment_length must be at least 1")

        self.session_id = session_id
        self.graph_uri = graph_uri
        self.sink = sink
        self.fragment_length = fragment_length
        self.buffer = StatementBuffer()
        self.finished = False
        self.fragment_count = 0

    def write(self, chunk: str) -> SubmissionCommand | None:
        """Append a chunk and flush the fragment once the threshold is crossed."""
        if self.buffer.append(chunk) and self.buffer.size >= self.fragment_length:
            return self.commit()
        return None

    def add_statement(self, statement: str) -> SubmissionCommand | None:
        """Write one statement as a body chunk followed by the marker chunk."""
        body = statement
        if body.endswith(STATEMENT_MARKER):
            body = body[: -len(STATEMENT_MARKER)]
        elif body.endswith("."):
            body = body[:-1]
        if not body.strip():
            return None

        self.write(body)
        return self.write(STATEMENT_MARKER)

    def commit(self) -> SubmissionCommand | None:
        """Build a command from the current fragment and pass it to the sink."""
        if self.buffer.statement_count == 0:
            return None

        command = SubmissionCommand.insert(
            self.session_id, self.graph_uri, self.buffer.take()
        )
        self.fragment_count += 1
        self.sink(command)
        return command

    def end(self) -> tuple[SubmissionCommand | None, int]:
        """Force the final flush.

        Returns:
            The command submitted (None when the fragment was empty) and the
            number of bytes of unterminated statement text that were dropped
        """
        self.finished = True
        dropped = self.buffer.discard_pending()
        if dropped:
            logger.warning(
                f"{self.session_id}: dropping {dropped} bytes of unterminated statement"
            )
        return self.commit(), dropped

    def reset(self) -> None:
        """Re-arm the writer for another fetch."""
        self.finished = False
