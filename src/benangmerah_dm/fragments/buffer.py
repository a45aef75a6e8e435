"""Accumulates streamed triple text into complete statements."""

from ..config.models import STATEMENT_MARKER


class StatementBuffer:
    """Buffer that commits text to the current fragment at statement boundaries.

    Chunks are appended to a pending buffer. A chunk that is exactly the
    end-of-statement marker closes the pending statement, which is then
    moved into the fragment text. Nothing reaches the fragment before its
    marker arrives, so a statement is never split between fragments.
    """

    def __init__(self, marker: str = STATEMENT_MARKER):
        self.marker = marker
        self.pending = ""
        self._parts: list[str] = []
        self.size = 0
        self.statement_count = 0

    def append(self, chunk: str) -> bool:
        """Append a chunk; return True if it completed a statement."""
        self.pending += chunk
        if chunk != self.marker:
            return False

        statement = self.pending
        self.pending = ""
        self._parts.append(statement)
        self.size += len(statement.encode("utf-8"))
        self.statement_count += 1
        return True

    @property
    def text(self) -> str:
        """Committed fragment text."""
        return "".join(self._parts)

    def take(self) -> str:
        """Return the committed text and start a new, empty fragment."""
        text = self.text
        self._parts = []
        self.size = 0
        self.statement_count = 0
        return text

    def discard_pending(self) -> int:
        """Drop an unterminated statement, returning its byte length."""
        dropped = len(self.pending.encode("utf-8"))
        self.pending = ""
        return dropped
