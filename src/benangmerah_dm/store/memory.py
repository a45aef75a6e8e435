"""In-process store backed by an rdflib Dataset."""

import threading
from typing import Any

from rdflib import Dataset, URIRef

from ..errors import SubmissionError
from .base import BackingStore


class MemoryStore(BackingStore):
    """Executes SPARQL against an in-memory ``rdflib.Dataset``.

    Useful for dry runs and tests; data is lost when the process exits.
    """

    def __init__(self, dataset: Dataset | None = None):
        super().__init__()
        self.dataset = dataset if dataset is not None else Dataset()
        self._lock = threading.RLock()

    def update(self, query: str) -> None:
        with self._lock:
            try:
                self.dataset.update(query)
            except Exception as e:
                raise SubmissionError(f"Update failed: {e}") from e

    def select(self, query: str) -> list[dict[str, Any]]:
        with self._lock:
            result = self.dataset.query(query)
            rows: list[dict[str, Any]] = []
            for row in result:
                rows.append(
                    {
                        str(var): row[var].toPython() if row[var] is not None else None
                        for var in result.vars or []
                    }
                )
            return rows

    def graph_size(self, graph_uri: str | None = None) -> int:
        """Number of triples in a named graph, or in the whole dataset."""
        with self._lock:
            if graph_uri is None:
                return sum(1 for _ in self.dataset.quads((None, None, None, None)))
            return len(self.dataset.graph(URIRef(graph_uri)))
