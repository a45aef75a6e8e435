"""Driver reading RDF from a local file."""

from pathlib import Path
from typing import Any

from rdflib import Graph

from .base import Driver


class FileDriver(Driver):
    """Emits the triples of a local RDF file.

    Options:
        path: File to read (required)
        format: rdflib parser name; guessed from the extension when omitted
    """

    def set_options(self, options: dict[str, Any] | None) -> None:
        super().set_options(options)
        if not self.options.get("path"):
            raise ValueError("FileDriver requires 'path' in options")

    def fetch(self) -> None:
        path = Path(self.options["path"])
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        self.emit_log("info", f"Reading file: {path}")
        graph = Graph()
        graph.parse(path, format=self.options.get("format"))

        count = self.emit_graph(graph)
        self.emit_log("info", f"Read {count} triples from {path}")
        self.emit_finished()
