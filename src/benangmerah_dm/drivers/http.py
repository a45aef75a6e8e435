"""Driver downloading RDF from an HTTP(S) URL."""

from typing import Any
from urllib.parse import urlparse

from rdflib import Graph, plugin
from rdflib.parser import Parser
from rdflib.util import guess_format
import requests

from .base import Driver


def parser_format(url: str, content_type: str | None) -> str | None:
    """Pick an rdflib parser for a response.

    The Content-Type is used when rdflib has a parser registered for it;
    otherwise the format is guessed from the URL's file extension.
    """
    mime = (content_type or "").split(";")[0].strip()
    if mime:
        try:
            plugin.get(mime, Parser)
            return mime
        except plugin.PluginException:
            pass
    return guess_format(urlparse(url).path)


class HttpDriver(Driver):
    """Driver that downloads an RDF document from a configured URL.

    Options:
        url: Document URL (required)
        format: rdflib parser name; taken from the Content-Type or the URL
            when omitted
        timeout: Request timeout in seconds (default 30)
    """

    def set_options(self, options: dict[str, Any] | None) -> None:
        super().set_options(options)
        if not self.options.get("url"):
            raise ValueError("HttpDriver requires 'url' in options")

    def fetch(self) -> None:
        url = self.options["url"]
        timeout = max(int(self.options.get("timeout", 30)), 1)

        self.emit_log("info", f"Downloading data from {url}")
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        rdf_format = self.options.get("format") or parser_format(
            url, response.headers.get("Content-Type")
        )

        graph = Graph()
        graph.parse(data=response.text, format=rdf_format, publicID=url)

        count = self.emit_graph(graph)
        self.emit_log("info", f"Fetched {count} triples from {url}")
        self.emit_finished()
