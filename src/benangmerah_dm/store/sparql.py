"""SPARQL 1.1 protocol store (Virtuoso, Fuseki, ...) over HTTP."""

from typing import Any

import requests

from ..errors import SubmissionError
from .base import BackingStore

_NUMERIC_DATATYPES = {
    "http://www.w3.org/2001/XMLSchema#integer",
    "http://www.w3.org/2001/XMLSchema#decimal",
}
_BOOLEAN_DATATYPE = "http://www.w3.org/2001/XMLSchema#boolean"


def binding_to_python(binding: dict[str, Any]) -> Any:
    """Convert a SPARQL JSON result binding into a Python value."""
    value = binding.get("value")
    datatype = binding.get("datatype")
    if value is None:
        return None
    if datatype == _BOOLEAN_DATATYPE:
        return value.strip().lower() in {"true", "1"}
    if datatype in _NUMERIC_DATATYPES:
        try:
            if datatype.endswith("integer"):
                return int(value)
            return float(value)
        except (TypeError, ValueError):
            return value
    return value


class SparqlStore(BackingStore):
    """Store speaking the SPARQL 1.1 query and update protocols."""

    def __init__(
        self,
        endpoint: str,
        update_endpoint: str | None = None,
        user: str | None = None,
        password: str | None = None,
        timeout: int = 300,
    ):
        """Initialize the store.

        Args:
            endpoint: SPARQL query endpoint URL
            update_endpoint: SPARQL update endpoint URL, defaults to ``endpoint``
            user: Optional user for HTTP basic/digest authentication
            password: Optional password
            timeout: Request timeout in seconds
        """
        super().__init__()
        self.endpoint = endpoint
        self.update_endpoint = update_endpoint or endpoint
        self.timeout = timeout
        self.auth = (user, password) if user and password else None

    def update(self, query: str) -> None:
        try:
            response = requests.post(
                self.update_endpoint,
                data={"update": query},
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise SubmissionError(
                f"SPARQL update timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.RequestException as e:
            raise SubmissionError(f"SPARQL update request failed: {e}") from e

        if response.status_code >= 300:
            raise SubmissionError(
                f"HTTP request failed: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
            )
        self.logger.debug(f"SPARQL update accepted ({len(query)} chars)")

    def select(self, query: str) -> list[dict[str, Any]]:
        response = requests.post(
            self.endpoint,
            data={"query": query},
            headers={"Accept": "application/sparql-results+json"},
            auth=self.auth,
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()

        results: list[dict[str, Any]] = []
        for row in payload.get("results", {}).get("bindings", []):
            results.append(
                {name: binding_to_python(binding) for name, binding in row.items()}
            )
        return results
