"""Base classes for backing stores."""

from abc import ABC, abstractmethod
import logging
from typing import Any


class BackingStore(ABC):
    """Abstract base class for backing stores."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def update(self, query: str) -> None:
        """Execute a SPARQL Update request.

        Args:
            query: SPARQL Update text (e.g. an INSERT DATA statement)

        Raises:
            SubmissionError: If the store rejects the request
        """
        pass

    @abstractmethod
    def select(self, query: str) -> list[dict[str, Any]]:
        """Execute a SELECT query.

        Args:
            query: SPARQL SELECT query

        Returns:
            List of result rows mapping variable names to plain values
        """
        pass
