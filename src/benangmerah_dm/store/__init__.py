"""Backing triple stores that commands are submitted to."""

from .base import BackingStore
from .memory import MemoryStore
from .sparql import SparqlStore

__all__ = ["BackingStore", "MemoryStore", "SparqlStore"]
