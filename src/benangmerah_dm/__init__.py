"""
Benangmerah Data Manager

Streaming ingestion pipeline for a linked-data portal. Pluggable drivers emit
triples which are batched into size-bounded fragments, turned into SPARQL
INSERT DATA requests and submitted to the triple store through one shared,
concurrency-limited queue, with per-instance logs and idle detection.
"""

__version__ = "0.1.0"
__author__ = "Benangmerah"
