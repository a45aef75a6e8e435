"""Utility modules for the data manager."""

from .logging import configure_external_loggers, setup_logging

__all__ = ["configure_external_loggers", "setup_logging"]
