"""Drivers emitting triples from data sources."""

from .base import Driver, DriverListener
from .catalogue import DriverCatalogue
from .file import FileDriver
from .http import HttpDriver

__all__ = [
    "Driver",
    "DriverCatalogue",
    "DriverListener",
    "FileDriver",
    "HttpDriver",
]
