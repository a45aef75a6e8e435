"""Catalogue of available driver kinds."""

from importlib.metadata import entry_points
import logging

from ..config.models import DriverDetails
from .base import Driver
from .file import FileDriver
from .http import HttpDriver

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "benangmerah_dm.drivers"

BUILTIN_DRIVERS: dict[str, type[Driver]] = {
    "file": FileDriver,
    "http": HttpDriver,
}


def _summary(driver_class: type) -> str:
    doc = driver_class.__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


class DriverCatalogue:
    """Maps driver names to driver classes and their details.

    Built-in drivers are always present; third-party packages add drivers
    through the ``benangmerah_dm.drivers`` entry point group.
    """

    def __init__(
        self,
        drivers: dict[str, type[Driver]] | None = None,
        discover: bool = True,
    ):
        self._extra = dict(drivers or {})
        self.discover = discover
        self._drivers: dict[str, type[Driver]] = {}
        self._details: dict[str, DriverDetails] = {}
        self.refresh()

    def refresh(self) -> None:
        """Rebuild the catalogue from built-ins, extras and entry points."""
        drivers: dict[str, type[Driver]] = {}
        details: dict[str, DriverDetails] = {}

        for name, driver_class in BUILTIN_DRIVERS.items():
            drivers[name] = driver_class
            details[name] = DriverDetails(name=name, summary=_summary(driver_class))

        if self.discover:
            for entry_point in entry_points(group=ENTRY_POINT_GROUP):
                try:
                    driver_class = entry_point.load()
                except Exception as e:
                    logger.error(f"Failed to load driver {entry_point.name}: {e}")
                    continue

                dist = entry_point.dist
                drivers[entry_point.name] = driver_class
                details[entry_point.name] = DriverDetails(
                    name=entry_point.name,
                    summary=_summary(driver_class),
                    version=dist.version if dist else None,
                    origin=dist.name if dist else entry_point.value,
                )

        for name, driver_class in self._extra.items():
            drivers[name] = driver_class
            details[name] = DriverDetails(
                name=name, summary=_summary(driver_class), origin="registered"
            )

        self._drivers = drivers
        self._details = details
        logger.debug(f"Driver catalogue: {', '.join(sorted(drivers))}")

    def register(self, name: str, driver_class: type[Driver]) -> None:
        self._extra[name] = driver_class
        self._drivers[name] = driver_class
        self._details[name] = DriverDetails(
            name=name, summary=_summary(driver_class), origin="registered"
        )

    def get(self, name: str) -> type[Driver] | None:
        return self._drivers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._drivers

    @property
    def names(self) -> list[str]:
        return sorted(self._drivers)

    @property
    def details(self) -> dict[str, DriverDetails]:
        return dict(self._details)
