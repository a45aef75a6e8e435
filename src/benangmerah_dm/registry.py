"""Registry of driver sessions."""

import dataclasses
import logging

from .config.models import DriverDetails, InstanceRecord
from .drivers.catalogue import DriverCatalogue
from .errors import ReloadError, SessionNotFoundError
from .fragments.writer import DEFAULT_FRAGMENT_LENGTH
from .instances import InstanceSource
from .session import DriverSession
from .submission.queue import SubmissionQueue

logger = logging.getLogger(__name__)


class InstanceRegistry:
    """Holds every configured driver session and the driver catalogue.

    Sessions are keyed by instance id and live for the whole process: a
    reload re-configures existing sessions in place and keeps sessions whose
    records have disappeared.
    """

    def __init__(
        self,
        source: InstanceSource,
        queue: SubmissionQueue,
        catalogue: DriverCatalogue | None = None,
        fragment_length: int = DEFAULT_FRAGMENT_LENGTH,
        graph_template: str | None = "{ID}",
    ):
        self.source = source
        self.queue = queue
        self.catalogue = catalogue if catalogue is not None else DriverCatalogue()
        self.fragment_length = fragment_length
        self.graph_template = graph_template
        self.initialized = False
        self._sessions: dict[str, DriverSession] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def graph_uri_for(self, record: InstanceRecord) -> str | None:
        """Graph that an instance's triples are inserted into."""
        if record.graph_uri:
            return record.graph_uri
        if not self.graph_template:
            return None
        return self.graph_template.replace("{ID}", record.id)

    def reload(self, force: bool = False) -> None:
        """Re-derive sessions from the instance source.

        Args:
            force: Reload even if the registry was already initialized

        Raises:
            ReloadError: If the instance source could not be read
        """
        if self.initialized and not force:
            return

        self.catalogue.refresh()

        try:
            records = self.source.load()
        except ReloadError:
            raise
        except Exception as e:
            raise ReloadError(f"Failed to load instances: {e}") from e

        for record in records:
            record = dataclasses.replace(record, graph_uri=self.graph_uri_for(record))
            session = self._sessions.get(record.id)
            if session is None:
                session = DriverSession(
                    record.id,
                    self.queue,
                    fragment_length=self.fragment_length,
                    graph_uri=record.graph_uri,
                )
                self._sessions[record.id] = session
            session.configure(record, self.catalogue)

        self.initialized = True
        enabled = sum(1 for s in self._sessions.values() if s.enabled)
        self.logger.info(
            f"Loaded {len(records)} instances ({enabled} enabled, "
            f"{len(self._sessions)} sessions)"
        )

    def sessions(self) -> list[DriverSession]:
        return list(self._sessions.values())

    def get(self, session_id: str) -> DriverSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Instance not found: {session_id}") from None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def available_drivers(self) -> list[str]:
        return self.catalogue.names

    @property
    def driver_details(self) -> dict[str, DriverDetails]:
        return self.catalogue.details
