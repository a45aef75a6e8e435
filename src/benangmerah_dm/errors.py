"""Exception types raised by the data manager."""


class DataManagerError(Exception):
    """Base class for all data manager errors."""


class ConfigError(DataManagerError):
    """Raised for malformed instance options, unknown drivers or bad config files."""


class DriverFault(DataManagerError):
    """Raised when a driver fails during construction, option handling or fetch."""


class SubmissionError(DataManagerError):
    """Raised when the backing store rejects a command."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ReloadError(DataManagerError):
    """Raised when the instance source cannot be read."""


class SessionNotFoundError(DataManagerError, KeyError):
    """Raised when no session exists for an instance id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class SessionUnavailableError(DataManagerError):
    """Raised when a session has no valid driver bound to it."""
