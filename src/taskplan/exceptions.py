"""Custom exceptions for taskplan."""


class TaskplanError(Exception):
    """Base exception for all taskplan errors."""

    pass


class ConfigError(TaskplanError):
    """Raised when the configuration file is missing required data or invalid."""

    pass


class SourceUnavailableError(TaskplanError):
    """Raised when the task source cannot be read."""

    pass


class PersistenceError(TaskplanError):
    """Raised when a schedule snapshot cannot be read or written."""

    def __init__(self, message: str, path: object = None) -> None:
        super().__init__(message)
        self.path = path


class MalformedSnapshotError(PersistenceError):
    """Raised when a schedule snapshot is not valid JSON or has the wrong shape."""

    pass


class CircularDependencyError(TaskplanError):
    """Raised when a circular dependency is detected."""

    def __init__(self, message: str, cycles: list[list[str]] | None = None) -> None:
        super().__init__(message)
        self.cycles = cycles or []


class MonitorBusyError(TaskplanError):
    """Raised when a monitor cycle is started while another one is running."""

    pass
