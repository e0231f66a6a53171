"""Error types raised by the record publication layer."""

from __future__ import annotations


class RecordLogError(RuntimeError):
    """Base class for every error the daemon reports to a bus caller."""

    pass


class DecodeError(RecordLogError):
    """Raised when an inbound payload does not carry the expected types."""

    pass


class NotFoundError(RecordLogError):
    """Raised when no persisted record backs the requested log id."""

    def __init__(self, log_id: int, message: str | None = None) -> None:
        super().__init__(message or f"Could not find event log {log_id}")
        self.log_id = log_id


class PublishError(RecordLogError):
    """Raised when a log could not be made visible on the bus."""

    def __init__(self, log_id: int, message: str) -> None:
        super().__init__(message)
        self.log_id = log_id


class StorageError(RecordLogError):
    """Raised when the storage collaborator fails to write or remove a log."""

    pass


class TransportFatal(RecordLogError):
    """Raised when the bus connection itself is gone."""

    pass


__all__ = [
    "RecordLogError",
    "DecodeError",
    "NotFoundError",
    "PublishError",
    "StorageError",
    "TransportFatal",
]
