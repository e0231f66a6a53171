"""
Event record data model.

An :class:`EventRecord` is the full content of one event log. Records are
immutable: the storage collaborator turns a draft (``log_id == 0``) into a
persisted record by assigning the id and creation timestamp.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, replace

MAX_LOG_ID = 0xFFFF
TIME_FORMAT = "%Y:%m:%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class EventRecord:
    """One event log as loaded from, or destined for, storage."""

    message: str
    severity: str
    association: str
    reported_by: str
    debug_data: bytes = b""
    timestamp: float = 0.0
    log_id: int = 0

    @classmethod
    def draft(
        cls,
        message: str,
        severity: str,
        association: str,
        reported_by: str,
        debug_data: bytes = b"",
    ) -> "EventRecord":
        """Build a transient record; id and timestamp are assigned on create."""

        return cls(
            message=message,
            severity=severity,
            association=association,
            reported_by=reported_by,
            debug_data=bytes(debug_data),
        )

    def assigned(self, log_id: int, timestamp: float) -> "EventRecord":
        """Return a copy of this draft carrying its storage identity."""

        if not 0 < log_id <= MAX_LOG_ID:
            raise ValueError(f"log id {log_id} outside 1..{MAX_LOG_ID}")
        return replace(self, log_id=log_id, timestamp=timestamp)

    def formatted_time(self) -> str:
        """Creation time as ``YYYY:MM:DD HH:MM:SS`` in the local time zone."""

        return datetime.datetime.fromtimestamp(self.timestamp).strftime(TIME_FORMAT)

    def summary(self) -> str:
        return f"{self.severity} {self.message} ({self.association})"


__all__ = ["EventRecord", "MAX_LOG_ID", "TIME_FORMAT"]
