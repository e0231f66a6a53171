"""
Registry of published log objects.

:class:`PublishedLogEntry` is the per-log resource record: the object path
plus the two bus registrations that make the log visible. The entry owns its
registrations and releases them together. :class:`Registry` keeps entries in
insertion order keyed by log id; iteration always walks a snapshot so callers
may remove entries while they iterate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List

if TYPE_CHECKING:
    from recordlog.bus.transport import Registration
    from .manager import RecordManager


@dataclass(eq=False)
class PublishedLogEntry:
    """Bus-visible handle for one live event log."""

    log_id: int
    path: str
    manager: "RecordManager" = field(repr=False)
    record_registration: "Registration | None" = field(default=None, repr=False)
    delete_registration: "Registration | None" = field(default=None, repr=False)

    def read(self, name: str) -> str | bytes:
        """Resolve attribute ``name`` through the owning manager."""

        return self.manager.read_attribute(self.log_id, name)

    def release(self) -> None:
        """Release both registrations; safe to call more than once."""

        registrations = (self.record_registration, self.delete_registration)
        self.record_registration = self.delete_registration = None
        for registration in registrations:
            if registration is not None:
                registration.release()


class Registry:
    """Insertion-ordered collection of :class:`PublishedLogEntry`."""

    def __init__(self) -> None:
        self._entries: Dict[int, PublishedLogEntry] = {}

    def add(self, entry: PublishedLogEntry) -> None:
        if entry.log_id in self._entries:
            raise KeyError(f"Event log {entry.log_id} is already published")
        self._entries[entry.log_id] = entry

    def get(self, log_id: int) -> PublishedLogEntry | None:
        return self._entries.get(log_id)

    def remove(self, log_id: int) -> PublishedLogEntry:
        try:
            return self._entries.pop(log_id)
        except KeyError as exc:
            raise KeyError(f"Event log {log_id} is not published") from exc

    def is_current(self, entry: PublishedLogEntry) -> bool:
        """``True`` when ``entry`` is the live entry for its log id."""

        return self._entries.get(entry.log_id) is entry

    def log_ids(self) -> List[int]:
        """Snapshot of published ids in insertion order."""

        return list(self._entries)

    def __contains__(self, log_id: object) -> bool:
        return log_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PublishedLogEntry]:
        return iter(list(self._entries.values()))
