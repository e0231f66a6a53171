"""
Storage collaborator for event records.

Modules
=======

``files``
    Defines :class:`~recordlog.storage.files.FileEventStore`, the directory
    backed store used by the daemon: one gzipped JSON document per log.

The record layer only depends on the :class:`EventStore` protocol below, so
tests and alternative backends can stand in for the file store.
"""

from __future__ import annotations

from typing import List, Protocol

from recordlog.models import EventRecord

from .files import FileEventStore


class EventStore(Protocol):
    def create(self, draft: EventRecord) -> int: ...

    def load(self, log_id: int) -> EventRecord | None: ...

    def free(self, record: EventRecord) -> None: ...

    def delete(self, log_id: int) -> bool: ...

    def list_ids(self) -> List[int]: ...


__all__ = ["EventStore", "FileEventStore"]
