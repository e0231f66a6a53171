"""
Single-slot record cache.

Property reads for one log arrive in a burst (a client fetching every
attribute of an object), so holding the most recently resolved record avoids
reloading the same file for each attribute. At most one record is held; a
request for a different id releases it before loading the next one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recordlog.errors import NotFoundError
from recordlog.models import EventRecord

if TYPE_CHECKING:
    from recordlog.storage import EventStore

logger = logging.getLogger(__name__)


class RecordCache:
    """Memoize the most recently resolved :class:`EventRecord`."""

    def __init__(self, store: "EventStore") -> None:
        self._store = store
        self._record: EventRecord | None = None

    @property
    def cached_id(self) -> int | None:
        """Id of the held record, or ``None`` when the slot is empty."""

        return self._record.log_id if self._record is not None else None

    def resolve(self, log_id: int) -> EventRecord:
        """Return the record for ``log_id``, loading it on a miss."""

        if self._record is not None and self._record.log_id == log_id:
            return self._record

        self._release()
        record = self._store.load(log_id)
        if record is None:
            logger.warning("Missing event log for %d", log_id)
            raise NotFoundError(log_id)

        self._record = record
        return record

    def invalidate(self, log_id: int) -> None:
        """Drop the held record if it belongs to ``log_id``."""

        if self._record is not None and self._record.log_id == log_id:
            self._release()

    def clear(self) -> None:
        self._release()

    def _release(self) -> None:
        if self._record is None:
            return
        record, self._record = self._record, None
        self._store.free(record)
