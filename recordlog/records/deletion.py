"""Remove published logs from storage and from the bus."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from recordlog.errors import NotFoundError, StorageError

from .registry import PublishedLogEntry

if TYPE_CHECKING:
    from .manager import RecordManager

logger = logging.getLogger(__name__)


class DeletionHandler:
    """Delete one log or every log, keeping storage and registry in step."""

    def __init__(self, manager: "RecordManager") -> None:
        self._manager = manager

    def delete_one(self, entry: PublishedLogEntry) -> None:
        """Delete ``entry``'s record, then unpublish it."""

        manager = self._manager
        log_id = entry.log_id
        if not manager.registry.is_current(entry):
            raise NotFoundError(log_id, f"Event log {log_id} is no longer published")

        try:
            existed = manager.store.delete(log_id)
        except StorageError as exc:
            logger.error("delete %d: %s", log_id, exc)
            raise

        if not existed:
            logger.warning("delete %d: record already missing from storage; unpublishing", log_id)

        manager.cache.invalidate(log_id)
        manager.publisher.unpublish(entry)

    def delete_all(self) -> int:
        """Delete every log published when the call started; return the count."""

        registry = self._manager.registry
        deleted = 0
        failed: List[int] = []

        for log_id in registry.log_ids():
            entry = registry.get(log_id)
            if entry is None:
                continue
            try:
                self.delete_one(entry)
            except StorageError:
                failed.append(log_id)
                continue
            deleted += 1

        logger.info("Cleared %d event log(s)", deleted)
        if failed:
            raise StorageError(f"Failed to delete event log(s): {', '.join(map(str, failed))}")
        return deleted
