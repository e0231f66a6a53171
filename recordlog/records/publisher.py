"""Bind published log entries to their bus interfaces."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import TYPE_CHECKING

from recordlog.bus.interfaces import DeleteInterface, RecordInterface
from recordlog.errors import NotFoundError, PublishError

from .registry import PublishedLogEntry

if TYPE_CHECKING:
    from .manager import RecordManager

logger = logging.getLogger(__name__)


class ObjectPublisher:
    """Make logs reachable at ``<root>/<log_id>`` and withdraw them again."""

    def __init__(self, manager: "RecordManager") -> None:
        self._manager = manager

    def publish(self, log_id: int) -> PublishedLogEntry:
        """Export both interfaces for ``log_id`` and track the new entry."""

        registry = self._manager.registry
        transport = self._manager.transport
        if log_id in registry:
            raise PublishError(log_id, f"Event log {log_id} is already published")

        path = self._manager.object_path(log_id)
        entry = PublishedLogEntry(log_id, path, self._manager)

        with ExitStack() as rollback:
            # The entry must be resolvable before InterfacesAdded is built from
            # its properties.
            registry.add(entry)
            rollback.callback(registry.remove, log_id)
            rollback.callback(entry.release)
            try:
                entry.record_registration = transport.register(path, RecordInterface(entry))
                entry.delete_registration = transport.register(path, DeleteInterface(entry))
            except Exception as exc:
                logger.error("Failed to publish event log %d at %s: %s", log_id, path, exc)
                raise PublishError(log_id, f"Failed to publish event log {log_id}: {exc}") from exc
            rollback.pop_all()

        transport.emit_object_added(path)
        return entry

    def unpublish(self, entry: PublishedLogEntry) -> None:
        """Withdraw ``entry`` from the bus and forget it."""

        registry = self._manager.registry
        if not registry.is_current(entry):
            raise NotFoundError(entry.log_id, f"Event log {entry.log_id} is not published")

        registry.remove(entry.log_id)
        entry.release()
        self._manager.transport.emit_object_removed(entry.path)
