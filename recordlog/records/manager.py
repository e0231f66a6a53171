"""Record manager owning the registry, cache slot and transport handle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recordlog.config import core
from recordlog.errors import NotFoundError, PublishError
from recordlog.models import EventRecord

from .cache import RecordCache
from .deletion import DeletionHandler
from .ingestion import IngestionHandler
from .publisher import ObjectPublisher
from .registry import Registry

if TYPE_CHECKING:
    from recordlog.bus.transport import Transport
    from recordlog.storage import EventStore

logger = logging.getLogger(__name__)

_TEXT_ATTRIBUTES = ("message", "severity", "association", "reported_by")


def attribute_value(record: EventRecord, name: str) -> str | bytes:
    """Map a published attribute name onto ``record``."""

    if name == "debug_data":
        return record.debug_data
    if name == "time":
        return record.formatted_time()
    if name in _TEXT_ATTRIBUTES:
        return getattr(record, name)
    # Unknown attribute names read as empty text rather than failing.
    return ""


class RecordManager:
    """Single owner of the daemon's mutable publication state."""

    def __init__(
        self,
        store: "EventStore",
        transport: "Transport",
        root_path: str | None = None,
    ) -> None:
        self.store = store
        self.transport = transport
        self.root_path = root_path or core.ROOT_PATH
        self.registry = Registry()
        self.cache = RecordCache(store)
        self.publisher = ObjectPublisher(self)
        self.ingestion = IngestionHandler(self)
        self.deletion = DeletionHandler(self)

    def object_path(self, log_id: int) -> str:
        return f"{self.root_path}/{log_id}"

    def read_attribute(self, log_id: int, name: str) -> str | bytes:
        """Resolve attribute ``name`` of the published log ``log_id``."""

        # Unpublished ids never reach the cache, so a miss cannot evict it.
        if log_id not in self.registry:
            raise NotFoundError(log_id)
        record = self.cache.resolve(log_id)
        return attribute_value(record, name)

    def restore(self) -> int:
        """Publish every log the store already holds; return how many."""

        restored = 0
        for log_id in self.store.list_ids():
            try:
                self.publisher.publish(log_id)
            except PublishError as exc:
                logger.error("Skipping event log %d at startup: %s", log_id, exc)
                continue
            restored += 1
        logger.info("Restored %d event log(s)", restored)
        return restored
