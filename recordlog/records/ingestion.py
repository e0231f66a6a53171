"""
Turn inbound submissions into stored and published event logs.

Both entry points follow one pipeline: validate the payload, persist a draft
through the storage collaborator (which assigns id and timestamp), write a
summary line to the ``recordlog.events`` logger, and publish the new log when
an id was assigned. A zero id is returned to the caller when storage could not
allocate one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from recordlog.errors import DecodeError
from recordlog.models import EventRecord

if TYPE_CHECKING:
    from .manager import RecordManager

logger = logging.getLogger(__name__)
events_logger = logging.getLogger("recordlog.events")

HOST_ORIGIN = "Host"
TEST_ORIGIN = "Test"

# Ascii, null, signed-int boundary, and max byte values.
TEST_DEBUG_DATA = bytes([0x30, 0x00, 0x13, 0x7F, 0x88, 0xFF])
TEST_MESSAGE = "A Test event log just happened"
TEST_SEVERITY = "Info"
TEST_ASSOCIATION = (
    "/org/openbmc/inventory/system/chassis/motherboard/dimm3 "
    "/org/openbmc/inventory/system/chassis/motherboard/dimm2"
)


def _text(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise DecodeError(f"Failed to parse the {name} parameter: expected text, got {type(value).__name__}")
    return value


def _debug_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, (list, tuple)):
        try:
            return bytes(value)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Failed to parse the array of bytes parameter: {exc}") from exc
    raise DecodeError(
        f"Failed to parse the array of bytes parameter: expected bytes, got {type(value).__name__}"
    )


class IngestionHandler:
    """Accept host and test submissions."""

    def __init__(self, manager: "RecordManager") -> None:
        self._manager = manager

    def submit(self, message: Any, severity: Any, association: Any, debug_data: Any) -> int:
        """Store and publish a host-originated log; return its id (0 on failure)."""

        draft = EventRecord.draft(
            message=_text("message", message),
            severity=_text("severity", severity),
            association=_text("association", association),
            reported_by=HOST_ORIGIN,
            debug_data=_debug_bytes(debug_data),
        )
        return self._ingest(draft)

    def submit_test(self) -> int:
        """Store and publish the fixed liveness-check log."""

        draft = EventRecord.draft(
            message=TEST_MESSAGE,
            severity=TEST_SEVERITY,
            association=TEST_ASSOCIATION,
            reported_by=TEST_ORIGIN,
            debug_data=TEST_DEBUG_DATA,
        )
        return self._ingest(draft)

    def _ingest(self, draft: EventRecord) -> int:
        log_id = self._manager.store.create(draft)
        events_logger.info("%s", draft.summary())

        if not log_id:
            logger.error("Storage assigned no id for %s event log %r", draft.reported_by, draft.message)
            return 0

        self._manager.publisher.publish(log_id)
        return log_id
