"""
D-Bus interfaces exported by the daemon.

``RecordLogInterface`` sits on the records root and accepts new logs.
``RecordInterface`` and ``DeleteInterface`` are exported once per published
log. Methods queue their work on the transport so the request loop runs them
one at a time; property getters resolve on the event-loop thread directly.

Signatures are declared as annotation strings, which ``dbus-fast`` parses, so
this module does not use postponed annotations.
"""

import logging
from typing import Any, Callable, Dict

from dbus_fast import DBusError, Variant
from dbus_fast.constants import ErrorType, PropertyAccess
from dbus_fast.service import ServiceInterface, dbus_property, method

from recordlog.config import core
from recordlog.errors import DecodeError, NotFoundError, RecordLogError

logger = logging.getLogger(__name__)

RECORD_PROPERTIES = ("association", "message", "severity", "reported_by", "time", "debug_data")


def to_dbus_error(exc: Exception) -> DBusError:
    """Translate a daemon error into the reply a bus caller receives."""

    if isinstance(exc, DBusError):
        return exc
    if isinstance(exc, DecodeError):
        return DBusError(ErrorType.INVALID_ARGS, str(exc))
    if isinstance(exc, NotFoundError):
        return DBusError(ErrorType.FILE_NOT_FOUND, "Could not find log file")
    return DBusError(ErrorType.FAILED, str(exc) or exc.__class__.__name__)


async def _run(manager, handler: Callable[[], Any], description: str) -> Any:
    try:
        return await manager.transport.dispatch(handler, description)
    except RecordLogError as exc:
        logger.warning("%s failed: %s", description, exc)
        raise to_dbus_error(exc) from exc


class RecordLogInterface(ServiceInterface):
    """Root object: submit new logs or clear every log."""

    def __init__(self, manager) -> None:
        super().__init__(core.RECORDLOG_INTERFACE)
        self._manager = manager

    @method(name="acceptHostMessage")
    async def accept_host_message(self, message: "s", severity: "s", association: "s", debug_data: "ay") -> "q":
        ingestion = self._manager.ingestion
        return await _run(
            self._manager,
            lambda: ingestion.submit(message, severity, association, debug_data),
            "acceptHostMessage",
        )

    @method(name="acceptTestMessage")
    async def accept_test_message(self) -> "q":
        return await _run(self._manager, self._manager.ingestion.submit_test, "acceptTestMessage")

    @method(name="clear")
    async def clear(self) -> "q":
        await _run(self._manager, self._manager.deletion.delete_all, "clear")
        return 0


class RecordInterface(ServiceInterface):
    """Read-only attributes of one event log."""

    def __init__(self, entry) -> None:
        super().__init__(core.RECORD_INTERFACE)
        self._entry = entry

    def _read(self, name: str) -> Any:
        try:
            return self._entry.read(name)
        except RecordLogError as exc:
            logger.warning("Reading %s of event log %d failed: %s", name, self._entry.log_id, exc)
            raise to_dbus_error(exc) from exc

    def property_values(self) -> Dict[str, Variant]:
        """Every attribute as a ``Variant``, for the object-added signal."""

        try:
            return {
                name: Variant("ay" if name == "debug_data" else "s", self._entry.read(name))
                for name in RECORD_PROPERTIES
            }
        except RecordLogError as exc:
            logger.warning("Event log %d announced without attributes: %s", self._entry.log_id, exc)
            return {}

    @dbus_property(access=PropertyAccess.READ)
    def association(self) -> "s":
        return self._read("association")

    @dbus_property(access=PropertyAccess.READ)
    def message(self) -> "s":
        return self._read("message")

    @dbus_property(access=PropertyAccess.READ)
    def severity(self) -> "s":
        return self._read("severity")

    @dbus_property(access=PropertyAccess.READ)
    def reported_by(self) -> "s":
        return self._read("reported_by")

    @dbus_property(access=PropertyAccess.READ)
    def time(self) -> "s":
        return self._read("time")

    @dbus_property(access=PropertyAccess.READ)
    def debug_data(self) -> "ay":
        return self._read("debug_data")


class DeleteInterface(ServiceInterface):
    """Delete capability of one event log."""

    def __init__(self, entry) -> None:
        super().__init__(core.DELETE_INTERFACE)
        self._entry = entry

    def property_values(self) -> Dict[str, Variant]:
        return {}

    @method(name="delete")
    async def delete(self) -> "q":
        entry = self._entry
        deletion = entry.manager.deletion
        await _run(entry.manager, lambda: deletion.delete_one(entry), f"delete {entry.log_id}")
        return 0


__all__ = ["RecordLogInterface", "RecordInterface", "DeleteInterface", "to_dbus_error"]
