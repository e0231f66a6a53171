"""Daemon bootstrap: connect, publish, and run the request loop."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import signal
from pathlib import Path

from dbus_fast import BusType, RequestNameReply
from dbus_fast.errors import AuthError, DBusError

from recordlog.bus.interfaces import RecordLogInterface
from recordlog.bus.transport import BusTransport, RecordBus
from recordlog.config import core, storage
from recordlog.errors import TransportFatal
from recordlog.loop import RequestLoop
from recordlog.records import RecordManager
from recordlog.storage import FileEventStore

logger = logging.getLogger(__name__)


def attach_syslog(address: str) -> logging.Handler | None:
    """Route the ``recordlog.events`` summary lines to the system log."""

    if not address or not Path(address).exists():
        logger.info("System log socket %r unavailable; event summaries stay local", address)
        return None
    try:
        handler = logging.handlers.SysLogHandler(address=address)
    except OSError as exc:
        logger.warning("Failed to open system log at %s: %s", address, exc)
        return None
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("recordlog: %(message)s"))
    logging.getLogger("recordlog.events").addHandler(handler)
    return handler


async def _connect(bus_type: BusType) -> RecordBus:
    try:
        return await RecordBus(bus_type=bus_type, managed_root=core.ROOT_PATH).connect()
    except (OSError, AuthError, DBusError) as exc:
        raise TransportFatal(f"Failed to connect to {bus_type.name.lower()} bus: {exc}") from exc


async def _request_name(bus: RecordBus, name: str) -> None:
    try:
        reply = await bus.request_name(name)
    except DBusError as exc:
        logger.error("Failed to acquire service name %s: %s", name, exc)
        return
    if reply not in (RequestNameReply.PRIMARY_OWNER, RequestNameReply.ALREADY_OWNER):
        logger.warning("Service name %s not owned (%s)", name, reply.name)


async def serve(bus_type: BusType | None = None, log_dir: str | None = None) -> None:
    """Run the daemon until stopped or the bus connection fails."""

    if bus_type is None:
        bus_type = BusType.SESSION if core.BUS_TYPE == "session" else BusType.SYSTEM

    store = FileEventStore(log_dir or storage.LOG_DIR)
    bus = await _connect(bus_type)
    transport = BusTransport(bus, core.ROOT_PATH)
    transport.start()

    manager = RecordManager(store, transport, core.ROOT_PATH)
    request_loop = RequestLoop(transport, core.idle_timeout)
    loop = asyncio.get_running_loop()

    try:
        try:
            transport.register(manager.root_path, RecordLogInterface(manager))
        except ValueError as exc:
            raise TransportFatal(f"Failed to install {manager.root_path}: {exc}") from exc
        await _request_name(bus, core.BUS_NAME)

        manager.restore()
        logger.info(
            "Serving %d event log(s) (%d bytes) at %s",
            len(manager.registry),
            store.managed_size,
            manager.root_path,
        )

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, request_loop.stop)
        try:
            await request_loop.run()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
    finally:
        manager.cache.clear()
        transport.close()


def run(bus_type: BusType | None = None, log_dir: str | None = None) -> int:
    """Start the daemon; return the process exit status."""

    attach_syslog(core.SYSLOG_ADDRESS)
    try:
        asyncio.run(serve(bus_type, log_dir))
    except TransportFatal as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("Event store unavailable: %s", exc)
        return 1
    return 0
