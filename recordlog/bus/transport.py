"""
Bus transport adapter.

:class:`BusTransport` owns the ``dbus-fast`` connection and turns it into the
drain/block pair the request loop pumps. Bus method handlers never mutate
daemon state themselves: they :meth:`~BusTransport.dispatch` a work item and
await its future, and the request loop runs queued items one at a time via
:meth:`~BusTransport.process`. Property reads are answered synchronously by
``dbus-fast`` on the same event-loop thread, so they never interleave with a
running work item.

Exported interfaces are tracked by :class:`Registration` handles. ``dbus-fast``
serves ``org.freedesktop.DBus.ObjectManager`` for every exported subtree, but
it announces each interface separately. :class:`RecordBus` keeps quiet for
objects below the records root, and :class:`BusTransport` sends a single
``InterfacesAdded``/``InterfacesRemoved`` per object instead, naming every
interface at that path.
"""

from __future__ import annotations

import asyncio
import collections
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Protocol

from dbus_fast import Message
from dbus_fast.aio import MessageBus
from dbus_fast.service import ServiceInterface

from recordlog.errors import TransportFatal

logger = logging.getLogger(__name__)

OBJECT_MANAGER_INTERFACE = "org.freedesktop.DBus.ObjectManager"


class RecordBus(MessageBus):
    """``MessageBus`` that leaves object notifications under ``managed_root`` to us."""

    def __init__(self, *args: Any, managed_root: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.managed_root = managed_root

    def _is_managed(self, path: str) -> bool:
        return self.managed_root is not None and path.startswith(self.managed_root + "/")

    def _emit_interface_added(self, path: str, *args: Any, **kwargs: Any) -> None:
        if self._is_managed(path):
            return
        super()._emit_interface_added(path, *args, **kwargs)

    def _emit_interface_removed(self, path: str, *args: Any, **kwargs: Any) -> None:
        if self._is_managed(path):
            return
        super()._emit_interface_removed(path, *args, **kwargs)


class Transport(Protocol):
    """Surface the record layer and request loop need from the bus."""

    def register(self, path: str, interface: ServiceInterface) -> "Registration": ...

    def emit_object_added(self, path: str) -> None: ...

    def emit_object_removed(self, path: str) -> None: ...

    def process(self) -> bool: ...

    async def wait(self, timeout: float | None) -> None: ...

    def wake(self) -> None: ...


class Registration:
    """Handle for one interface exported at one object path."""

    def __init__(self, transport: "BusTransport", path: str, interface: ServiceInterface) -> None:
        self.path = path
        self.interface = interface
        self._transport = transport
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._transport._unexport(self.path, self.interface)

    def __repr__(self) -> str:
        state = "released" if self._released else "active"
        return f"<Registration {self.interface.name} at {self.path} ({state})>"


@dataclass
class WorkItem:
    """One queued bus request."""

    handler: Callable[[], Any]
    future: asyncio.Future
    description: str = field(default="request")


class BusTransport:
    """Queue bus requests and expose them to the request loop."""

    def __init__(self, bus: MessageBus, root_path: str | None = None) -> None:
        self._bus = bus
        self._root_path = root_path
        self._exports: Dict[str, List[ServiceInterface]] = {}
        self._withdrawn: Dict[str, List[str]] = {}
        self._queue: Deque[WorkItem] = collections.deque()
        self._wakeup = asyncio.Event()
        self._monitor: asyncio.Future | None = None
        self._fatal: TransportFatal | None = None
        self._closing = False

    @property
    def bus(self) -> MessageBus:
        return self._bus

    @property
    def pending(self) -> int:
        return len(self._queue)

    def start(self) -> None:
        """Begin watching the connection; must run inside the event loop."""

        if self._monitor is not None:
            return
        self._monitor = asyncio.ensure_future(self._bus.wait_for_disconnect())
        self._monitor.add_done_callback(self._on_disconnect)

    # ------------------------------------------------------------------ #
    # Object registration
    # ------------------------------------------------------------------ #

    def register(self, path: str, interface: ServiceInterface) -> Registration:
        """Export ``interface`` at ``path`` and return its handle."""

        self._bus.export(path, interface)
        self._withdrawn.pop(path, None)
        self._exports.setdefault(path, []).append(interface)
        return Registration(self, path, interface)

    def _unexport(self, path: str, interface: ServiceInterface) -> None:
        exported = self._exports.get(path, [])
        if interface in exported:
            exported.remove(interface)
            if not exported:
                del self._exports[path]
            self._withdrawn.setdefault(path, []).append(interface.name)
        try:
            self._bus.unexport(path, interface)
        except Exception:
            logger.exception("Failed to unexport %s at %s", interface.name, path)

    def emit_object_added(self, path: str) -> None:
        """Announce every interface at ``path`` in one ``InterfacesAdded``."""

        interfaces = {}
        for interface in self._exports.get(path, []):
            values = getattr(interface, "property_values", None)
            interfaces[interface.name] = values() if values is not None else {}
        if not interfaces:
            logger.warning("Nothing exported at %s; InterfacesAdded not sent", path)
            return
        self._signal("InterfacesAdded", "oa{sa{sv}}", [path, interfaces])
        logger.info("Event Log added %s", path)

    def emit_object_removed(self, path: str) -> None:
        """Announce the interfaces withdrawn from ``path`` in one ``InterfacesRemoved``."""

        names = self._withdrawn.pop(path, [])
        if not names:
            logger.warning("Nothing withdrawn at %s; InterfacesRemoved not sent", path)
            return
        self._signal("InterfacesRemoved", "oas", [path, names])
        logger.info("Event Log removed %s", path)

    def _signal(self, member: str, signature: str, body: list) -> None:
        if not getattr(self._bus, "connected", True):
            return
        message = Message.new_signal(
            path=self._root_path or body[0],
            interface=OBJECT_MANAGER_INTERFACE,
            member=member,
            signature=signature,
            body=body,
        )
        sent = self._bus.send(message)
        if isinstance(sent, asyncio.Future):
            sent.add_done_callback(lambda f: self._on_sent(f, member, body[0]))

    @staticmethod
    def _on_sent(future: asyncio.Future, member: str, path: str) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Failed to send %s for %s: %s", member, path, exc)

    # ------------------------------------------------------------------ #
    # Work queue
    # ------------------------------------------------------------------ #

    def dispatch(self, handler: Callable[[], Any], description: str = "request") -> asyncio.Future:
        """Queue ``handler`` for the request loop and return its future."""

        future = asyncio.get_running_loop().create_future()
        if self._fatal is not None:
            future.set_exception(self._fatal)
            return future
        self._queue.append(WorkItem(handler, future, description))
        self._wakeup.set()
        return future

    def process(self) -> bool:
        """Run one queued work item; ``False`` when there was nothing to do."""

        if self._fatal is not None:
            raise self._fatal
        if not self._queue:
            return False

        item = self._queue.popleft()
        if item.future.cancelled():
            logger.debug("Skipping cancelled %s", item.description)
            return True
        try:
            result = item.handler()
        except Exception as exc:
            item.future.set_exception(exc)
        else:
            item.future.set_result(result)
        return True

    async def wait(self, timeout: float | None) -> None:
        """Block until work is queued, the connection drops, or ``timeout``."""

        if self._fatal is not None:
            raise self._fatal
        if self._queue:
            return

        self._wakeup.clear()
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout)
        except asyncio.TimeoutError:
            pass

        if self._fatal is not None:
            raise self._fatal

    def wake(self) -> None:
        self._wakeup.set()

    # ------------------------------------------------------------------ #
    # Shutdown
    # ------------------------------------------------------------------ #

    def _on_disconnect(self, task: asyncio.Future) -> None:
        if task.cancelled() or self._closing:
            return
        exc = task.exception()
        reason = f"{exc}" if exc is not None else "connection closed"
        logger.error("Bus connection lost: %s", reason)
        self._fatal = TransportFatal(f"Bus connection lost: {reason}")
        self._fail_pending(self._fatal)
        self._wakeup.set()

    def _fail_pending(self, exc: Exception) -> None:
        while self._queue:
            item = self._queue.popleft()
            if not item.future.done():
                item.future.set_exception(exc)

    def close(self) -> None:
        """Fail queued requests and disconnect from the bus."""

        self._closing = True
        self._fail_pending(TransportFatal("Bus transport closed"))
        if self._monitor is not None and not self._monitor.done():
            self._monitor.cancel()
        self._bus.disconnect()


__all__ = ["BusTransport", "RecordBus", "Registration", "Transport", "WorkItem"]
