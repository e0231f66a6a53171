"""
D-Bus surface of the daemon.

Modules
=======

``transport``
    :class:`~recordlog.bus.transport.BusTransport` wraps the ``dbus-fast``
    connection: interface registration handles, one object-manager signal per
    published log, the request work queue, and connection-loss detection.
``interfaces``
    The exported ``ServiceInterface`` classes for the records root and for
    each published log.
"""

from .transport import BusTransport, RecordBus, Registration, Transport

__all__ = ["BusTransport", "RecordBus", "Registration", "Transport"]
