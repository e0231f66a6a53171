"""
Event log publication daemon.

Modules
=======

``records``
    Registry, cache, publisher and the ingestion/deletion handlers, owned by
    :class:`~recordlog.records.RecordManager`.
``storage``
    The storage collaborator protocol and the file-backed store.
``bus``
    ``dbus-fast`` transport adapter and the exported interfaces.
``loop``
    The request loop draining bus work one unit at a time.
``daemon``
    Process bootstrap used by ``python -m recordlog``.
"""

__version__ = "0.3.0"
