"""
Event record publication package.

Modules
=======

``manager``
    Defines :class:`~recordlog.records.manager.RecordManager`, the single owner
    of the registry, cache slot and transport handle. It wires the handlers
    below together and resolves attribute reads.
``registry``
    :class:`~recordlog.records.registry.PublishedLogEntry` and the
    insertion-ordered :class:`~recordlog.records.registry.Registry`.
``cache``
    Single-slot :class:`~recordlog.records.cache.RecordCache` in front of the
    storage collaborator.
``publisher``
    Exports and unexports the per-log bus interfaces.
``ingestion``
    Validates submissions, stores them and publishes the new log.
``deletion``
    Deletes one log or all logs from storage and the bus.
"""

from .manager import RecordManager

__all__ = ["RecordManager"]
