"""
Directory-backed event store.

Each log lives in ``<directory>/<log_id>.json.gz`` as a gzipped JSON document::

    {"message": str, "severity": str, "association": str,
     "reported_by": str, "debug_data": hex str, "timestamp": float}

Log ids are allocated after the most recently assigned id, wrapping from
``MAX_LOG_ID`` back to 1 and skipping ids that are still on disk. Writes go
through a temp file and :func:`os.replace` so readers never observe a partial
document.
"""

from __future__ import annotations

import gzip
import json
import logging
import os
import re
import time
from pathlib import Path
from typing import List

from recordlog.errors import StorageError
from recordlog.models import MAX_LOG_ID, EventRecord

logger = logging.getLogger(__name__)

_SUFFIX = ".json.gz"
_NAME_RE = re.compile(r"^(\d+)\.json\.gz$")


class FileEventStore:
    """Persist event records as one file per log id."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        ids = self.list_ids()
        self._latest_id = ids[-1] if ids else 0
        logger.info(
            "Event store at %s holds %d log(s), latest id %d",
            self._dir,
            len(ids),
            self._latest_id,
        )

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def directory(self) -> Path:
        return self._dir

    @property
    def latest_log_id(self) -> int:
        return self._latest_id

    @property
    def log_count(self) -> int:
        return len(self.list_ids())

    @property
    def managed_size(self) -> int:
        """Total bytes currently used by log files."""

        total = 0
        for log_id in self.list_ids():
            try:
                total += self._path(log_id).stat().st_size
            except FileNotFoundError:
                continue
        return total

    def list_ids(self) -> List[int]:
        """Return ids of every log on disk, ascending."""

        ids = []
        for entry in self._dir.iterdir():
            match = _NAME_RE.match(entry.name)
            if match and entry.is_file():
                log_id = int(match.group(1))
                if 0 < log_id <= MAX_LOG_ID:
                    ids.append(log_id)
        return sorted(ids)

    # ------------------------------------------------------------------ #
    # Collaborator contract
    # ------------------------------------------------------------------ #

    def create(self, draft: EventRecord) -> int:
        """Persist ``draft`` under a fresh id; return the id or 0 on failure."""

        log_id = self._next_log_id()
        if not log_id:
            logger.error("No free event log id left in %s", self._dir)
            return 0

        record = draft.assigned(log_id, time.time())
        try:
            self._write(record)
        except OSError as exc:
            logger.error("Failed to write event log %d: %s", log_id, exc)
            return 0

        self._latest_id = log_id
        return log_id

    def load(self, log_id: int) -> EventRecord | None:
        path = self._path(log_id)
        try:
            with gzip.open(path, "rt", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable event log %d at %s: %s", log_id, path, exc)
            return None

        try:
            return EventRecord(
                message=str(raw["message"]),
                severity=str(raw["severity"]),
                association=str(raw["association"]),
                reported_by=str(raw["reported_by"]),
                debug_data=bytes.fromhex(raw.get("debug_data", "")),
                timestamp=float(raw["timestamp"]),
                log_id=log_id,
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed event log %d at %s: %s", log_id, path, exc)
            return None

    def free(self, record: EventRecord) -> None:
        # Loaded records hold no file handles; nothing to release.
        logger.debug("Released event log %d", record.log_id)

    def delete(self, log_id: int) -> bool:
        """Remove ``log_id`` from disk; ``False`` when it did not exist."""

        try:
            self._path(log_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete event log {log_id}: {exc}") from exc
        return True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _path(self, log_id: int) -> Path:
        return self._dir / f"{log_id}{_SUFFIX}"

    def _next_log_id(self) -> int:
        candidate = self._latest_id
        for _ in range(MAX_LOG_ID):
            candidate = candidate % MAX_LOG_ID + 1
            if not self._path(candidate).exists():
                return candidate
        return 0

    def _write(self, record: EventRecord) -> None:
        path = self._path(record.log_id)
        tmp = path.with_name(path.name + ".tmp")
        payload = {
            "message": record.message,
            "severity": record.severity,
            "association": record.association,
            "reported_by": record.reported_by,
            "debug_data": record.debug_data.hex(),
            "timestamp": record.timestamp,
        }
        try:
            with gzip.open(tmp, "wt", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
