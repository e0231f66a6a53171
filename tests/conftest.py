import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from recordlog.errors import StorageError
from recordlog.models import EventRecord
from recordlog.records import RecordManager

ROOT_PATH = "/org/openbmc/records/events"
CREATED_AT = 1_700_000_000.0


class FakeStore:
    """In-memory storage collaborator that records every call."""

    def __init__(self):
        self.records = {}
        self.loads = []
        self.frees = []
        self.deletes = []
        self.next_id = 1
        self.fail_create = False
        self.fail_delete = set()

    def seed(self, log_id, message="seeded", severity="Info", association="", debug_data=b""):
        draft = EventRecord.draft(message, severity, association, "Host", debug_data)
        self.records[log_id] = draft.assigned(log_id, CREATED_AT)
        self.next_id = max(self.next_id, log_id + 1)
        return self.records[log_id]

    def create(self, draft):
        if self.fail_create:
            return 0
        log_id = self.next_id
        self.next_id += 1
        self.records[log_id] = draft.assigned(log_id, CREATED_AT)
        return log_id

    def load(self, log_id):
        self.loads.append(log_id)
        return self.records.get(log_id)

    def free(self, record):
        self.frees.append(record.log_id)

    def delete(self, log_id):
        self.deletes.append(log_id)
        if log_id in self.fail_delete:
            raise StorageError(f"disk refused to delete {log_id}")
        return self.records.pop(log_id, None) is not None

    def list_ids(self):
        return sorted(self.records)


class FakeRegistration:
    def __init__(self, transport, path, interface):
        self.path = path
        self.interface = interface
        self._transport = transport
        self.released = False

    def release(self):
        if self.released:
            return
        self.released = True
        self._transport.exported.pop((self.path, self.interface.name), None)
        self._transport.unexported.append((self.path, self.interface.name))


class FakeTransport:
    """Transport double: tracks exports and notifications, runs work inline."""

    def __init__(self):
        self.exported = {}
        self.unexported = []
        self.added = []
        self.removed = []
        self.refuse = set()

    def register(self, path, interface):
        if interface.name in self.refuse:
            raise ValueError(f"export of {interface.name} refused")
        key = (path, interface.name)
        if key in self.exported:
            raise ValueError(f"{interface.name} already exported at {path}")
        self.exported[key] = interface
        return FakeRegistration(self, path, interface)

    def emit_object_added(self, path):
        self.added.append(path)

    def emit_object_removed(self, path):
        self.removed.append(path)

    def dispatch(self, handler, description="request"):
        future = asyncio.get_running_loop().create_future()
        try:
            future.set_result(handler())
        except Exception as exc:
            future.set_exception(exc)
        return future

    def wake(self):
        pass

    def interfaces_at(self, path):
        return sorted(name for (p, name) in self.exported if p == path)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def manager(store, transport):
    return RecordManager(store, transport, ROOT_PATH)
