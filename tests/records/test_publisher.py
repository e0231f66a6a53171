import pytest

from recordlog.config import core
from recordlog.errors import NotFoundError, PublishError

ROOT_PATH = "/org/openbmc/records/events"


def test_publish_exports_both_interfaces(manager, store, transport):
    store.seed(12)

    entry = manager.publisher.publish(12)

    path = f"{ROOT_PATH}/12"
    assert entry.path == path
    assert manager.registry.get(12) is entry
    assert transport.interfaces_at(path) == sorted([core.RECORD_INTERFACE, core.DELETE_INTERFACE])
    assert transport.added == [path]


def test_added_notification_follows_registry_insert(manager, store, transport, monkeypatch):
    store.seed(3)
    seen = []
    monkeypatch.setattr(
        transport, "emit_object_added", lambda path: seen.append((path, 3 in manager.registry))
    )

    manager.publisher.publish(3)

    assert seen == [(f"{ROOT_PATH}/3", True)]


def test_failed_registration_tears_down_partial_entry(manager, store, transport):
    store.seed(8)
    transport.refuse.add(core.DELETE_INTERFACE)

    with pytest.raises(PublishError) as excinfo:
        manager.publisher.publish(8)

    assert excinfo.value.log_id == 8
    assert 8 not in manager.registry
    assert transport.exported == {}
    assert transport.unexported == [(f"{ROOT_PATH}/8", core.RECORD_INTERFACE)]
    assert transport.added == []
    # The stored record stays so it can be published again later.
    assert 8 in store.records


def test_publish_twice_is_rejected(manager, store, transport):
    store.seed(2)
    manager.publisher.publish(2)

    with pytest.raises(PublishError):
        manager.publisher.publish(2)

    assert len(manager.registry) == 1
    assert transport.added == [f"{ROOT_PATH}/2"]


def test_unpublish_releases_and_notifies_once(manager, store, transport):
    store.seed(4)
    entry = manager.publisher.publish(4)

    manager.publisher.unpublish(entry)

    path = f"{ROOT_PATH}/4"
    assert 4 not in manager.registry
    assert transport.exported == {}
    assert transport.removed == [path]
    assert entry.record_registration is None and entry.delete_registration is None


def test_unpublish_stale_entry_fails(manager, store, transport):
    store.seed(4)
    entry = manager.publisher.publish(4)
    manager.publisher.unpublish(entry)

    with pytest.raises(NotFoundError):
        manager.publisher.unpublish(entry)

    assert transport.removed == [f"{ROOT_PATH}/4"]
