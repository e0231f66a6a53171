import pytest

from recordlog import config
from recordlog.config.core import Core
from recordlog.config.loader import load_raw_config
from recordlog.config.storage import Storage


def test_core_defaults(monkeypatch):
    for name in ("RECORDLOG_BUS_NAME", "RECORDLOG_ROOT_PATH", "RECORDLOG_BUS_TYPE", "RECORDLOG_IDLE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    core = Core({})

    assert core.BUS_NAME == "org.openbmc.records.events"
    assert core.ROOT_PATH == "/org/openbmc/records/events"
    assert core.BUS_TYPE == "system"
    assert core.idle_timeout is None


def test_toml_values_override_environment(monkeypatch):
    monkeypatch.setenv("RECORDLOG_BUS_TYPE", "system")
    raw = {"bus": {"type": "session", "idle_timeout": 5}, "storage": {"log_dir": "/tmp/logs"}}

    assert Core(raw).BUS_TYPE == "session"
    assert Core(raw).idle_timeout == 5.0
    assert Storage(raw).LOG_DIR == "/tmp/logs"


@pytest.mark.parametrize(
    "bus_cfg",
    [
        {"type": "starship"},
        {"root_path": "records/events"},
        {"root_path": "/records/events/"},
        {"idle_timeout": -1},
    ],
)
def test_invalid_settings_are_rejected(bus_cfg):
    with pytest.raises(ValueError):
        Core({"bus": bus_cfg})


def test_loader_tolerates_missing_file(tmp_path):
    assert load_raw_config(tmp_path / "absent.toml") == {}


def test_reload_updates_shared_objects(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text('[recordlog.storage]\nlog_dir = "/srv/events"\n', encoding="utf-8")
    monkeypatch.setattr(config.storage, "LOG_DIR", config.storage.LOG_DIR)

    config.reload(path)

    assert config.storage.LOG_DIR == "/srv/events"
    config.reload(tmp_path / "absent.toml")


def test_storage_rejects_empty_log_dir():
    with pytest.raises(ValueError):
        Storage({"storage": {"log_dir": ""}})


def test_loader_returns_the_recordlog_table(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[other]\nkey = 1\n\n[recordlog.bus]\ntype = "session"\n', encoding="utf-8")

    assert load_raw_config(path) == {"bus": {"type": "session"}}


def test_loader_without_recordlog_table_falls_back(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[other]\nkey = 1\n", encoding="utf-8")

    assert load_raw_config(path) == {}


@pytest.mark.parametrize(
    "text",
    [
        "recordlog = 3\n",
        '[recordlog]\nbus = "session"\n',
        "[recordlog]\nstorage = [1, 2]\n",
    ],
)
def test_loader_rejects_malformed_recordlog_table(tmp_path, text):
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ValueError):
        load_raw_config(path)


def test_rejected_reload_leaves_settings_untouched(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text('[recordlog.bus]\ntype = "session"\n\n[recordlog.storage]\nlog_dir = ""\n', encoding="utf-8")
    monkeypatch.setattr(config.core, "BUS_TYPE", "system")
    monkeypatch.setattr(config.storage, "LOG_DIR", "/srv/events")

    with pytest.raises(ValueError):
        config.reload(path)

    assert config.core.BUS_TYPE == "system"
    assert config.storage.LOG_DIR == "/srv/events"
