import asyncio

import pytest
from dbus_fast import BusType, RequestNameReply

from recordlog import __main__ as cli
from recordlog import daemon
from recordlog.config import core
from recordlog.errors import TransportFatal
from recordlog.models import EventRecord
from recordlog.storage import FileEventStore


class FakeBus:
    def __init__(self):
        self.exports = []
        self.names = []
        self.sent = []
        self.disconnected = False
        self.ready = None

    def export(self, path, interface):
        self.exports.append((path, interface.name))

    def unexport(self, path, interface):
        self.exports.remove((path, interface.name))

    def send(self, message):
        self.sent.append(message)

    async def request_name(self, name):
        self.names.append(name)
        return RequestNameReply.PRIMARY_OWNER

    async def wait_for_disconnect(self):
        # Drop the connection as soon as the daemon starts idling.
        await asyncio.sleep(0.01)
        raise EOFError("bus went away")

    def disconnect(self):
        self.disconnected = True


def test_serve_publishes_stored_logs_until_bus_is_lost(tmp_path, monkeypatch):
    seed = FileEventStore(tmp_path)
    log_id = seed.create(EventRecord.draft("boot", "Info", "", "Host"))
    bus = FakeBus()

    async def fake_connect(bus_type):
        assert bus_type is BusType.SESSION
        return bus

    monkeypatch.setattr(daemon, "_connect", fake_connect)

    with pytest.raises(TransportFatal):
        asyncio.run(daemon.serve(BusType.SESSION, str(tmp_path)))

    assert bus.names == [core.BUS_NAME]
    assert (core.ROOT_PATH, core.RECORDLOG_INTERFACE) in bus.exports
    assert (f"{core.ROOT_PATH}/{log_id}", core.RECORD_INTERFACE) in bus.exports
    assert (f"{core.ROOT_PATH}/{log_id}", core.DELETE_INTERFACE) in bus.exports
    assert [(m.member, m.body[0]) for m in bus.sent] == [("InterfacesAdded", f"{core.ROOT_PATH}/{log_id}")]
    assert bus.disconnected


def test_run_reports_fatal_transport(monkeypatch):
    async def fake_serve(bus_type, log_dir):
        raise TransportFatal("no bus")

    monkeypatch.setattr(daemon, "serve", fake_serve)
    monkeypatch.setattr(daemon, "attach_syslog", lambda address: None)

    assert daemon.run() == 1


def test_attach_syslog_skips_missing_socket(tmp_path):
    assert daemon.attach_syslog(str(tmp_path / "no-such-socket")) is None
    assert daemon.attach_syslog("") is None


def test_cli_passes_bus_and_log_dir(tmp_path, monkeypatch):
    seen = {}

    def fake_run(bus_type, log_dir):
        seen.update(bus_type=bus_type, log_dir=log_dir)
        return 0

    monkeypatch.setattr(daemon, "run", fake_run)

    assert cli.main(["--session", "--log-dir", str(tmp_path)]) == 0
    assert seen == {"bus_type": BusType.SESSION, "log_dir": str(tmp_path)}


def test_cli_rejects_missing_config(tmp_path):
    assert cli.main(["--config", str(tmp_path / "absent.toml")]) == 2


@pytest.mark.parametrize(
    "text",
    [
        '[recordlog.bus]\ntype = "starship"\n',
        "recordlog = 3\n",
    ],
)
def test_cli_rejects_invalid_config(tmp_path, monkeypatch, capsys, text):
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    monkeypatch.setattr(daemon, "run", lambda bus_type, log_dir: pytest.fail("daemon started"))

    assert cli.main(["--config", str(path)]) == 2
    assert "Invalid configuration" in capsys.readouterr().err
