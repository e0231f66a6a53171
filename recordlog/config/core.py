import os


_BUS_TYPES = ("system", "session")


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        bus_cfg = cfg.get("bus", {})

        self.BUS_NAME: str = str(bus_cfg.get("name") or os.getenv("RECORDLOG_BUS_NAME", "org.openbmc.records.events"))
        self.ROOT_PATH: str = str(bus_cfg.get("root_path") or os.getenv("RECORDLOG_ROOT_PATH", "/org/openbmc/records/events"))
        self.BUS_TYPE: str = str(bus_cfg.get("type") or os.getenv("RECORDLOG_BUS_TYPE", "system")).lower()
        self.IDLE_TIMEOUT: float = float(bus_cfg.get("idle_timeout", os.getenv("RECORDLOG_IDLE_TIMEOUT", "0")))
        self.SYSLOG_ADDRESS: str = str(cfg.get("syslog_address", os.getenv("RECORDLOG_SYSLOG_ADDRESS", "/dev/log")))

        # Interface names are part of the client contract, not deployment knobs.
        self.RECORDLOG_INTERFACE = "org.openbmc.recordlog"
        self.RECORD_INTERFACE = "org.openbmc.record"
        self.DELETE_INTERFACE = "org.openbmc.Object.Delete"

        if self.BUS_TYPE not in _BUS_TYPES:
            raise ValueError(f"Unknown bus type {self.BUS_TYPE!r}; expected one of {', '.join(_BUS_TYPES)}")
        if not self.ROOT_PATH.startswith("/") or self.ROOT_PATH.endswith("/"):
            raise ValueError(f"Invalid records root path {self.ROOT_PATH!r}")
        if self.IDLE_TIMEOUT < 0:
            raise ValueError("RECORDLOG_IDLE_TIMEOUT must be >= 0")

    @property
    def idle_timeout(self) -> float | None:
        """Idle wait in seconds, ``None`` to block until the bus has work."""

        return self.IDLE_TIMEOUT or None
