import os

_DEFAULT_LOG_DIR = "/var/lib/recordlog/events"


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        storage_cfg = (config or {}).get("storage", {})
        self.LOG_DIR: str = str(storage_cfg.get("log_dir", os.getenv("RECORDLOG_LOG_DIR", _DEFAULT_LOG_DIR)))

        if not self.LOG_DIR.strip():
            raise ValueError("RECORDLOG_LOG_DIR must not be empty")
