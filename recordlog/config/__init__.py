"""Daemon configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .storage import Storage

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)

_RAW_CONFIG = load_raw_config()

core = Core(_RAW_CONFIG)
storage = Storage(_RAW_CONFIG)


def reload(path=None) -> None:
    """Re-read ``path`` (or the default config file) into the shared objects.

    Both objects are rebuilt before either shared one changes, so a rejected
    setting leaves the running configuration as it was.
    """

    raw = load_raw_config(path)
    fresh_core = Core(raw)
    fresh_storage = Storage(raw)
    core.__dict__.update(fresh_core.__dict__)
    storage.__dict__.update(fresh_storage.__dict__)


class Config:
    core = core
    storage = storage


__all__ = ["core", "storage", "reload", "Config"]
