from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict

DEFAULT_CONFIG_PATH = Path("config.toml")
SECTION = "recordlog"
_SUBTABLES = ("bus", "storage")


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Return the ``[recordlog]`` table of the daemon config (config.toml by default).

    A missing file or a file without the table yields ``{}`` so settings fall
    back to environment variables. A ``recordlog``, ``recordlog.bus`` or
    ``recordlog.storage`` key that is not a table raises ``ValueError``, as
    does malformed TOML.
    """
    target = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        document = tomllib.load(handle)

    section = document.get(SECTION, {})
    if not isinstance(section, dict):
        raise ValueError(f"{target}: [{SECTION}] must be a table, got {type(section).__name__}")
    for name in _SUBTABLES:
        if not isinstance(section.get(name, {}), dict):
            raise ValueError(f"{target}: [{SECTION}.{name}] must be a table")
    return section


__all__ = ["load_raw_config", "DEFAULT_CONFIG_PATH", "SECTION"]
