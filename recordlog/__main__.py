from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from dbus_fast import BusType


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m recordlog",
        description="Publish stored event logs on D-Bus.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the daemon config TOML (defaults to ./config.toml when present).",
    )
    parser.add_argument(
        "--session",
        action="store_true",
        help="Connect to the session bus instead of the configured bus.",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory holding event log files (overrides config).",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.config is not None and not args.config.is_file():
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 2

    try:
        from recordlog import config

        if args.config is not None:
            config.reload(args.config)

        from recordlog import daemon
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    bus_type = BusType.SESSION if args.session else None
    log_dir = str(args.log_dir) if args.log_dir is not None else None
    return daemon.run(bus_type, log_dir)


if __name__ == "__main__":
    sys.exit(main())
