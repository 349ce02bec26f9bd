#!/usr/bin/env python3
"""
app.py

Command-line entry point for pingback: ping a host once per tick and watch the
round-trip latency as a multi-resolution heatmap in the terminal.

- Raw samples, one glyph per tick
- Aggregated rows: order statistics per chunk of ``group``, ``group**2``, ... samples
- Per-chunk drop counts
- Logarithmic colour legend that reflows to the terminal width
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from textual.logging import TextualHandler

from ..config import AppConfig, load_app_config
from ..contracts.error import guard_cli
from ..tui.app import run_tui

# --------------------------------------------------------------------
# Logging
# --------------------------------------------------------------------
logger = logging.getLogger("pingback")
logger.setLevel(logging.INFO)
logger.propagate = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"
DEFAULT_LOG_MAX_BYTES = 5_000_000
DEFAULT_LOG_BACKUP_COUNT = 5


class JsonFormatter(logging.Formatter):
    """Render log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, DEFAULT_LOG_DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    verbose: bool = False,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
) -> None:
    """Configure console (Textual-aware) and optional rotating file logging."""

    formatter: logging.Formatter
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_LOG_DATEFMT)

    for handler in list(logger.handlers):
        with contextlib.suppress(Exception):
            handler.close()
        logger.removeHandler(handler)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Plain stderr writes would tear the full-screen UI; Textual routes them instead.
    console = TextualHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


configure_logging()


# --------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pingback",
        description="Ping a host every tick and render its latency as a live heatmap.",
    )
    p.add_argument("--address", default=None, help="IP address or host name to ping")
    p.add_argument(
        "--delay",
        type=int,
        default=None,
        help="Delay between pings in milliseconds (default: 1000)",
    )
    p.add_argument(
        "--group",
        type=int,
        default=None,
        help="Number of samples aggregated together at the first level (default: 32)",
    )
    p.add_argument(
        "--aggregates",
        type=int,
        default=None,
        help="Number of aggregate streams (default: 2)",
    )
    p.add_argument(
        "--legend-steps",
        type=int,
        default=None,
        help="Number of entries in the colour legend (default: 90)",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to TOML config file (flags override file and env values)",
    )
    p.add_argument("--verbose", action="store_true", help="Log every probe at DEBUG level")
    p.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    p.add_argument(
        "--log-file",
        default=None,
        help="Optional log file path (rotates at 5MB, keeps 5 backups by default)",
    )
    p.add_argument(
        "--log-max-bytes",
        type=int,
        default=DEFAULT_LOG_MAX_BYTES,
        help="Max bytes per log file before rotation (default: %(default)s)",
    )
    p.add_argument(
        "--log-backup-count",
        type=int,
        default=DEFAULT_LOG_BACKUP_COUNT,
        help="Number of rotated log files to keep (default: %(default)s)",
    )
    return p


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Defaults, then config file, then env overrides, then flags."""

    cfg_path = args.config or os.getenv("PINGBACK_CONFIG")
    cfg = load_app_config(cfg_path)
    if cfg_path:
        logger.info("Loaded config from %s", cfg_path)
    cfg.apply_overrides(
        target=args.address,
        interval_ms=args.delay,
        group_size=args.group,
        levels=args.aggregates,
        legend_steps=args.legend_steps,
    )
    cfg.validate()
    return cfg


@guard_cli
def run(args: argparse.Namespace) -> int:
    run_tui(resolve_config(args))
    return 0


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        args.log_json,
        args.log_file,
        verbose=args.verbose,
        max_bytes=args.log_max_bytes,
        backup_count=args.log_backup_count,
    )
    return run(args)


def console_main() -> None:
    """Entry point for console_scripts."""

    try:
        raise SystemExit(main(sys.argv[1:]))
    except SystemExit:
        raise
    except Exception as e:  # noqa: BLE001
        logger.exception("Fatal error: %s", e)
        raise SystemExit(2) from e


if __name__ == "__main__":
    console_main()
