#!/usr/bin/env python3
"""Command-line interface for jsongauge.

Commands:
  - jsongauge run       : Poll configured JSON files and serve the gauges
  - jsongauge validate  : Validate a config file
  - jsongauge plan      : Print the metric topology a config would produce

Typical usage:
  python -m jsongauge run --config exporter.yaml
  python -m jsongauge run --config base.yaml --file a.json host=a.com --file b.json host=b.com
  python -m jsongauge validate --config exporter.yaml
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from jsongauge.configs.loader import ConfigError, format_validation_error, load_config
from jsongauge.configs.settings import get_settings
from jsongauge.monitoring.logging import LoggingOptions, setup_logging
from jsongauge.schemas.config import FileSpec

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="jsongauge", description="Republish JSON report values as Prometheus gauges"
    )
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="cmd")

    # run
    pr = sub.add_parser("run", help="Poll files and serve metrics")
    pr.add_argument("--config", "-c", default=None, help="Path to YAML config")
    pr.add_argument(
        "--file",
        "-f",
        dest="files",
        action="append",
        nargs="+",
        metavar="ARG",
        default=None,
        help="External file as PATH [KEY=VALUE ...]; requires a single-group config",
    )
    pr.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    pr.add_argument("--log-level", default=None, help="Log level (default INFO)")
    pr.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    pr.add_argument("--debug", action="store_true", help="Log every gauge update")

    # validate
    pv = sub.add_parser("validate", help="Validate a config file")
    pv.add_argument("--config", "-c", default=None, help="Path to YAML config")
    pv.add_argument("--verbose", "-v", action="store_true", help="Print parsed config")

    # plan
    pp = sub.add_parser("plan", help="Show the metric topology without serving")
    pp.add_argument("--config", "-c", default=None, help="Path to YAML config")

    return p.parse_args(argv)


def parse_file_arg(values: list[str]) -> FileSpec:
    """Turn ``["a.json", "host=a.com"]`` into a FileSpec."""
    path, *pairs = values
    labels = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"--file label must be KEY=VALUE, got '{pair}'")
        labels[key] = value
    try:
        return FileSpec(filepath=path, labels=labels)
    except ValidationError as ve:
        issues = "; ".join(format_validation_error(ve))
        raise ConfigError(f"invalid --file {path}: {issues}") from ve


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        return EXIT_OK


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        from jsongauge import __version__

        print(f"jsongauge version {__version__}")
        return EXIT_OK

    if not args.cmd:
        print("Error: Command required. Use --help for usage info.", file=sys.stderr)
        return EXIT_FAILURE

    settings = get_settings()
    config_path = Path(args.config) if args.config else settings.CONFIG_PATH

    if args.cmd == "validate":
        cfg = load_config(config_path)
        print("Config is VALID.")
        if args.verbose:
            print(json.dumps(cfg.model_dump(by_alias=True), indent=2, ensure_ascii=False))
        return EXIT_OK

    if args.cmd == "plan":
        from prometheus_client import CollectorRegistry

        from jsongauge.topology.builder import build_topology

        setup_logging(LoggingOptions(level="WARNING"))
        cfg = load_config(config_path)
        topology = build_topology(cfg, CollectorRegistry())
        print(json.dumps(topology.describe(), indent=2, ensure_ascii=False))
        return EXIT_OK

    if args.cmd == "run":
        from jsongauge.exporter import Exporter

        level = "DEBUG" if args.debug else (args.log_level or settings.LOG_LEVEL)
        setup_logging(LoggingOptions(level=level, json_logs=args.json_logs or settings.JSON_LOGS))

        interval = args.interval if args.interval is not None else settings.POLL_INTERVAL_SECONDS
        if args.files:
            files = [parse_file_arg(values) for values in args.files]
            exporter = Exporter.from_base_with_files(config_path, files, interval=interval)
        else:
            exporter = Exporter.from_config_file(config_path, interval=interval)

        exporter.run()
        return EXIT_OK

    return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
