"""Command line entry point."""

import argparse
import logging
import re
import sys

import uvicorn

from rdsexporter.adapters.frameworks.fastapi import create_app
from rdsexporter.adapters.logging import configure_logging
from rdsexporter.adapters.storage import RingBufferLogStorage
from rdsexporter.config import ConfigError, load_config
from rdsexporter.core.enhanced import MessageParser
from rdsexporter.exporter import Exporter

logger = logging.getLogger(__name__)

_DURATION = re.compile(r"^(\d+(?:\.\d+)?)(ms|s|m|h)?$")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(raw: str) -> float:
    """Parse ``90``, ``1.5s``, ``500ms``, ``1m`` or ``2h`` into seconds."""
    match = _DURATION.match(raw.strip())
    if match is None:
        raise argparse.ArgumentTypeError(f"invalid duration: {raw!r}")
    seconds = float(match.group(1)) * _UNIT_SECONDS[match.group(2) or "s"]
    if seconds <= 0:
        raise argparse.ArgumentTypeError("duration must be positive")
    return seconds


def parse_listen_address(raw: str) -> tuple[str, int]:
    """Split ``host:port``; an empty host listens on every interface."""
    host, sep, port = raw.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"invalid listen address: {raw!r}")
    return host.strip("[]") or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rds-exporter",
        description="Prometheus exporter for AWS RDS basic and enhanced metrics",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        type=parse_listen_address,
        default=":9042",
        help="Address on which to expose metrics (default: :9042)",
    )
    parser.add_argument(
        "--web.basic-telemetry-path",
        dest="basic_path",
        default="/basic",
        help="Path under which to expose basic metrics",
    )
    parser.add_argument(
        "--web.enhanced-telemetry-path",
        dest="enhanced_path",
        default="/enhanced",
        help="Path under which to expose enhanced metrics",
    )
    parser.add_argument(
        "--config.file",
        dest="config_file",
        default="config.yml",
        help="Path to the configuration file",
    )
    parser.add_argument(
        "--enhanced.interval",
        dest="interval",
        type=parse_duration,
        default=60.0,
        help="Interval between Enhanced Monitoring polls (default: 60s)",
    )
    parser.add_argument(
        "--enhanced.strict",
        dest="strict",
        action="store_true",
        help="Stop polling when a message has fields the exporter doesn't know",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Minimum level of logged messages",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    log_storage = RingBufferLogStorage()
    configure_logging(args.log_level, log_storage)

    try:
        config = load_config(args.config_file)
    except ConfigError as exc:
        logger.error("Can't load configuration: %s", exc)
        return 1

    exporter = Exporter(
        config,
        args.interval,
        parser=MessageParser(strict_unknown_fields=args.strict),
    )
    app = create_app(
        exporter,
        log_storage,
        basic_path=args.basic_path,
        enhanced_path=args.enhanced_path,
    )

    host, port = args.listen_address
    logger.info(
        "Listening on %s:%d", host, port, extra={"config_file": args.config_file}
    )
    uvicorn.run(app, host=host, port=port, log_config=None, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
