# src/main.py — v1
"""CLI entry point.

Usage:
    jmsmigrate <xml_file> <queue_name> <broker_alias> [options]

<broker_alias> is a broker name defined in the ActiveMQ CLI configuration
(conf/activemq-cli.config). The exit code is the number of messages that
failed, capped at 255; 1 is also used for fatal pre-flight errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from jmsmigrate.config.settings import ConfigurationError, Settings, load_settings
from jmsmigrate.core.errors import MigrationError
from jmsmigrate.version import __version__

logger = logging.getLogger(__name__)

# Exit statuses keep only the low 8 bits.
MAX_EXIT_CODE = 255


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args)
    except (ConfigurationError, ValidationError) as exc:
        _setup_logging(args.verbose)
        logger.error("Invalid configuration: %s", exc)
        return 1

    _setup_logging(args.verbose, settings)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except MigrationError as exc:
        logger.error("%s", exc)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="jmsmigrate",
        description=(
            f"jmsmigrate v{__version__}: import JMS messages from an XML export "
            "into an ActiveMQ queue"
        ),
        epilog="Example: jmsmigrate input/messages.xml example.queue test",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("xml_file", type=Path, help="XML export with <jms-message> records")
    parser.add_argument("queue", help="Target queue name")
    parser.add_argument(
        "broker_alias",
        help="Broker name from conf/activemq-cli.config",
    )
    parser.add_argument(
        "--work-root", type=Path, default=None,
        help="Parent directory for the run's working directory (default: /tmp)",
    )
    parser.add_argument(
        "--skip-queue-check", action="store_true",
        help="Do not query queue statistics after the import",
    )
    parser.set_defaults(func=_cmd_import)
    return parser


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.work_root is not None:
        overrides["work_root"] = args.work_root
    if args.skip_queue_check:
        overrides["queue_check_enabled"] = False
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return load_settings(**overrides)


async def _cmd_import(args: argparse.Namespace, settings: Settings) -> int:
    """Run pre-flight checks, then the batch import."""
    from jmsmigrate.batch.orchestrator import BatchOrchestrator
    from jmsmigrate.batch.report import render_report
    from jmsmigrate.delivery.preflight import check_tools

    xml_file: Path = args.xml_file
    if not xml_file.is_file():
        logger.error("File not found: %s", xml_file)
        return 1

    check_tools(settings)

    orchestrator = BatchOrchestrator(settings=settings)
    report = await orchestrator.run(xml_file, args.queue, args.broker_alias)

    print(render_report(report))
    print("\nImport finished.")
    return min(report.failed, MAX_EXIT_CODE)


def _setup_logging(verbose: bool, settings: Settings | None = None) -> None:
    """Configure logging for CLI usage."""
    from jmsmigrate.logging.logger import setup_logging

    if settings is None:
        setup_logging(level="DEBUG" if verbose else "INFO")
        return
    setup_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
