"""Command-line interface for the Mailgun logging transport."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_config
from .errors import ConfigurationError
from .logging_setup import configure_logging
from .notifications import MailgunNotifier

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="mailgun-logging",
        description="Mail log events through the Mailgun API",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in the working directory)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Validate the transport configuration")

    send_parser = sub.add_parser("send", help="Mail a single log event")
    send_parser.add_argument("level", help="Level label, e.g. error")
    send_parser.add_argument("message", help="Message body")
    send_parser.add_argument(
        "--meta",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Metadata entry appended to the body (repeatable)",
    )
    send_parser.add_argument(
        "--attach",
        default=None,
        metavar="PATH",
        help="File to attach instead of rendering metadata",
    )

    return parser


def _parse_meta(pairs: list[str]) -> dict[str, str]:
    meta: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid metadata entry '{pair}', expected KEY=VALUE")
        meta[key] = value
    return meta


async def _send(notifier: MailgunNotifier, args: argparse.Namespace) -> int:
    failures: list[Exception] = []
    notifier.on("error", failures.append)

    metadata: dict[str, str] = _parse_meta(args.meta)
    if args.attach:
        metadata["attachment"] = args.attach

    await notifier.log(args.level, args.message, metadata or None)
    if failures:
        logger.error("Delivery failed: %s", failures[0])
        return 1
    logger.info("Log event mailed to %s", notifier.recipient)
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    notifier = MailgunNotifier.create(config.mailgun)

    if args.command == "check":
        logger.info(
            "Transport ready: %s -> %s via %s (level=%s, silent=%s)",
            notifier.sender,
            notifier.recipient,
            config.mailgun.domain,
            notifier.level,
            notifier.silent,
        )
        return 0
    if args.command == "send":
        return await _send(notifier, args)

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
