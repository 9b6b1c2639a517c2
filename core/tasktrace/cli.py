"""
Command-line interface for tasktrace.

Usage:
    tasktrace demo
    tasktrace demo --requests 3 --scale 0.1
    tasktrace demo --fail "load B" --show-outcome
    tasktrace demo --separator " / " --log-format json
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from tasktrace.config import LOG_FORMATS, TraceConfig, get_config
from tasktrace.demo import STEP_NAMES, build_pipeline
from tasktrace.errors import ConfigurationError
from tasktrace.observability import configure_logging
from tasktrace.sinks import StreamSink
from tasktrace.transaction import Transaction

logger = logging.getLogger("tasktrace.cli")


def register_demo_command(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``demo`` subcommand."""
    demo_parser = subparsers.add_parser(
        "demo",
        help="Run the sample load/compute pipeline",
        description="Run N concurrent transactions of the sample pipeline and print their events.",
    )
    demo_parser.add_argument(
        "--requests",
        type=int,
        default=1,
        help="Number of concurrent top-level transactions (default: 1)",
    )
    demo_parser.add_argument(
        "--scale",
        type=float,
        default=1.0,
        help="Multiply every workload duration by this factor (default: 1.0)",
    )
    demo_parser.add_argument(
        "--fail",
        choices=STEP_NAMES,
        default=None,
        help="Make one step raise",
    )
    demo_parser.add_argument(
        "--separator",
        default=None,
        help="Qualified-name separator (default: from configuration)",
    )
    demo_parser.add_argument(
        "--show-outcome",
        action="store_true",
        help="Append the outcome to Finish lines",
    )
    demo_parser.set_defaults(func=cmd_demo)


def cmd_demo(args: argparse.Namespace) -> int:
    """Run the demo pipeline; returns the process exit code."""
    if args.requests < 1:
        logger.error("--requests must be at least 1")
        return 2
    if args.scale < 0:
        logger.error("--scale must not be negative")
        return 2

    config = get_config()
    overrides = {}
    if args.separator is not None:
        overrides["separator"] = args.separator
    if args.show_outcome:
        overrides["include_outcome"] = True
    if overrides:
        try:
            config = replace(config, **overrides)
        except ConfigurationError as e:
            logger.error(str(e))
            return 2

    return asyncio.run(_run_demo(config, args.requests, args.scale, args.fail))


async def _run_demo(config: TraceConfig, requests: int, scale: float, fail: str | None) -> int:
    pipeline = build_pipeline(scale=scale, fail=fail)
    sink = StreamSink()
    transactions = [Transaction(sink=sink, config=config) for _ in range(requests)]

    results = await asyncio.gather(
        *(txn.execute(pipeline) for txn in transactions), return_exceptions=True
    )

    exit_code = 0
    for txn, result in zip(transactions, results):
        if isinstance(result, Exception):
            exit_code = 1
            logger.error(
                "Transaction failed: %s",
                result,
                extra={"transaction_id": txn.id, "qualified_name": pipeline.name},
            )
        else:
            print(f"result({txn.id})={result}")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(
        prog="tasktrace",
        description="tasktrace - transaction-scoped Begin/Finish logging for nested async work",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help=f"Diagnostic log level (default: {config.log_level})",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=config.log_format,
        help=f"Diagnostic log format (default: {config.log_format})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    register_demo_command(subparsers)

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, format=args.log_format)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
