"""Run the health battery once and print the report for monitoring systems.

Exit codes: 0 healthy, 1 warning, 2 critical.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from ..health.aggregator import run_health_check
from ..health.report import HealthReport
from ..util.env import get_optional_env
from ..util.logging import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Token policy health check")
    parser.add_argument("--env-file", default=".env", help="dotenv file with RPC and key settings")
    parser.add_argument("--compact", action="store_true", help="print the report on a single line")
    parser.add_argument(
        "--log-level",
        default=None,
        help="stderr log level (default: LOG_LEVEL env or WARNING)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level or get_optional_env("LOG_LEVEL", "WARNING"))
    try:
        report = asyncio.run(run_health_check(env_file=args.env_file or None))
    except Exception as exc:
        report = HealthReport.critical(f"Health check script failed: {exc}")
    print(report.to_json(indent=None if args.compact else 2))
    return report.exit_code


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
