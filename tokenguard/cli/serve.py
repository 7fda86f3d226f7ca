from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from ..util.env import get_optional_env
from ..util.logging import setup_logging

LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the health report and metrics over HTTP")
    parser.add_argument("--host", default="127.0.0.1", help="bind host for uvicorn")
    parser.add_argument("--port", type=int, default=8080, help="bind port for uvicorn")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(get_optional_env("LOG_LEVEL", "INFO"))

    import uvicorn

    LOGGER.info("starting health API host=%s port=%s", args.host, args.port)
    uvicorn.run("tokenguard.main:app", host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
