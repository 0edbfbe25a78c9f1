"""Command-line entry point: run one report invocation and print its JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .handler import spotify_genres_handler, strava_stats_handler

LOGGER = logging.getLogger(__name__)

_HANDLERS = {
    "genres": spotify_genres_handler,
    "fitness": strava_stats_handler,
}


def _setup_logging(level: int = logging.INFO) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a Spotify genre or Strava achievements report."
    )
    parser.add_argument("report", choices=sorted(_HANDLERS), help="Report to build")
    parser.add_argument(
        "--indent", type=int, default=2, help="JSON indent (0 for compact output)"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    response = _HANDLERS[args.report]({"httpMethod": "GET"})
    body = json.loads(response["body"]) if response["body"] else None
    indent = args.indent if args.indent > 0 else None
    sys.stdout.write(json.dumps(body, indent=indent) + "\n")
    if response["statusCode"] != 200:
        LOGGER.error("Report %s failed (status %s)", args.report, response["statusCode"])
        return 1
    return 0
