"""Entry point for the relay server."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

from naijavoice_core import load_relay_config

from .ui_web.app import create_app


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="naijavoice", description="Run the naijavoice translation relay.")
    parser.add_argument("--host", default=None, help="Interface to bind (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: PORT or 5000)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable the Flask debugger")
    return parser.parse_args(argv)


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    relay_config = load_relay_config()
    app = create_app(relay_config=relay_config)
    host = args.host or relay_config.host
    port = args.port or relay_config.port
    logging.getLogger(__name__).info("Server running on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=args.debug)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(run())
