"""
Entrypoint for the Inkwell AI Editing Engine.
This file wires the FastAPI application together by importing the core package,
which initializes shared state and registers all routes.
"""

from __future__ import annotations

import argparse
import os

import core  # noqa: F401  # Ensure route modules are imported for side effects
from core.app_state import (
    FORCE_EXTRA_VERBOSE_ENV_VAR,
    FORCE_VERBOSE_ENV_VAR,
    app,
    config,
    logger,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inkwell AI Editing Engine")
    parser.add_argument("--host", default=config.APP_HOST, help="Interface to bind (default: %(default)s)")
    parser.add_argument("--port", type=int, default=config.APP_PORT, help="Port to listen on (default: %(default)s)")
    parser.add_argument(
        "--force-verbose",
        action="store_true",
        help="Log provider selection, calls and fallbacks for every request",
    )
    parser.add_argument(
        "--force-extra-verbose",
        action="store_true",
        help="Also log full prompts and provider responses (includes --force-verbose)",
    )
    return parser


def run(argv=None):
    import uvicorn

    args = build_parser().parse_args(argv)

    if args.force_extra_verbose:
        os.environ[FORCE_EXTRA_VERBOSE_ENV_VAR] = "true"
        os.environ[FORCE_VERBOSE_ENV_VAR] = "true"
    elif args.force_verbose:
        os.environ[FORCE_VERBOSE_ENV_VAR] = "true"

    logger.info("Starting with uvicorn on %s:%d", args.host, args.port)
    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=config.APP_RELOAD,
    )


if __name__ == "__main__":
    run()
