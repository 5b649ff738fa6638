# vector_wire/cli.py
# SPDX-License-Identifier: Apache-2.0
"""
Vector Wire CLI

    vector-wire demo              create / insert / retrieve / delete against Qdrant
    vector-wire send [FILE]       send a raw request (file or stdin) and print the status

Connection settings come from VECTOR_WIRE_* environment variables and can be
overridden with --host / --port / --timeout.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from vector_wire import __version__
from vector_wire.exchange.config import ExchangeConfig
from vector_wire.exchange.controller import ExchangeController, ExchangeResult
from vector_wire.exchange.errors import BadConfig
from vector_wire.qdrant.requests import DEFAULT_COLLECTION, DEFAULT_POINT_ID
from vector_wire.qdrant.workflow import CollectionSetupFailed, run_demo

LOG_LEVEL = os.environ.get("VECTOR_WIRE_LOG_LEVEL", "INFO")


# --------------------------------------------------------------------------- #
# Internal helpers
# --------------------------------------------------------------------------- #

def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_controller(args: argparse.Namespace) -> ExchangeController:
    config = ExchangeConfig.from_env(
        host=args.host,
        port=args.port,
        timeout_s=args.timeout,
        completion_timeout_s=args.timeout,
    )
    return ExchangeController(config)


def _print_result(result: ExchangeResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_wire(), indent=2, sort_keys=True))
        return
    if result.ok:
        print(f"Response Code: {result.status if result.status is not None else 'unparsed'}")
        print("Raw Response:")
        print(result.response.decode("utf-8", "replace"))
    else:
        print(f"error: {result.failure_kind}: {result.error}", file=sys.stderr)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #

def _cmd_send(args: argparse.Namespace) -> int:
    if args.file in (None, "-"):
        payload = sys.stdin.buffer.read()
    else:
        try:
            with open(args.file, "rb") as fh:
                payload = fh.read()
        except OSError as e:
            print(f"error: cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
            return 2
    if not payload:
        print("error: empty request payload", file=sys.stderr)
        return 2

    result = _build_controller(args).send_request(payload)
    _print_result(result, args.json)
    return 0 if result.ok else 1


def _cmd_demo(args: argparse.Namespace) -> int:
    controller = _build_controller(args)
    try:
        results = run_demo(controller, args.collection, point_id=args.point_id)
    except CollectionSetupFailed as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for step, result in results.items():
        if args.json:
            print(json.dumps({"step": step, **result.to_wire()}, sort_keys=True))
        else:
            shown = result.status if result.ok else result.failure_kind
            print(f"{step:<9} {shown}")
    return 0


# --------------------------------------------------------------------------- #
# Entrypoint
# --------------------------------------------------------------------------- #

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vector-wire",
        description="Raw TCP request/response client for a local vector database.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", default=None, help="target host (default: $VECTOR_WIRE_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="target port (default: $VECTOR_WIRE_PORT or 6333)")
    parser.add_argument("--timeout", type=float, default=None, help="per-stage timeout in seconds (default: 5)")
    parser.add_argument("--json", action="store_true", help="print canonical result envelopes")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="warnings and errors only")

    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="create / insert / retrieve / delete one point")
    demo.add_argument("--collection", default=DEFAULT_COLLECTION)
    demo.add_argument("--point-id", type=int, default=DEFAULT_POINT_ID)
    demo.set_defaults(func=_cmd_demo)

    send = sub.add_parser("send", help="send a raw request from FILE (or stdin)")
    send.add_argument("file", nargs="?", default=None)
    send.set_defaults(func=_cmd_send)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)
    try:
        return args.func(args)
    except BadConfig as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
