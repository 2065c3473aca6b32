"""CLI entry point: invoke one operation of a spec over HTTP."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from .client import Client
from .config import get_settings
from .logging import configure_logging


def _parse_params(pairs: List[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected name=value, got {pair!r}")
        try:
            params[name] = json.loads(value)
        except ValueError:
            params[name] = value
    return params


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="oas-runtime")
    parser.add_argument("spec", help="URL or path of a JSON Swagger specification")
    parser.add_argument("operation_id")
    parser.add_argument("params", nargs="*", metavar="name=value")
    parser.add_argument("--fresh", action="store_true", help="bypass the response cache")
    return parser


async def _run(args: argparse.Namespace, params: Dict[str, Any]) -> int:
    settings = get_settings()
    if args.spec.startswith(("http://", "https://")):
        client = await Client.from_url(args.spec, settings=settings)
    else:
        client = Client.from_file(args.spec, settings=settings)

    async with client:
        if args.fresh:
            client.fresh()
        result = await client.call(args.operation_id, params)

    status = getattr(result.response, "status", None)
    body = result.errors if not result.ok else getattr(result.response, "body", None)
    print(status)
    print(json.dumps(body, indent=2, default=str) if not isinstance(body, str) else body)
    return 0 if result.ok else 1


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        params = _parse_params(args.params)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    configure_logging(get_settings().log_level)
    sys.exit(asyncio.run(_run(args, params)))


if __name__ == "__main__":
    main()
