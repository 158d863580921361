"""CLI entrypoint for turn-games."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Optional

from turn_games.logging_setup import setup_logging
from turn_games.registry import load_plugins
from turn_games.runtime.dispatcher import Dispatcher
from turn_games.settings import load_settings


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="turn-games")
    parser.add_argument("--config", default=None, help="Path to config.toml")
    parser.add_argument("--sessions-dir", default=None, help="Directory for stored games")
    parser.add_argument("--log-level", default=None, help="Overrides the configured log level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-games")
    dispatch_parser = subparsers.add_parser("dispatch")
    dispatch_parser.add_argument("--request", required=True, help="JSON request string")

    args = parser.parse_args(argv)

    settings = load_settings(config_path=args.config, sessions_dir=args.sessions_dir)
    setup_logging(args.log_level or settings.log_level)

    plugins = load_plugins()

    if args.command == "list-games":
        manifests = [plugins[game_type].manifest() for game_type in sorted(plugins)]
        print(json.dumps(manifests, indent=2, sort_keys=True))
        return 0

    try:
        request = json.loads(args.request)
    except json.JSONDecodeError as exc:
        parser.error(f"--request is not valid JSON: {exc}")

    dispatcher = Dispatcher(plugins, settings=settings)
    response = asyncio.run(dispatcher.dispatch(request))
    print(json.dumps(response, indent=2, sort_keys=True))
    return 0 if response["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
