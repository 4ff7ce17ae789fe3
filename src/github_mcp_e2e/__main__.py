#!/usr/bin/env python3
"""Probe a GitHub MCP server from the command line.

Run:
  python -m github_mcp_e2e --list-tools            # print the exposed tool names
  python -m github_mcp_e2e --check get_me          # exit 1 if the tool is missing
  python -m github_mcp_e2e --whoami                # print the token's login via get_me
"""

import argparse
import asyncio
import logging
import sys

from github_mcp_e2e.capabilities import CapabilityProber
from github_mcp_e2e.client import ToolClient
from github_mcp_e2e.config import load_config_from_env
from github_mcp_e2e.context import build_call_log, resolve_owner
from github_mcp_e2e.errors import HarnessError
from github_mcp_e2e.session import open_session


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="github_mcp_e2e", add_help=True)
    parser.add_argument("--list-tools", action="store_true", help="Print the tools the server exposes.")
    parser.add_argument("--check", metavar="TOOL", action="append", default=[], help="Require a tool to be exposed.")
    parser.add_argument("--whoami", action="store_true", help="Print the authenticated login (calls get_me).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level.")
    return parser.parse_args(argv)


async def probe(args: argparse.Namespace) -> int:
    """Open one session and answer the requested questions."""
    config = load_config_from_env()
    async with open_session(config) as session:
        available = await CapabilityProber(session).list_available()
        if args.list_tools:
            for name in available:
                print(name)

        missing = available.missing(args.check)
        for name in missing:
            print(f"missing: {name}", file=sys.stderr)

        if args.whoami:
            client = ToolClient(session, call_log=build_call_log(config), secrets=(config.token,))
            print(await resolve_owner(client))

    return 1 if missing else 0


def main() -> None:
    """CLI dispatcher."""
    args = parse_args(sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    try:
        sys.exit(asyncio.run(probe(args)))
    except KeyboardInterrupt:
        print("\nProbe stopped by user", file=sys.stderr)
    except HarnessError as exc:
        print(f"Probe error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
