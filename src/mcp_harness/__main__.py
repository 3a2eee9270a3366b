#!/usr/bin/env python3
"""
Command line entry point for the MCP test harness
"""

import sys
import shlex
import asyncio
import argparse

from mcp_harness.config import HarnessConfig, configure_logging
from mcp_harness.runner import run_suites
from mcp_harness.scenarios import SUITES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browser MCP Server test harness")
    parser.add_argument(
        "suites",
        nargs="*",
        help=f"Suites to run (default: all of {', '.join(SUITES)})"
    )
    parser.add_argument(
        "--server-command",
        type=str,
        help="Command that starts the server (default: node dist/server.js)"
    )
    parser.add_argument(
        "--server-cwd",
        type=str,
        help="Working directory for the server process"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for each response (default: 30)"
    )
    parser.add_argument(
        "--startup-delay",
        type=float,
        help="Seconds to wait after launching the server (default: 2)"
    )
    parser.add_argument(
        "--local-site",
        action="store_true",
        help="Serve test pages from a local fixture site instead of httpbin.org"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Directory for harness logs (default: logs)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available suites and exit"
    )
    return parser


def main(argv=None) -> int:
    """Parse arguments and run the requested suites"""
    parser = build_parser()
    args = parser.parse_args(argv)

    unknown = [name for name in args.suites if name not in SUITES]
    if unknown:
        parser.error(f"unknown suite(s): {', '.join(unknown)}")

    if args.list:
        for name, suite in SUITES.items():
            print(f"{name:12} {suite.description}")
        return 0

    try:
        config = HarnessConfig.from_env(
            server_command=shlex.split(args.server_command) if args.server_command else None,
            server_cwd=args.server_cwd,
            request_timeout=args.timeout,
            startup_delay=args.startup_delay,
            log_dir=args.log_dir,
            debug=True if args.debug else None,
            local_site=True if args.local_site else None
        )
    except ValueError as e:
        parser.error(str(e))
    configure_logging(config.log_dir, config.debug)

    return asyncio.run(run_suites(config, args.suites or list(SUITES)))


if __name__ == "__main__":
    sys.exit(main())
