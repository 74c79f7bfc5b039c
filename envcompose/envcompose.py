#!/usr/bin/env python3
"""Test environment composition tools: CLI entrypoint."""

import argparse

from envcompose.commands.dry_run import register_dry_run_command
from envcompose.commands.plan import register_plan_command
from envcompose.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Compose multi-service test environments")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_plan_command(subparsers)
    register_dry_run_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
