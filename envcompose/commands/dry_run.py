"""Dry-run command: deploy and resolve a recipe against the dry-run orchestrator."""

import asyncio
import logging
import sys

from envcompose.commands import add_recipe_arguments, build_spec, dump_yaml
from envcompose.errors import EnvcomposeError
from envcompose.orchestrator import DryRunOrchestrator, deploy_environment

logger = logging.getLogger(__name__)


def handle_dry_run(args):
    """Handle the dry-run command."""
    asyncio.run(_handle_dry_run(args))


async def _handle_dry_run(args):
    try:
        spec = build_spec(args, dry_run=True)
        await deploy_environment(spec, DryRunOrchestrator(), parallel=args.parallel)
    except (EnvcomposeError, FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info("\nResolved values:")
    logger.info(dump_yaml(spec.template_values()))


def register_dry_run_command(subparsers):
    """Register the dry-run subcommand."""
    parser = subparsers.add_parser("dry-run", help="Resolve a recipe against a simulated cluster")
    add_recipe_arguments(parser)
    parser.add_argument("--parallel", action="store_true", help="Deploy sibling units concurrently")
    parser.set_defaults(func=handle_dry_run)
