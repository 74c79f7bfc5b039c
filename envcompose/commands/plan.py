"""Plan command: print the ordered environment spec without deploying anything."""

import logging
import sys

from envcompose.commands import add_recipe_arguments, build_spec, dump_yaml
from envcompose.errors import EnvcomposeError

logger = logging.getLogger(__name__)


def handle_plan(args):
    """Handle the plan command."""
    try:
        spec = build_spec(args)
    except (EnvcomposeError, FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info(dump_yaml(spec.describe()))


def register_plan_command(subparsers):
    """Register the plan subcommand."""
    parser = subparsers.add_parser("plan", help="Print the ordered deployment plan for a recipe")
    add_recipe_arguments(parser)
    parser.set_defaults(func=handle_plan)
