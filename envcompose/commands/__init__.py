"""Shared CLI helpers: recipe arguments and spec construction."""

import dataclasses

import yaml

from envcompose.clients.explorer import ExplorerClient
from envcompose.clients.releases import ReleaseRegistry
from envcompose.config import load_network_config, network_config_from_name
from envcompose.errors import ConstructionError
from envcompose.recipes import RECIPES


def add_recipe_arguments(parser):
    """Arguments every spec-building command accepts."""
    parser.add_argument("recipe", choices=sorted(RECIPES), help="Cluster recipe")
    parser.add_argument("--nodes", type=int, required=True, help="Number of chainlink nodes")
    parser.add_argument("--past-versions", type=int, default=2, help="Past releases to mix in (mixed-version only)")
    parser.add_argument("--network", required=True, help="Network name (e.g. 'Ethereum Hardhat')")
    parser.add_argument("--networks-file", default=None, help="YAML file with default and per-network settings")


def build_spec(args, dry_run=False):
    """Build the environment spec described by parsed CLI args."""
    if args.networks_file:
        network = load_network_config(args.networks_file, args.network)
    else:
        network = network_config_from_name(args.network)

    if args.recipe == "mixed-version":
        builder = RECIPES[args.recipe](args.nodes, args.past_versions, ReleaseRegistry(dry_run=dry_run))
    elif args.recipe == "alerts":
        builder = RECIPES[args.recipe](args.nodes, lambda url: ExplorerClient.from_env(url, dry_run=dry_run))
    elif args.recipe in RECIPES:
        builder = RECIPES[args.recipe](args.nodes)
    else:
        raise ConstructionError(f"Unknown recipe '{args.recipe}'")
    return builder(network)


def to_plain(obj):
    """Convert dataclasses and mapping proxies into YAML-friendly builtins."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return to_plain(obj.to_dict() if hasattr(obj, "to_dict") else dataclasses.asdict(obj))
    if hasattr(obj, "items"):
        return {k: to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    return obj


def dump_yaml(data):
    return yaml.safe_dump(to_plain(data), sort_keys=False, default_flow_style=False)
