"""Network configuration loading and deep merge."""

import os
from dataclasses import dataclass, field

import yaml

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@dataclass
class NetworkConfig:
    """Selected network: its name drives the chain simulator choice, settings feed templates."""

    name: str
    settings: dict = field(default_factory=dict)


def deep_merge(base, override):
    """Recursive dict merge. Override wins for scalars."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def network_config_from_name(name):
    """Bare network config for callers that only know the network name."""
    return NetworkConfig(name=name)


def load_network_config(path, network):
    """Load a networks YAML file and deep-merge the named network over ``default``.

    Expected layout::

        default:
          chainlink_image: public.ecr.aws/chainlink/chainlink
        networks:
          Ethereum Hardhat:
            chain_id: 31337
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Networks file not found: {path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    networks = config.get("networks") or {}
    if network not in networks:
        available = ", ".join(sorted(networks)) if networks else "none"
        raise ValueError(f"Unknown network '{network}'. Available networks: {available}")

    settings = deep_merge(config.get("default") or {}, networks[network] or {})
    return NetworkConfig(name=network, settings=settings)


def templates_dir():
    """Root for manifest templates and charts; ENVCOMPOSE_TEMPLATES_DIR overrides."""
    return os.environ.get("ENVCOMPOSE_TEMPLATES_DIR") or os.path.join(PROJECT_ROOT, "templates")
