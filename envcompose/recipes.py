"""Cluster composition recipes: assemble units and groups into environment spec builders.

A recipe captures its counts (and any versions looked up up front) and
returns a builder. Every builder call constructs brand new units, so two
specs built from the same recipe never share state.
"""

import logging

from envcompose.catalog import (
    new_adapter_manifest,
    new_chainlink_manifest,
    new_explorer_manifest,
    new_ganache_manifest,
    new_geth_manifest,
    new_geth_reorg_chart,
    new_hardhat_manifest,
    new_postgres_manifest,
)
from envcompose.clients.releases import ReleaseRegistry
from envcompose.config import NetworkConfig
from envcompose.errors import ConstructionError, ExternalServiceError
from envcompose.resource.group import ResourceGroup
from envcompose.resource.spec import EnvironmentSpec, EnvSpecBuilder

logger = logging.getLogger(__name__)

DEPENDENCY_GROUP_ID = "DependencyGroup"
CHAINLINK_GROUP_ID = "chainlinkCluster"

CHAINLINK_ECR_IMAGE = "public.ecr.aws/chainlink/chainlink"
CHAINLINK_RELEASES = ("smartcontractkit", "chainlink")

# Network name -> chain simulator constructor. Unlisted networks get no simulator.
NETWORK_SIMULATORS = {
    "Ethereum Geth reorg": new_geth_reorg_chart,
    "Ethereum Geth dev": new_geth_manifest,
    "Ethereum Hardhat": new_hardhat_manifest,
    "Ethereum Ganache": new_ganache_manifest,
}


def _check_count(name, value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConstructionError(f"{name} must be a non-negative integer, got {value!r}")


async def _collect_db_urls(values, ctx):
    """Group hook: every postgres member's clusterURL, in declaration order."""
    values["dbURLs"] = [member["clusterURL"] for member_id, member in ctx.members if member_id.startswith("postgres")]


def basic_dependency_group():
    """Dependency group holding the adapter; its hook aggregates database URLs."""
    return ResourceGroup(DEPENDENCY_GROUP_ID, members=[new_adapter_manifest()], hook=_collect_db_urls)


def add_postgres_dbs(dependency_group, count):
    for i in range(count):
        dependency_group.add(new_postgres_manifest(i))


def add_alerts_services(dependency_group, node_count, explorer_client_factory=None):
    """Services needed for testing alerts: an explorer minting keys for every node."""
    dependency_group.add(new_explorer_manifest(node_count, client_factory=explorer_client_factory))


def add_network_simulator(dependency_group, network: NetworkConfig):
    """Append the chain simulator matching the network name, if any. Returns it or None."""
    constructor = NETWORK_SIMULATORS.get(network.name)
    if constructor is None:
        logger.info(f"No simulated chain for network '{network.name}'")
        return None
    return dependency_group.add(constructor())


def chainlink_group(node_count, versions=None):
    """Node group with ``chainlink-<i>`` members.

    ``versions`` is a list of (image, version) pairs assigned round-robin by
    node index; an empty string means the default build.
    """
    group = ResourceGroup(CHAINLINK_GROUP_ID)
    for i in range(node_count):
        node = new_chainlink_manifest(i)
        if versions:
            image, version = versions[i % len(versions)]
            node.set_value("image", image)
            node.set_value("version", version)
        group.add(node)
    return group


def assemble(env_name, network: NetworkConfig, dependency_group, node_group) -> EnvironmentSpec:
    """Attach the network simulator and order the groups, dependency group first.

    This should be the last step of every builder.
    """
    add_network_simulator(dependency_group, network)
    groups = [dependency_group]
    if len(node_group) > 0:
        groups.append(node_group)
    return EnvironmentSpec(env_name, groups, network=network)


def chainlink_cluster(node_count) -> EnvSpecBuilder:
    """Basic environment: chainlink nodes, one postgres each, an adapter and the network's chain."""
    _check_count("node_count", node_count)

    def build(network: NetworkConfig) -> EnvironmentSpec:
        dependency_group = basic_dependency_group()
        add_postgres_dbs(dependency_group, node_count)
        return assemble("basic-chainlink", network, dependency_group, chainlink_group(node_count))

    return build


def chainlink_cluster_for_alerts_testing(node_count, explorer_client_factory=None) -> EnvSpecBuilder:
    """Basic environment plus an explorer holding access keys for every node."""
    _check_count("node_count", node_count)

    def build(network: NetworkConfig) -> EnvironmentSpec:
        dependency_group = basic_dependency_group()
        add_postgres_dbs(dependency_group, node_count)
        add_alerts_services(dependency_group, node_count, explorer_client_factory)
        return assemble("basic-chainlink", network, dependency_group, chainlink_group(node_count))

    return build


def get_mixed_versions(version_count, releases=None) -> list[str]:
    """Most recent ``version_count`` chainlink release versions, prefix stripped."""
    if version_count == 0:
        return []
    releases = releases or ReleaseRegistry()
    return releases.latest_versions(*CHAINLINK_RELEASES, version_count)


def mixed_version_pairs(past_versions_count, releases=None) -> list[tuple[str, str]]:
    """(image, version) cycle: the default build first, then past releases.

    A registry failure is logged and leaves only the default entry.
    """
    try:
        retrieved = get_mixed_versions(past_versions_count, releases)
    except ExternalServiceError as e:
        logger.error(f"Error retrieving versions from github: {e}")
        retrieved = []
    return [("", "")] + [(CHAINLINK_ECR_IMAGE, version) for version in retrieved]


def mixed_version_chainlink_cluster(node_count, past_versions_count, releases=None) -> EnvSpecBuilder:
    """Mix the default chainlink build with ``past_versions_count`` past releases.

    Nodes take (image, version) pairs round-robin by index, so at least
    ``past_versions_count + 1`` nodes are needed to run every version once.
    """
    _check_count("node_count", node_count)
    _check_count("past_versions_count", past_versions_count)
    recommended = past_versions_count + 1
    if node_count < recommended:
        logger.warning(
            f"You're using less than the recommended number of nodes for a mixed version deployment "
            f"(provided: {node_count}, recommended minimum: {recommended})"
        )

    versions = mixed_version_pairs(past_versions_count, releases)

    def build(network: NetworkConfig) -> EnvironmentSpec:
        dependency_group = basic_dependency_group()
        add_postgres_dbs(dependency_group, node_count)
        return assemble("mixed-version-chainlink", network, dependency_group, chainlink_group(node_count, versions))

    return build


# CLI name -> recipe factory
RECIPES = {
    "basic": chainlink_cluster,
    "alerts": chainlink_cluster_for_alerts_testing,
    "mixed-version": mixed_version_chainlink_cluster,
}
