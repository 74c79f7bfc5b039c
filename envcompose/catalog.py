"""Unit constructors for every service kind an environment can contain.

Each constructor returns a freshly built unit with its static values set and,
where connection values depend on the live resource, a hook that derives
them from the runtime facts.
"""

import logging
import os

from envcompose.clients.explorer import DEFAULT_ADMIN_PASSWORD, DEFAULT_ADMIN_USERNAME, ExplorerClient
from envcompose.config import templates_dir
from envcompose.resource.unit import HelmChart, Manifest, Secret

logger = logging.getLogger(__name__)

# Ports for common services
ADAPTER_API_PORT = 6060
CHAINLINK_WEB_PORT = 6688
CHAINLINK_P2P_PORT = 6690
EVM_RPC_PORT = 8545
MINERS_RPC_PORT = 9545
EXPLORER_API_PORT = 8080

CHAINLINK_API_CREDENTIALS = b"notreal@fakeemail.ch\ntwochains"
CHAINLINK_NODE_PASSWORD = b"T.tLHkcmwePT/p,]sYuntjwHKAsrhm#4eRs4LuKHwvHejWYAC2JP4M8HimwgmbaZ"

EXPLORER_SEED_COMMAND = ["yarn", "--cwd", "apps/explorer", "admin:seed"]


def _template(*parts):
    return os.path.join(templates_dir(), *parts)


def _indexed(base_id, index):
    return base_id if index is None else f"{base_id}-{index}"


async def _set_http_urls(values, ctx):
    conn = ctx.facts.connection("http")
    values["clusterURL"] = conn.cluster_url
    values["localURL"] = conn.local_url


async def _set_ws_urls(values, ctx):
    conn = ctx.facts.connection("ws")
    values["clusterURL"] = conn.cluster_url
    values["localURL"] = conn.local_url


async def _set_postgres_urls(values, ctx):
    conn = ctx.facts.connection("postgresql", userinfo="postgres:node")
    values["clusterURL"] = conn.cluster_url
    values["localURL"] = conn.local_url


def new_adapter_manifest(index=None):
    """External adapter."""
    return Manifest(
        id=_indexed("adapter", index),
        deployment_file=_template("adapter-deployment.yml"),
        service_file=_template("adapter-service.yml"),
        ports=[ADAPTER_API_PORT],
        values={"apiPort": ADAPTER_API_PORT},
        hook=_set_http_urls,
    )


def new_chainlink_manifest(index=None):
    """Chainlink node. Its connection values are consumed from the dependency group, so it has no hook."""
    return Manifest(
        id=_indexed("chainlink", index),
        deployment_file=_template("chainlink", "chainlink-deployment.yml"),
        service_file=_template("chainlink", "chainlink-service.yml"),
        ports=[CHAINLINK_WEB_PORT, CHAINLINK_P2P_PORT],
        values={
            "webPort": CHAINLINK_WEB_PORT,
            "p2pPort": CHAINLINK_P2P_PORT,
        },
        secret=Secret(
            generate_name="chainlink-",
            data={
                "apicredentials": CHAINLINK_API_CREDENTIALS,
                "node-password": CHAINLINK_NODE_PASSWORD,
            },
        ),
    )


def new_postgres_manifest(index=None):
    """Postgres database for one chainlink node."""
    return Manifest(
        id=_indexed("postgres", index),
        deployment_file=_template("postgres", "postgres-deployment.yml"),
        service_file=_template("postgres", "postgres-service.yml"),
        ports=[5432],
        hook=_set_postgres_urls,
    )


def new_geth_manifest():
    """Single geth dev-chain node."""
    return Manifest(
        id="evm",
        deployment_file=_template("geth-deployment.yml"),
        service_file=_template("geth-service.yml"),
        config_map_file=_template("geth-config-map.yml"),
        ports=[EVM_RPC_PORT],
        values={"rpcPort": EVM_RPC_PORT},
        hook=_set_ws_urls,
    )


def new_hardhat_manifest():
    """Hardhat simulated chain."""
    return Manifest(
        id="evm",
        deployment_file=_template("hardhat-deployment.yml"),
        service_file=_template("hardhat-service.yml"),
        config_map_file=_template("hardhat-config-map.yml"),
        ports=[EVM_RPC_PORT],
        values={"rpcPort": EVM_RPC_PORT},
        hook=_set_ws_urls,
    )


def new_ganache_manifest():
    """Ganache simulated chain."""
    return Manifest(
        id="evm",
        deployment_file=_template("ganache-deployment.yml"),
        service_file=_template("ganache-service.yml"),
        ports=[EVM_RPC_PORT],
        values={"rpcPort": EVM_RPC_PORT},
        hook=_set_ws_urls,
    )


def new_geth_reorg_chart():
    """Multi-node geth network used for chain reorganisation tests.

    The chart exposes several ports; the RPC endpoint is picked out of the
    release's service details and rewritten to websocket URLs.
    """

    async def _set_values(values, ctx):
        for detail in await ctx.service_details():
            if detail.remote_port == EVM_RPC_PORT:
                values["clusterURL"] = detail.remote_url.replace("http", "ws")
                values["localURL"] = detail.local_url.replace("http", "ws")
        if "clusterURL" not in values:
            raise LookupError(f"reorg chart exposes no service on port {EVM_RPC_PORT}")
        values["rpcPort"] = EVM_RPC_PORT

    return HelmChart(
        id="evm",
        chart_path=_template("charts", "geth-reorg"),
        release_name="reorg-1",
        ports=[EVM_RPC_PORT, MINERS_RPC_PORT],
        hook=_set_values,
    )


def new_explorer_manifest(node_count, client_factory=None, admin_username=None, admin_password=None):
    """Explorer that seeds an admin account and mints access keys for ``node_count`` nodes.

    ``client_factory(local_url)`` builds the admin API client once the
    explorer is reachable. Admin credentials default to the EXPLORER_ADMIN_*
    environment variables, and the default client uses the same pair as the
    seed command. The resulting ``keys`` value lists one credential
    record per node, in node order. Any failed call aborts resolution, so a
    partial list is never committed.
    """
    admin_username = admin_username or os.environ.get("EXPLORER_ADMIN_USERNAME", DEFAULT_ADMIN_USERNAME)
    admin_password = admin_password or os.environ.get("EXPLORER_ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    if client_factory is None:

        def client_factory(url):
            return ExplorerClient(url, username=admin_username, password=admin_password)

    async def _set_values(values, ctx):
        conn = ctx.facts.connection("ws")
        values["clusterURL"] = conn.cluster_url
        values["localURL"] = ctx.facts.connection("http").local_url

        pods = ctx.facts.pods_matching("explorer")
        if not pods:
            raise LookupError("no explorer pods found")
        await ctx.exec_in_pod(pods[0], "explorer", [*EXPLORER_SEED_COMMAND, admin_username, admin_password])

        client = client_factory(values["localURL"])
        keys = []
        for i in range(node_count):
            credentials = await client.post_admin_nodes(f"node-{i}")
            keys.append(credentials)
        logger.info(f"Minted explorer access keys for {len(keys)} node(s)")
        values["keys"] = keys

    return Manifest(
        id="explorer",
        deployment_file=_template("explorer-deployment.yml"),
        service_file=_template("explorer-service.yml"),
        ports=[EXPLORER_API_PORT],
        hook=_set_values,
    )
