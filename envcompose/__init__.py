"""Composite deployment specs for ephemeral multi-service test environments."""

from envcompose.config import NetworkConfig, load_network_config
from envcompose.orchestrator import DryRunOrchestrator, Orchestrator, deploy_environment
from envcompose.recipes import (
    chainlink_cluster,
    chainlink_cluster_for_alerts_testing,
    mixed_version_chainlink_cluster,
)
from envcompose.resource import EnvironmentSpec, HelmChart, Lifecycle, Manifest, ResourceGroup

__all__ = [
    "DryRunOrchestrator",
    "EnvironmentSpec",
    "HelmChart",
    "Lifecycle",
    "Manifest",
    "NetworkConfig",
    "Orchestrator",
    "ResourceGroup",
    "chainlink_cluster",
    "chainlink_cluster_for_alerts_testing",
    "deploy_environment",
    "load_network_config",
    "mixed_version_chainlink_cluster",
]
