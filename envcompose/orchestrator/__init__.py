"""Orchestrator boundary: interface, dry-run implementation and the apply/resolve driver."""

from envcompose.orchestrator.base import Orchestrator
from envcompose.orchestrator.driver import deploy_environment
from envcompose.orchestrator.dry_run import DryRunOrchestrator

__all__ = [
    "DryRunOrchestrator",
    "Orchestrator",
    "deploy_environment",
]
