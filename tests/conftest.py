"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import pytest
import yaml

from envcompose.clients.explorer import NodeAccessKeys
from envcompose.config import NetworkConfig
from envcompose.errors import ExternalServiceError
from envcompose.orchestrator import DryRunOrchestrator

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the envcompose CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "envcompose.envcompose", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Orchestrator and client fakes ───────────────────────────────────


class FailingOrchestrator(DryRunOrchestrator):
    """Dry-run orchestrator that raises for selected deployables or commands."""

    def __init__(self, fail_deploy=(), fail_exec=False):
        super().__init__()
        self.fail_deploy = set(fail_deploy)
        self.fail_exec = fail_exec

    async def deploy(self, deployable_id, descriptor, template_values):
        if deployable_id in self.fail_deploy:
            raise RuntimeError(f"readiness timeout for {deployable_id}")
        return await super().deploy(deployable_id, descriptor, template_values)

    async def execute_in_pod(self, pod_name, container, command):
        if self.fail_exec:
            raise RuntimeError("command terminated with exit code 1")
        return await super().execute_in_pod(pod_name, container, command)


class FakeExplorerClient:
    """Records minted labels; raises for labels listed in ``fail_on``."""

    def __init__(self, base_url, fail_on=()):
        self.base_url = base_url
        self.fail_on = set(fail_on)
        self.calls = []

    async def post_admin_nodes(self, node_label):
        self.calls.append(node_label)
        if node_label in self.fail_on:
            raise ExternalServiceError("explorer", f"POST /api/v1/admin/nodes returned 500 for {node_label}")
        return NodeAccessKeys(id=len(self.calls), access_key=f"key-{node_label}", secret=f"secret-{node_label}")


@pytest.fixture
def orchestrator():
    return DryRunOrchestrator()


@pytest.fixture
def explorer_clients():
    """Factory for FakeExplorerClient; every created client is kept in ``.created``."""

    class _Factory:
        def __init__(self):
            self.created = []
            self.fail_on = set()

        def __call__(self, base_url):
            client = FakeExplorerClient(base_url, fail_on=self.fail_on)
            self.created.append(client)
            return client

    return _Factory()


class FakeReleases:
    """Release registry stand-in returning fixed versions or raising."""

    def __init__(self, versions=None, error=None):
        self.versions = versions or []
        self.error = error
        self.calls = []

    def latest_versions(self, owner, repo, count):
        self.calls.append((owner, repo, count))
        if self.error is not None:
            raise self.error
        return self.versions[:count]


@pytest.fixture
def hardhat():
    return NetworkConfig(name="Ethereum Hardhat")


@pytest.fixture
def networks_file(tmp_path):
    """Write a networks YAML file with defaults and two networks."""
    config = {
        "default": {"chainlink_image": "public.ecr.aws/chainlink/chainlink", "gas": {"limit": 8000000}},
        "networks": {
            "Ethereum Hardhat": {"chain_id": 31337},
            "Ethereum Geth reorg": {"chain_id": 2337, "gas": {"limit": 9000000}},
        },
    }
    path = tmp_path / "networks.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)
    return str(path)


@pytest.fixture
def failing_orchestrator():
    """Factory for FailingOrchestrator."""
    return FailingOrchestrator


@pytest.fixture
def fake_releases():
    """Factory for FakeReleases."""
    return FakeReleases
