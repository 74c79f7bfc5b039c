"""Dry-run orchestrator: log every operation and fabricate plausible runtime facts."""

import logging
from collections.abc import Mapping

from envcompose.orchestrator.base import Orchestrator
from envcompose.resource.types import PortForward, RuntimeFacts, ServiceDetail

logger = logging.getLogger(__name__)

FIRST_LOCAL_PORT = 30000


class DryRunOrchestrator(Orchestrator):
    """Applies nothing. Each deploy gets the next cluster IP, sequential local
    ports and a single pod named after the deployable (or helm release).
    """

    def __init__(self, subnet="10.96.0"):
        self.subnet = subnet
        self.deployed: list[str] = []
        self.commands: list[tuple[str, str, list[str]]] = []
        self._facts: dict[str, RuntimeFacts] = {}
        self._next_local = FIRST_LOCAL_PORT

    async def deploy(self, deployable_id: str, descriptor: dict, template_values: Mapping) -> RuntimeFacts:
        target = descriptor.get("chart") or descriptor.get("deployment")
        logger.info(f"[dry-run] apply {deployable_id}: {descriptor['kind']} {target}")

        ports = []
        for remote in descriptor.get("ports", []):
            ports.append(PortForward(remote=remote, local=self._next_local))
            self._next_local += 1

        pod_prefix = descriptor.get("release", deployable_id)
        if pod_prefix != deployable_id:
            pod_prefix = f"{pod_prefix}-{deployable_id}"
        self.deployed.append(deployable_id)
        facts = RuntimeFacts(
            cluster_ip=f"{self.subnet}.{len(self.deployed)}",
            ports=ports,
            pod_names=[f"{pod_prefix}-0"],
        )
        self._facts[self._key(deployable_id, descriptor)] = facts
        return facts

    async def execute_in_pod(self, pod_name: str, container: str, command: list[str]) -> tuple[str, str]:
        logger.info(f"[dry-run] exec {pod_name}/{container}: {' '.join(command)}")
        self.commands.append((pod_name, container, list(command)))
        return "", ""

    async def service_details(self, deployable_id: str, descriptor: dict) -> list[ServiceDetail]:
        facts = self._facts.get(self._key(deployable_id, descriptor))
        if facts is None:
            return []
        return [
            ServiceDetail(
                remote_url=f"http://{facts.cluster_ip}:{p.remote}",
                local_url=f"http://127.0.0.1:{p.local}",
            )
            for p in facts.ports
        ]

    @staticmethod
    def _key(deployable_id, descriptor):
        return deployable_id, descriptor.get("release") or descriptor.get("deployment")
