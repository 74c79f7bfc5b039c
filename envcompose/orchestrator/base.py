"""Orchestrator interface consumed by deployables and the driver."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from envcompose.resource.types import RuntimeFacts, ServiceDetail


class Orchestrator(ABC):
    """Cluster-side operations the engine relies on.

    Implementations own readiness waiting, port-forwarding and any retry
    policy; the engine surfaces whatever error they raise.
    """

    @abstractmethod
    async def deploy(self, deployable_id: str, descriptor: dict, template_values: Mapping) -> RuntimeFacts:
        """Apply one unit and wait until it is ready.

        ``descriptor`` says what to apply (manifest files or a helm chart);
        ``template_values`` holds everything resolved so far. Raises
        DeploymentError on apply failure or readiness timeout.
        """
        ...

    @abstractmethod
    async def execute_in_pod(self, pod_name: str, container: str, command: list[str]) -> tuple[str, str]:
        """Run a one-shot command in a container; returns (stdout, stderr)."""
        ...

    @abstractmethod
    async def service_details(self, deployable_id: str, descriptor: dict) -> list[ServiceDetail]:
        """Remote and local URLs for every port the deployable exposes."""
        ...
