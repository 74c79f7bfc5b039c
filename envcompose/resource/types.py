"""Shared data types: runtime facts reported by the orchestrator and lifecycle states."""

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from envcompose.errors import ConstructionError


class Lifecycle(Enum):
    """Lifecycle of a deployable or an environment spec."""

    DRAFT = "draft"
    POPULATED = "populated"
    DEPLOYED = "deployed"
    RESOLVED = "resolved"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (Lifecycle.RESOLVED, Lifecycle.FAILED)


_TRANSITIONS = {
    Lifecycle.DRAFT: {Lifecycle.POPULATED},
    Lifecycle.POPULATED: {Lifecycle.DEPLOYED},
    Lifecycle.DEPLOYED: {Lifecycle.RESOLVED},
}


def advance(owner_id: str, current: Lifecycle, target: Lifecycle) -> Lifecycle:
    """Validate a lifecycle transition and return the new state.

    Every non-terminal state may move to FAILED; otherwise states advance one
    step at a time.
    """
    if target is Lifecycle.FAILED and not current.terminal:
        return target
    if target not in _TRANSITIONS.get(current, set()):
        raise ConstructionError(
            f"'{owner_id}' cannot move from {current.value} to {target.value}",
            context={"deployable": owner_id},
        )
    return target


@dataclass
class PortForward:
    """One exposed port: the cluster-side port and its locally forwarded twin."""

    remote: int
    local: int


@dataclass
class Connection:
    """Cluster-internal and locally forwarded endpoint pair for a deployed resource."""

    cluster_url: str
    local_url: str


@dataclass
class RuntimeFacts:
    """What the orchestrator observed once a resource became ready."""

    cluster_ip: str
    ports: list[PortForward] = field(default_factory=list)
    pod_names: list[str] = field(default_factory=list)

    def connection(self, scheme: str, index: int = 0, userinfo: str = "") -> Connection:
        """Build cluster and local URLs for the port at ``index``."""
        if index >= len(self.ports):
            raise LookupError(f"no exposed port at index {index} (have {len(self.ports)})")
        port = self.ports[index]
        auth = f"{userinfo}@" if userinfo else ""
        return Connection(
            cluster_url=f"{scheme}://{auth}{self.cluster_ip}:{port.remote}",
            local_url=f"{scheme}://{auth}127.0.0.1:{port.local}",
        )

    def pods_matching(self, fragment: str) -> list[str]:
        return [name for name in self.pod_names if fragment in name]


@dataclass
class ServiceDetail:
    """Remote/local URL pair for one service port, as reported for helm releases."""

    remote_url: str
    local_url: str

    @property
    def remote_port(self) -> int | None:
        return urlsplit(self.remote_url).port
