"""Environment spec: the named, ordered list of top-level groups handed to the driver."""

from collections.abc import Callable, Iterator, Mapping

from envcompose.config import NetworkConfig
from envcompose.errors import ConstructionError
from envcompose.resource.group import ResourceGroup
from envcompose.resource.types import Lifecycle, advance
from envcompose.resource.unit import Deployable


class EnvironmentSpec:
    """Named plan of top-level groups, deployed and resolved in list order."""

    def __init__(self, name: str, groups: list[ResourceGroup] | None = None, network: NetworkConfig | None = None):
        if not name:
            raise ConstructionError("environment name must not be empty")
        self.name = name
        self.network = network
        self.groups: list[ResourceGroup] = []
        self.state = Lifecycle.DRAFT
        self.error: Exception | None = None
        for group in groups or []:
            self.add_group(group)
        if self.groups:
            self.advance(Lifecycle.POPULATED)

    def add_group(self, group: ResourceGroup) -> None:
        if self.state not in (Lifecycle.DRAFT, Lifecycle.POPULATED):
            raise ConstructionError(f"cannot add group '{group.id}' to '{self.name}' in state {self.state.value}")
        if any(g.id == group.id for g in self.groups):
            raise ConstructionError(f"duplicate group id '{group.id}' in environment '{self.name}'")
        self.groups.append(group)

    def advance(self, target: Lifecycle) -> None:
        self.state = advance(self.name, self.state, target)

    def fail(self, error: Exception) -> None:
        self.error = error
        if not self.state.terminal:
            self.state = Lifecycle.FAILED

    def walk(self) -> Iterator[tuple[str, Deployable]]:
        """Yield (qualified id, deployable) depth-first in declaration order."""

        def _walk(prefix, deployable):
            path = f"{prefix}/{deployable.id}" if prefix else deployable.id
            yield path, deployable
            for member in getattr(deployable, "members", []):
                yield from _walk(path, member)

        for group in self.groups:
            yield from _walk("", group)

    def find(self, qualified_id: str) -> Deployable | None:
        for path, deployable in self.walk():
            if path == qualified_id:
                return deployable
        return None

    def template_values(self) -> dict:
        """Resolved values so far, keyed by qualified id, plus the network settings.

        Unresolved deployables are omitted, which is what later groups see
        when they are rendered before an earlier group has resolved.
        """
        result: dict[str, Mapping] = {}
        for path, deployable in self.walk():
            if deployable.values is not None:
                result[path] = dict(deployable.values)
        if self.network is not None:
            result["network"] = {"name": self.network.name, **self.network.settings}
        return result

    def describe(self) -> dict:
        return {
            "name": self.name,
            "state": self.state.value,
            "network": self.network.name if self.network else None,
            "groups": [g.describe() for g in self.groups],
        }

    def __repr__(self):
        return f"EnvironmentSpec(name={self.name!r}, groups={[g.id for g in self.groups]!r}, state={self.state.value})"


EnvSpecBuilder = Callable[[NetworkConfig], EnvironmentSpec]
