"""Deployable units: single manifests and helm releases with post-deploy hooks.

A unit goes through two distinct phases. At construction its static values
are set and it is POPULATED. After the orchestrator reports it live it is
DEPLOYED and carries RuntimeFacts; ``resolve()`` then runs the optional hook
against a staged copy of the values and commits them, leaving it RESOLVED.
Nothing outside the unit sees its values before that commit.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Protocol, runtime_checkable

from envcompose.errors import ConstructionError, DeploymentError, ResolutionError
from envcompose.resource.types import Lifecycle, RuntimeFacts, ServiceDetail, advance
from envcompose.resource.values import ValueSet

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """Resolved values visible at one nesting level, in resolution order."""

    id: str | None = None
    parent: "Scope | None" = None
    resolved: dict[str, Mapping] = field(default_factory=dict)

    def child(self, scope_id: str) -> "Scope":
        return Scope(id=scope_id, parent=self)

    def lookup(self, deployable_id: str) -> Mapping | None:
        scope = self
        while scope is not None:
            if deployable_id in scope.resolved:
                return scope.resolved[deployable_id]
            scope = scope.parent
        return None


@dataclass
class ResolutionContext:
    """Everything a hook may read: runtime facts, resolved neighbours, the orchestrator."""

    orchestrator: object
    scope: Scope = field(default_factory=Scope)
    deployable_id: str = ""
    descriptor: dict = field(default_factory=dict)
    facts: RuntimeFacts | None = None

    def enter(self, group_id: str) -> "ResolutionContext":
        """Context for the members of a group, with a fresh nested scope."""
        return replace(self, scope=self.scope.child(group_id), deployable_id=group_id, descriptor={}, facts=None)

    def for_unit(self, deployable_id: str, descriptor: dict, facts: RuntimeFacts | None) -> "ResolutionContext":
        return replace(self, deployable_id=deployable_id, descriptor=descriptor, facts=facts)

    def lookup(self, deployable_id: str) -> Mapping | None:
        """Resolved values of an earlier-declared deployable, or None."""
        return self.scope.lookup(deployable_id)

    @property
    def members(self) -> list[tuple[str, Mapping]]:
        """Resolved (id, values) pairs of the current scope in declaration order."""
        return list(self.scope.resolved.items())

    async def exec_in_pod(self, pod_name: str, container: str, command: list[str]) -> tuple[str, str]:
        return await self.orchestrator.execute_in_pod(pod_name, container, command)

    async def service_details(self) -> list[ServiceDetail]:
        return await self.orchestrator.service_details(self.deployable_id, self.descriptor)


Hook = Callable[[dict, ResolutionContext], Awaitable[None]]


@runtime_checkable
class Deployable(Protocol):
    """Capability set shared by manifests, helm charts and resource groups."""

    id: str
    state: Lifecycle

    @property
    def values(self) -> Mapping | None: ...

    def static_values(self) -> dict: ...

    async def deploy(self, orchestrator, template_values: Mapping, parallel: bool = False) -> None: ...

    async def resolve(self, ctx: ResolutionContext) -> Mapping: ...

    def describe(self) -> dict: ...


def check_hook(owner_id: str, hook) -> None:
    if hook is not None and not callable(hook):
        raise ConstructionError(f"post-deploy hook of '{owner_id}' is not callable")


async def run_hook(owner_id: str, value_set: ValueSet, hook: Hook | None, ctx: ResolutionContext) -> Mapping:
    """Run ``hook`` against a staged copy of ``value_set`` and commit on success."""
    staged = value_set.stage()
    if hook is not None:
        try:
            await hook(staged, ctx)
        except Exception as e:
            raise ResolutionError([owner_id], e) from e
    return value_set.commit(staged)


@dataclass
class Secret:
    """Opaque secret applied alongside a manifest."""

    generate_name: str
    data: dict[str, bytes] = field(default_factory=dict)
    type: str = "Opaque"


class _UnitLifecycle:
    """Deploy/resolve plumbing shared by Manifest and HelmChart through composition."""

    def __init__(self, owner_id: str, values: Mapping | None, hook: Hook | None):
        if not owner_id:
            raise ConstructionError("deployable id must not be empty")
        check_hook(owner_id, hook)
        self.owner_id = owner_id
        self.value_set = ValueSet(owner_id, values)
        self.hook = hook
        self.state = Lifecycle.POPULATED
        self.facts: RuntimeFacts | None = None

    async def deploy(self, orchestrator, descriptor: dict, template_values: Mapping) -> None:
        advance(self.owner_id, self.state, Lifecycle.DEPLOYED)
        logger.info(f"Deploying {self.owner_id} ({descriptor['kind']})...")
        try:
            self.facts = await orchestrator.deploy(self.owner_id, descriptor, template_values)
        except (DeploymentError, asyncio.CancelledError):
            self.state = Lifecycle.FAILED
            raise
        except Exception as e:
            self.state = Lifecycle.FAILED
            raise DeploymentError(self.owner_id, str(e)) from e
        self.state = Lifecycle.DEPLOYED

    async def resolve(self, ctx: ResolutionContext, descriptor: dict) -> Mapping:
        advance(self.owner_id, self.state, Lifecycle.RESOLVED)
        try:
            committed = await run_hook(self.owner_id, self.value_set, self.hook, ctx.for_unit(self.owner_id, descriptor, self.facts))
        except ResolutionError:
            self.state = Lifecycle.FAILED
            raise
        self.state = Lifecycle.RESOLVED
        return committed


class Manifest:
    """One set of plain manifests (deployment, service, optional config map and secret)."""

    kind = "manifest"

    def __init__(
        self,
        id: str,
        deployment_file: str,
        service_file: str,
        config_map_file: str | None = None,
        ports: list[int] | None = None,
        values: Mapping | None = None,
        secret: Secret | None = None,
        hook: Hook | None = None,
    ):
        self.id = id
        self.ports = list(ports or [])
        self.deployment_file = deployment_file
        self.service_file = service_file
        self.config_map_file = config_map_file
        self.secret = secret
        self._lifecycle = _UnitLifecycle(id, values, hook)

    @property
    def state(self) -> Lifecycle:
        return self._lifecycle.state

    @property
    def facts(self) -> RuntimeFacts | None:
        return self._lifecycle.facts

    @property
    def values(self) -> Mapping | None:
        return self._lifecycle.value_set.committed

    def static_values(self) -> dict:
        return self._lifecycle.value_set.snapshot()

    def set_value(self, key: str, value) -> None:
        self._lifecycle.value_set[key] = value

    def descriptor(self) -> dict:
        d = {
            "kind": self.kind,
            "deployment": self.deployment_file,
            "service": self.service_file,
            "ports": list(self.ports),
        }
        if self.config_map_file:
            d["config_map"] = self.config_map_file
        if self.secret is not None:
            d["secret"] = {"generate_name": self.secret.generate_name, "type": self.secret.type, "keys": sorted(self.secret.data)}
        return d

    async def deploy(self, orchestrator, template_values: Mapping, parallel: bool = False) -> None:
        await self._lifecycle.deploy(orchestrator, self.descriptor(), template_values)

    async def resolve(self, ctx: ResolutionContext) -> Mapping:
        return await self._lifecycle.resolve(ctx, self.descriptor())

    def describe(self) -> dict:
        return {
            "id": self.id,
            **self.descriptor(),
            "state": self.state.value,
            "values": self.static_values(),
        }

    def __repr__(self):
        return f"Manifest(id={self.id!r}, state={self.state.value})"


class HelmChart:
    """One helm release installed from a local chart directory."""

    kind = "helm"

    def __init__(
        self,
        id: str,
        chart_path: str,
        release_name: str,
        ports: list[int] | None = None,
        values: Mapping | None = None,
        hook: Hook | None = None,
    ):
        if not release_name:
            raise ConstructionError(f"helm chart '{id}' needs a release name")
        self.id = id
        self.chart_path = chart_path
        self.release_name = release_name
        self.ports = list(ports or [])
        self._lifecycle = _UnitLifecycle(id, values, hook)

    @property
    def state(self) -> Lifecycle:
        return self._lifecycle.state

    @property
    def facts(self) -> RuntimeFacts | None:
        return self._lifecycle.facts

    @property
    def values(self) -> Mapping | None:
        return self._lifecycle.value_set.committed

    def static_values(self) -> dict:
        return self._lifecycle.value_set.snapshot()

    def set_value(self, key: str, value) -> None:
        self._lifecycle.value_set[key] = value

    def descriptor(self) -> dict:
        return {"kind": self.kind, "chart": self.chart_path, "release": self.release_name, "ports": list(self.ports)}

    async def deploy(self, orchestrator, template_values: Mapping, parallel: bool = False) -> None:
        await self._lifecycle.deploy(orchestrator, self.descriptor(), template_values)

    async def resolve(self, ctx: ResolutionContext) -> Mapping:
        return await self._lifecycle.resolve(ctx, self.descriptor())

    def describe(self) -> dict:
        return {
            "id": self.id,
            **self.descriptor(),
            "state": self.state.value,
            "values": self.static_values(),
        }

    def __repr__(self):
        return f"HelmChart(id={self.id!r}, release={self.release_name!r}, state={self.state.value})"
