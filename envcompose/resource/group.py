"""Resource groups: ordered, possibly nested collections of deployables."""

import asyncio
import logging
from collections.abc import Mapping

from envcompose.errors import ConstructionError, ResolutionError
from envcompose.resource.types import Lifecycle, advance
from envcompose.resource.unit import Deployable, Hook, ResolutionContext, check_hook, run_hook
from envcompose.resource.values import ValueSet

logger = logging.getLogger(__name__)


class ResourceGroup:
    """Ordered members sharing a group-level value set and optional hook.

    Declaration order is the only dependency signal: a member can read the
    resolved values of members declared before it, never after. There is no
    dependency graph and no cycle detection. The group hook runs after every
    member has resolved and sees them through ``ctx.members``.
    """

    kind = "group"

    def __init__(self, id: str, members: list[Deployable] | None = None, values: Mapping | None = None, hook: Hook | None = None):
        if not id:
            raise ConstructionError("group id must not be empty")
        check_hook(id, hook)
        self.id = id
        self.members: list[Deployable] = []
        self.hook = hook
        self.state = Lifecycle.POPULATED
        self._values = ValueSet(id, values)
        for member in members or []:
            self.add(member)

    def add(self, member: Deployable) -> Deployable:
        """Append a member; ids must be unique within the group."""
        if self.state is not Lifecycle.POPULATED:
            raise ConstructionError(f"cannot add '{member.id}' to '{self.id}' after deployment started")
        if any(m.id == member.id for m in self.members):
            raise ConstructionError(
                f"duplicate member id '{member.id}' in group '{self.id}'",
                context={"group": self.id},
            )
        self.members.append(member)
        return member

    def __len__(self):
        return len(self.members)

    def __iter__(self):
        return iter(self.members)

    @property
    def values(self) -> Mapping | None:
        return self._values.committed

    def static_values(self) -> dict:
        return self._values.snapshot()

    def set_value(self, key: str, value) -> None:
        self._values[key] = value

    async def deploy(self, orchestrator, template_values: Mapping, parallel: bool = False) -> None:
        """Deploy every member, in order or concurrently when ``parallel`` is set."""
        advance(self.id, self.state, Lifecycle.DEPLOYED)
        try:
            if parallel:
                await self._deploy_concurrently(orchestrator, template_values)
            else:
                for member in self.members:
                    await member.deploy(orchestrator, template_values)
        except (Exception, asyncio.CancelledError):
            self.state = Lifecycle.FAILED
            raise
        self.state = Lifecycle.DEPLOYED

    async def _deploy_concurrently(self, orchestrator, template_values):
        """Deploy all members at once; the first failure cancels the rest."""
        tasks = [asyncio.ensure_future(m.deploy(orchestrator, template_values, parallel=True)) for m in self.members]
        try:
            await asyncio.gather(*tasks)
        except (Exception, asyncio.CancelledError):
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def resolve(self, ctx: ResolutionContext) -> Mapping:
        """Resolve members depth-first in declaration order, then run the group hook.

        The first failing member stops resolution of the remaining members;
        members resolved before it keep their values.
        """
        advance(self.id, self.state, Lifecycle.RESOLVED)
        inner = ctx.enter(self.id)
        for member in self.members:
            try:
                inner.scope.resolved[member.id] = await member.resolve(inner)
            except ResolutionError as e:
                self.state = Lifecycle.FAILED
                raise e.within(self.id) from e
        try:
            committed = await run_hook(self.id, self._values, self.hook, inner)
        except ResolutionError:
            self.state = Lifecycle.FAILED
            raise
        self.state = Lifecycle.RESOLVED
        logger.info(f"Resolved group {self.id} ({len(self.members)} members)")
        return committed

    def describe(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "state": self.state.value,
            "values": self.static_values(),
            "members": [m.describe() for m in self.members],
        }

    def __repr__(self):
        return f"ResourceGroup(id={self.id!r}, members={[m.id for m in self.members]!r})"
