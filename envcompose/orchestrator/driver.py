"""Apply/resolve driver: walk an environment spec group by group."""

import logging

from envcompose.errors import ConstructionError, EnvcomposeError
from envcompose.resource.spec import EnvironmentSpec
from envcompose.resource.types import Lifecycle
from envcompose.resource.unit import ResolutionContext

logger = logging.getLogger(__name__)


async def deploy_environment(spec: EnvironmentSpec, orchestrator, parallel=False) -> EnvironmentSpec:
    """Deploy and resolve every top-level group in order.

    Each group is deployed with the values resolved by the groups before it,
    then resolved so that its own values are available to the next one. The
    first failure marks the spec FAILED and is re-raised; nothing already
    deployed is rolled back.

    Args:
        spec: a POPULATED environment spec.
        orchestrator: an Orchestrator implementation.
        parallel: deploy sibling members concurrently. Resolution order is
            unaffected.
    """
    if spec.state is not Lifecycle.POPULATED:
        raise ConstructionError(f"environment '{spec.name}' is {spec.state.value}, expected populated")

    logger.info(f"Environment {spec.name}: {len(spec.groups)} group(s)")
    ctx = ResolutionContext(orchestrator=orchestrator)
    try:
        for index, group in enumerate(spec.groups):
            logger.info(f"Deploying group {group.id}...")
            await group.deploy(orchestrator, spec.template_values(), parallel=parallel)
            if index == len(spec.groups) - 1:
                spec.advance(Lifecycle.DEPLOYED)
            ctx.scope.resolved[group.id] = await group.resolve(ctx)
    except EnvcomposeError as e:
        logger.error(f"Environment {spec.name} failed: {e}")
        spec.fail(e)
        raise

    spec.advance(Lifecycle.RESOLVED)
    logger.info(f"Environment {spec.name} resolved.")
    return spec
