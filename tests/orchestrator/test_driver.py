"""Tests for deploy_environment: group ordering, state machine and failure handling."""

import pytest

from envcompose.errors import ConstructionError, DeploymentError, ResolutionError
from envcompose.orchestrator import DryRunOrchestrator, deploy_environment
from envcompose.resource import EnvironmentSpec, Lifecycle, Manifest, ResourceGroup


class RecordingOrchestrator(DryRunOrchestrator):
    """Keeps the template values each deployable was rendered with."""

    def __init__(self):
        super().__init__()
        self.rendered_with = {}

    async def deploy(self, deployable_id, descriptor, template_values):
        self.rendered_with[deployable_id] = dict(template_values)
        return await super().deploy(deployable_id, descriptor, template_values)


async def _set_url(values, ctx):
    values["url"] = ctx.facts.connection("http").cluster_url


def _unit(id, hook=_set_url):
    return Manifest(id=id, deployment_file=f"{id}.yml", service_file=f"{id}-svc.yml", ports=[80], hook=hook)


def _two_group_spec():
    deps = ResourceGroup("deps", members=[_unit("db")])
    apps = ResourceGroup("apps", members=[_unit("app")])
    return EnvironmentSpec("env", [deps, apps])


async def test_driver_resolves_all_groups():
    spec = _two_group_spec()
    await deploy_environment(spec, DryRunOrchestrator())
    assert spec.state is Lifecycle.RESOLVED
    assert all(d.state is Lifecycle.RESOLVED for _, d in spec.walk())


async def test_later_groups_render_with_earlier_resolved_values():
    orchestrator = RecordingOrchestrator()
    spec = _two_group_spec()
    await deploy_environment(spec, orchestrator)

    assert orchestrator.rendered_with["db"] == {}
    app_values = orchestrator.rendered_with["app"]
    assert app_values["deps/db"]["url"].startswith("http://")
    assert "deps" in app_values
    assert "apps/app" not in app_values


async def test_driver_failure_marks_spec_failed_without_rollback():
    async def broken(values, ctx):
        raise RuntimeError("no pods")

    deps = ResourceGroup("deps", members=[_unit("db"), _unit("explorer", hook=broken)])
    apps = ResourceGroup("apps", members=[_unit("app")])
    spec = EnvironmentSpec("env", [deps, apps])
    orchestrator = DryRunOrchestrator()

    with pytest.raises(ResolutionError) as exc_info:
        await deploy_environment(spec, orchestrator)

    assert exc_info.value.qualified_id == "deps/explorer"
    assert spec.state is Lifecycle.FAILED
    assert spec.error is exc_info.value
    assert spec.find("deps/db").values["url"]
    assert orchestrator.deployed == ["db", "explorer"]
    assert spec.find("apps/app").state is Lifecycle.POPULATED


async def test_driver_deploy_failure_marks_spec_failed(failing_orchestrator):
    spec = _two_group_spec()
    with pytest.raises(DeploymentError):
        await deploy_environment(spec, failing_orchestrator(fail_deploy={"app"}))
    assert spec.state is Lifecycle.FAILED
    assert spec.find("deps").state is Lifecycle.RESOLVED


async def test_driver_rejects_unpopulated_spec():
    with pytest.raises(ConstructionError, match="expected populated"):
        await deploy_environment(EnvironmentSpec("empty"), DryRunOrchestrator())


async def test_driver_rejects_second_run():
    spec = _two_group_spec()
    await deploy_environment(spec, DryRunOrchestrator())
    with pytest.raises(ConstructionError):
        await deploy_environment(spec, DryRunOrchestrator())


async def test_driver_parallel_deploy():
    spec = _two_group_spec()
    await deploy_environment(spec, DryRunOrchestrator(), parallel=True)
    assert spec.state is Lifecycle.RESOLVED
