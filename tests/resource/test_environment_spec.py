"""Unit tests for EnvironmentSpec construction, walking and template values."""

import pytest

from envcompose.config import NetworkConfig
from envcompose.errors import ConstructionError
from envcompose.resource import EnvironmentSpec, Lifecycle, Manifest, ResourceGroup


def _unit(id):
    return Manifest(id=id, deployment_file=f"{id}.yml", service_file=f"{id}-svc.yml", values={"name": id})


def test_spec_without_groups_is_draft():
    spec = EnvironmentSpec("env")
    assert spec.state is Lifecycle.DRAFT


def test_spec_with_groups_is_populated():
    spec = EnvironmentSpec("env", [ResourceGroup("g")])
    assert spec.state is Lifecycle.POPULATED


def test_spec_rejects_duplicate_group_ids():
    with pytest.raises(ConstructionError, match="duplicate group id"):
        EnvironmentSpec("env", [ResourceGroup("g"), ResourceGroup("g")])


def test_spec_requires_name():
    with pytest.raises(ConstructionError):
        EnvironmentSpec("", [ResourceGroup("g")])


def test_walk_is_depth_first_with_qualified_ids():
    inner = ResourceGroup("inner", members=[_unit("x")])
    spec = EnvironmentSpec("env", [ResourceGroup("g", members=[_unit("a"), inner]), ResourceGroup("h", members=[_unit("b")])])
    assert [path for path, _ in spec.walk()] == ["g", "g/a", "g/inner", "g/inner/x", "h", "h/b"]
    assert spec.find("g/inner/x").id == "x"
    assert spec.find("g/missing") is None


def test_template_values_only_include_resolved_and_network():
    spec = EnvironmentSpec("env", [ResourceGroup("g", members=[_unit("a")])], network=NetworkConfig("Ethereum Hardhat", {"chain_id": 31337}))
    assert spec.template_values() == {"network": {"name": "Ethereum Hardhat", "chain_id": 31337}}


def test_fail_records_error_and_state():
    spec = EnvironmentSpec("env", [ResourceGroup("g")])
    err = RuntimeError("x")
    spec.fail(err)
    assert spec.state is Lifecycle.FAILED
    assert spec.error is err


def test_describe_lists_groups_in_order():
    spec = EnvironmentSpec("env", [ResourceGroup("g", members=[_unit("a")]), ResourceGroup("h")])
    described = spec.describe()
    assert described["name"] == "env"
    assert [g["id"] for g in described["groups"]] == ["g", "h"]
    assert described["groups"][0]["members"][0]["values"] == {"name": "a"}
