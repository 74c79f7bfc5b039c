"""Tests for the dry-run orchestrator."""

from envcompose.orchestrator import DryRunOrchestrator


async def test_deploy_assigns_sequential_ips_and_ports(caplog):
    orch = DryRunOrchestrator()
    with caplog.at_level("INFO"):
        first = await orch.deploy("adapter", {"kind": "manifest", "deployment": "a.yml", "ports": [6060]}, {})
        second = await orch.deploy("postgres-0", {"kind": "manifest", "deployment": "p.yml", "ports": [5432, 5433]}, {})

    assert first.cluster_ip == "10.96.0.1"
    assert second.cluster_ip == "10.96.0.2"
    assert [p.local for p in first.ports + second.ports] == [30000, 30001, 30002]
    assert first.pod_names == ["adapter-0"]
    assert "[dry-run] apply adapter" in caplog.text


async def test_helm_pods_are_named_after_release():
    orch = DryRunOrchestrator()
    facts = await orch.deploy("evm", {"kind": "helm", "chart": "charts/x", "release": "reorg-1", "ports": [8545]}, {})
    assert facts.pod_names == ["reorg-1-evm-0"]


async def test_service_details_follow_deployed_ports():
    orch = DryRunOrchestrator()
    descriptor = {"kind": "helm", "chart": "charts/x", "release": "reorg-1", "ports": [8545, 9545]}
    facts = await orch.deploy("evm", descriptor, {})
    details = await orch.service_details("evm", descriptor)
    assert [d.remote_port for d in details] == [8545, 9545]
    assert details[0].local_url == f"http://127.0.0.1:{facts.ports[0].local}"


async def test_service_details_unknown_deployable_is_empty():
    orch = DryRunOrchestrator()
    assert await orch.service_details("nothing", {"kind": "helm", "release": "x"}) == []


async def test_execute_in_pod_records_command(caplog):
    orch = DryRunOrchestrator()
    with caplog.at_level("INFO"):
        out = await orch.execute_in_pod("explorer-0", "explorer", ["yarn", "admin:seed"])
    assert out == ("", "")
    assert orch.commands == [("explorer-0", "explorer", ["yarn", "admin:seed"])]
    assert "[dry-run] exec explorer-0/explorer: yarn admin:seed" in caplog.text
