"""Tests for network configuration loading."""

import pytest

from envcompose.config import NetworkConfig, deep_merge, load_network_config, network_config_from_name, templates_dir


def test_deep_merge_nested():
    base = {"gas": {"limit": 1, "price": 2}, "name": "a"}
    assert deep_merge(base, {"gas": {"limit": 5}}) == {"gas": {"limit": 5, "price": 2}, "name": "a"}
    assert base["gas"]["limit"] == 1


def test_load_network_merges_defaults(networks_file):
    config = load_network_config(networks_file, "Ethereum Hardhat")
    assert config.name == "Ethereum Hardhat"
    assert config.settings == {
        "chainlink_image": "public.ecr.aws/chainlink/chainlink",
        "gas": {"limit": 8000000},
        "chain_id": 31337,
    }


def test_load_network_override_wins(networks_file):
    config = load_network_config(networks_file, "Ethereum Geth reorg")
    assert config.settings["gas"] == {"limit": 9000000}
    assert config.settings["chain_id"] == 2337


def test_load_network_unknown(networks_file):
    with pytest.raises(ValueError, match="Unknown network 'Ethereum Kovan'. Available networks: Ethereum Geth reorg, Ethereum Hardhat"):
        load_network_config(networks_file, "Ethereum Kovan")


def test_load_network_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Networks file not found"):
        load_network_config(str(tmp_path / "missing.yaml"), "Ethereum Hardhat")


def test_network_config_from_name():
    assert network_config_from_name("Ethereum Ganache") == NetworkConfig(name="Ethereum Ganache", settings={})


def test_templates_dir_default(monkeypatch, project_root):
    monkeypatch.delenv("ENVCOMPOSE_TEMPLATES_DIR", raising=False)
    assert templates_dir() == f"{project_root}/templates"
