"""Clients for companion services: release registry and explorer admin API."""

from envcompose.clients.explorer import ExplorerClient, NodeAccessKeys
from envcompose.clients.releases import ReleaseRegistry, strip_version_prefix

__all__ = [
    "ExplorerClient",
    "NodeAccessKeys",
    "ReleaseRegistry",
    "strip_version_prefix",
]
