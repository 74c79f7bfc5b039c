"""Resource composition: units, groups, environment specs and their lifecycle."""

from envcompose.resource.group import ResourceGroup
from envcompose.resource.spec import EnvironmentSpec, EnvSpecBuilder
from envcompose.resource.types import Connection, Lifecycle, PortForward, RuntimeFacts, ServiceDetail
from envcompose.resource.unit import (
    Deployable,
    HelmChart,
    Manifest,
    ResolutionContext,
    Scope,
    Secret,
)
from envcompose.resource.values import ValueSet

__all__ = [
    "Connection",
    "Deployable",
    "EnvSpecBuilder",
    "EnvironmentSpec",
    "HelmChart",
    "Lifecycle",
    "Manifest",
    "PortForward",
    "ResolutionContext",
    "ResourceGroup",
    "RuntimeFacts",
    "Scope",
    "Secret",
    "ServiceDetail",
    "ValueSet",
]
