"""Core data models for mesh DNS integration."""

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_DOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)*$")


class Provider(str, Enum):
    """Cluster DNS providers."""

    COREDNS = "CoreDNS"
    KUBEDNS = "KubeDNS"
    UNKNOWN = "UnknownDNS"


# ============================================================================
# Settings
# ============================================================================


class MeshDNSSettings(BaseModel):
    """Names and defaults used to locate and patch the cluster DNS."""

    mesh_domain: str = Field(default="traefik.mesh", description="Domain served by the mesh DNS")
    system_namespace: str = Field(default="kube-system", description="Namespace of the cluster DNS")
    cluster_domain: str = Field(default="cluster.local", description="Cluster DNS suffix")
    coredns_deployment: str = "coredns"
    coredns_configmap: str = "coredns"
    coredns_custom_configmap: str = "coredns-custom"
    kubedns_deployment: str = "kube-dns"
    kubedns_configmap: str = "kube-dns"
    restart_annotation: str = "traefik-mesh-hash"

    @field_validator("mesh_domain")
    @classmethod
    def _check_domain(cls, value: str) -> str:
        value = value.strip().lower().rstrip(".")
        if not _DOMAIN_RE.match(value):
            raise ValueError(f"invalid mesh domain: {value!r}")
        return value

    @property
    def custom_key(self) -> str:
        """Key of the mesh entry in the custom CoreDNS ConfigMap."""
        return f"{self.mesh_domain}.server"


# ============================================================================
# Kubernetes Models
# ============================================================================


class K8sConfigMap(BaseModel):
    """Kubernetes ConfigMap."""

    name: str
    namespace: str
    data: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    resource_version: str | None = None


class K8sContainer(BaseModel):
    """Container of a deployment pod template."""

    name: str
    image: str


class K8sDeployment(BaseModel):
    """Kubernetes Deployment, reduced to what DNS patching needs."""

    name: str
    namespace: str
    containers: list[K8sContainer] = Field(default_factory=list)
    template_annotations: dict[str, str] = Field(default_factory=dict)
    resource_version: str | None = None


class K8sService(BaseModel):
    """Kubernetes Service."""

    name: str
    namespace: str
    cluster_ip: str | None = None
    ports: list[int] = Field(default_factory=list)
