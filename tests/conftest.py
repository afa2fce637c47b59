"""Pytest configuration and fixtures."""

import pytest

from meshdns.core.errors import MissingResourceError
from meshdns.core.models import (
    K8sConfigMap,
    K8sContainer,
    K8sDeployment,
    K8sService,
    MeshDNSSettings,
)

BASE_COREFILE = """.:53 {
    errors
    health {
        lameduck 5s
    }
    ready
    kubernetes cluster.local in-addr.arpa ip6.arpa {
        pods insecure
        fallthrough in-addr.arpa ip6.arpa
        ttl 30
    }
    prometheus :9153
    forward . /etc/resolv.conf
    cache 30
    loop
    reload
    loadbalance
}
"""

MESH_BLOCK = """#### Begin Traefik Mesh Block
traefik.mesh:53 {
    errors
    cache 30
    forward . 10.10.10.10:53
}
#### End Traefik Mesh Block
"""

PATCHED_COREFILE = BASE_COREFILE + "\n" + MESH_BLOCK


class FakeK8sClient:
    """In-memory stand-in for K8sClient, seeded per test."""

    def __init__(self):
        self.configmaps: dict[tuple[str, str], K8sConfigMap] = {}
        self.deployments: dict[tuple[str, str], K8sDeployment] = {}
        self.services: dict[tuple[str, str], K8sService] = {}
        self.writes: list[tuple[str, str]] = []

    # Seeding helpers

    def add_configmap(self, name: str, data: dict[str, str], namespace: str = "kube-system"):
        self.configmaps[(namespace, name)] = K8sConfigMap(
            name=name, namespace=namespace, data=dict(data), resource_version="1"
        )

    def add_deployment(self, name: str, image: str, namespace: str = "kube-system", annotations=None):
        self.deployments[(namespace, name)] = K8sDeployment(
            name=name,
            namespace=namespace,
            containers=[K8sContainer(name=name, image=image)],
            template_annotations=dict(annotations or {}),
            resource_version="1",
        )

    def add_service(self, name: str, namespace: str, cluster_ip: str | None, port: int = 53):
        self.services[(namespace, name)] = K8sService(
            name=name, namespace=namespace, cluster_ip=cluster_ip, ports=[port]
        )

    def data(self, name: str, namespace: str = "kube-system") -> dict[str, str]:
        return self.configmaps[(namespace, name)].data

    def annotations(self, name: str, namespace: str = "kube-system") -> dict[str, str]:
        return self.deployments[(namespace, name)].template_annotations

    # K8sClient interface

    async def get_configmap(self, name, namespace=None):
        key = (namespace or "kube-system", name)
        if key not in self.configmaps:
            raise MissingResourceError("ConfigMap", *key)
        return self.configmaps[key].model_copy(deep=True)

    async def create_configmap(self, cm):
        self.writes.append(("create", cm.name))
        self.configmaps[(cm.namespace, cm.name)] = cm.model_copy(update={"resource_version": "1"})
        return cm

    async def update_configmap(self, cm):
        key = (cm.namespace, cm.name)
        if key not in self.configmaps:
            raise MissingResourceError("ConfigMap", *key)
        self.writes.append(("update", cm.name))
        self.configmaps[key] = cm
        return cm

    async def get_deployment(self, name, namespace=None):
        key = (namespace or "kube-system", name)
        if key not in self.deployments:
            raise MissingResourceError("Deployment", *key)
        return self.deployments[key].model_copy(deep=True)

    async def set_template_annotations(self, deployment):
        self.writes.append(("annotate", deployment.name))
        self.deployments[(deployment.namespace, deployment.name)] = deployment
        return deployment

    async def get_service(self, name, namespace=None):
        key = (namespace or "kube-system", name)
        if key not in self.services:
            raise MissingResourceError("Service", *key)
        return self.services[key]


@pytest.fixture
def settings() -> MeshDNSSettings:
    return MeshDNSSettings()


@pytest.fixture
def k8s() -> FakeK8sClient:
    """Fake cluster holding the mesh DNS service."""
    client = FakeK8sClient()
    client.add_service("traefik-mesh-dns", "traefik-mesh", "10.10.10.10")
    return client


@pytest.fixture
def coredns_cluster(k8s: FakeK8sClient) -> FakeK8sClient:
    """Cluster running CoreDNS 1.6 with an unpatched Corefile."""
    k8s.add_deployment("coredns", "k8s.gcr.io/coredns:1.6.2")
    k8s.add_configmap("coredns", {"Corefile": BASE_COREFILE})
    return k8s


@pytest.fixture
def kubedns_cluster(k8s: FakeK8sClient) -> FakeK8sClient:
    """Cluster running KubeDNS without a kube-dns ConfigMap."""
    k8s.add_deployment("kube-dns", "k8s.gcr.io/k8s-dns-kube-dns-amd64:1.14.13")
    return k8s
