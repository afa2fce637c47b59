"""Abstract base class for DNS provider configurators."""

from abc import ABC, abstractmethod

from meshdns.core.k8s.client import K8sClient
from meshdns.core.models import MeshDNSSettings, Provider


class BaseDNSConfigurator(ABC):
    """Installs and removes the mesh domain forwarding on one DNS provider."""

    provider: Provider

    def __init__(self, k8s: K8sClient, settings: MeshDNSSettings | None = None):
        self.k8s = k8s
        self.settings = settings or MeshDNSSettings()

    @abstractmethod
    async def configure(self, mesh_namespace: str, mesh_service: str, dns_port: int) -> None:
        """Forward the mesh domain to the mesh DNS service."""
        ...

    @abstractmethod
    async def restore(self) -> None:
        """Remove the mesh domain forwarding."""
        ...

    async def dns_address(self, mesh_namespace: str, mesh_service: str, dns_port: int) -> str:
        """Address of the mesh DNS service as host:port.

        Uses the ClusterIP, or the service DNS name for headless services.
        """
        service = await self.k8s.get_service(mesh_service, mesh_namespace)
        host = service.cluster_ip or f"{mesh_service}.{mesh_namespace}.svc.{self.settings.cluster_domain}"
        return f"{host}:{dns_port}"
