"""Mesh DNS operator: wires provider detection to the matching configurator."""

import logging

from meshdns.core.base import BaseDNSConfigurator
from meshdns.core.coredns.configurator import CoreDNSConfigurator
from meshdns.core.k8s.client import K8sClient
from meshdns.core.kubedns.configurator import KubeDNSConfigurator
from meshdns.core.models import MeshDNSSettings, Provider
from meshdns.core.provider import ProviderClassifier

logger = logging.getLogger(__name__)

CONFIGURATORS: dict[Provider, type[BaseDNSConfigurator]] = {
    Provider.COREDNS: CoreDNSConfigurator,
    Provider.KUBEDNS: KubeDNSConfigurator,
}


class MeshDNSOperator:
    """
    Entry point used by the mesh control plane.

    The provider is detected once, on first use, and the same configurator
    serves both configure (at startup) and restore (at shutdown).
    """

    def __init__(
        self,
        k8s_client: K8sClient | None = None,
        settings: MeshDNSSettings | None = None,
    ):
        self.k8s = k8s_client or K8sClient()
        self.settings = settings or MeshDNSSettings()
        self._configurator: BaseDNSConfigurator | None = None

    async def detect(self) -> Provider:
        """Detect the DNS provider without touching the cluster."""
        return await ProviderClassifier(self.k8s, self.settings).detect()

    async def configurator(self) -> BaseDNSConfigurator:
        if self._configurator is None:
            provider = await self.detect()
            self._configurator = CONFIGURATORS[provider](self.k8s, self.settings)
        return self._configurator

    async def configure(self, mesh_namespace: str, mesh_service: str, dns_port: int = 53) -> Provider:
        """Forward the mesh domain to the mesh DNS service."""
        configurator = await self.configurator()
        logger.info(
            "Configuring %s to forward %s to %s/%s:%d",
            configurator.provider.value,
            self.settings.mesh_domain,
            mesh_namespace,
            mesh_service,
            dns_port,
        )
        await configurator.configure(mesh_namespace, mesh_service, dns_port)
        return configurator.provider

    async def restore(self) -> Provider:
        """Remove the mesh domain forwarding."""
        configurator = await self.configurator()
        logger.info("Restoring %s configuration", configurator.provider.value)
        await configurator.restore()
        return configurator.provider
