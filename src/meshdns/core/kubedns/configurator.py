"""KubeDNS stub domain configuration for the mesh domain."""

import json
import logging

from meshdns.core.base import BaseDNSConfigurator
from meshdns.core.errors import MalformedDataError, MissingResourceError
from meshdns.core.models import K8sConfigMap, Provider

logger = logging.getLogger(__name__)

STUB_DOMAINS_KEY = "stubDomains"


def parse_stub_domains(raw: str | None) -> dict[str, list[str]]:
    """Decode the stubDomains field. Missing or blank means no stub domains."""
    if raw is None or not raw.strip():
        return {}

    try:
        stub_domains = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedDataError(f"stubDomains is not valid JSON: {e}") from e

    if not isinstance(stub_domains, dict):
        raise MalformedDataError("stubDomains must be a JSON object")

    return stub_domains


def dump_stub_domains(stub_domains: dict[str, list[str]]) -> str:
    """Encode stub domains compactly. No stub domains encode to an empty string."""
    if not stub_domains:
        return ""
    return json.dumps(stub_domains, separators=(",", ":"), sort_keys=True)


class KubeDNSConfigurator(BaseDNSConfigurator):
    """
    Adds the mesh domain to the KubeDNS stub domains.

    The kube-dns ConfigMap is optional for KubeDNS and is created when absent.
    """

    provider = Provider.KUBEDNS

    async def _configmap(self) -> K8sConfigMap | None:
        try:
            return await self.k8s.get_configmap(self.settings.kubedns_configmap, self.settings.system_namespace)
        except MissingResourceError:
            return None

    async def configure(self, mesh_namespace: str, mesh_service: str, dns_port: int) -> None:
        ns = self.settings.system_namespace

        # Fails when KubeDNS is not actually running.
        await self.k8s.get_deployment(self.settings.kubedns_deployment, ns)

        cm = await self._configmap()
        address = await self.dns_address(mesh_namespace, mesh_service, dns_port)

        data = cm.data if cm is not None else {}
        stub_domains = parse_stub_domains(data.get(STUB_DOMAINS_KEY))
        stub_domains[self.settings.mesh_domain] = [address]
        value = dump_stub_domains(stub_domains)

        if cm is None:
            await self.k8s.create_configmap(
                K8sConfigMap(
                    name=self.settings.kubedns_configmap,
                    namespace=ns,
                    data={STUB_DOMAINS_KEY: value},
                )
            )
            logger.info("Created ConfigMap %s/%s with stub domain %s", ns, self.settings.kubedns_configmap, self.settings.mesh_domain)
            return

        if data.get(STUB_DOMAINS_KEY) == value:
            logger.debug("KubeDNS already forwards %s to %s", self.settings.mesh_domain, address)
            return

        await self.k8s.update_configmap(cm.model_copy(update={"data": {**data, STUB_DOMAINS_KEY: value}}))
        logger.info("Set stub domain %s to %s in ConfigMap %s/%s", self.settings.mesh_domain, address, ns, cm.name)

    async def restore(self) -> None:
        ns = self.settings.system_namespace

        cm = await self._configmap()
        if cm is None:
            logger.warning("ConfigMap %s/%s not found, nothing to restore", ns, self.settings.kubedns_configmap)
            return

        current = cm.data.get(STUB_DOMAINS_KEY, "")
        stub_domains = parse_stub_domains(current)
        stub_domains.pop(self.settings.mesh_domain, None)
        value = dump_stub_domains(stub_domains)

        if value == current:
            logger.debug("Stub domains carry no %s entry", self.settings.mesh_domain)
            return

        await self.k8s.update_configmap(cm.model_copy(update={"data": {**cm.data, STUB_DOMAINS_KEY: value}}))
        logger.info("Removed stub domain %s from ConfigMap %s/%s", self.settings.mesh_domain, ns, cm.name)
