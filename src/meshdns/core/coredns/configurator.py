"""CoreDNS configuration for the mesh domain."""

import hashlib
import logging
from enum import Enum

from meshdns.core.base import BaseDNSConfigurator
from meshdns.core.coredns import corefile as editor
from meshdns.core.errors import MalformedDataError, MissingResourceError
from meshdns.core.models import K8sConfigMap, Provider
from meshdns.core.provider import coredns_version

logger = logging.getLogger(__name__)

COREFILE_KEY = "Corefile"


class PatchTarget(str, Enum):
    """Where the mesh block is written."""

    INLINE = "inline"  # appended to the Corefile
    CUSTOM = "custom"  # entry of the coredns-custom ConfigMap


def config_hash(*parts: str) -> str:
    """Hash of the applied configuration, used as the restart marker."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


class CoreDNSConfigurator(BaseDNSConfigurator):
    """
    Patches the CoreDNS Corefile to forward the mesh domain.

    When the coredns-custom ConfigMap exists, CoreDNS already imports its
    entries, so the mesh block goes there and the Corefile only loses any
    block left by an earlier inline install.

    On the custom target the custom ConfigMap is written before the
    Corefile. If the Corefile update then fails, the block sits in both
    places until configure runs again, which removes the inline copy.
    """

    provider = Provider.COREDNS

    async def _corefile_configmap(self) -> tuple[K8sConfigMap, str]:
        cm = await self.k8s.get_configmap(self.settings.coredns_configmap, self.settings.system_namespace)
        if COREFILE_KEY not in cm.data:
            raise MalformedDataError(f"ConfigMap {cm.namespace}/{cm.name} has no {COREFILE_KEY} entry")
        return cm, cm.data[COREFILE_KEY]

    async def _custom_configmap(self) -> K8sConfigMap | None:
        try:
            return await self.k8s.get_configmap(
                self.settings.coredns_custom_configmap, self.settings.system_namespace
            )
        except MissingResourceError:
            return None

    async def configure(self, mesh_namespace: str, mesh_service: str, dns_port: int) -> None:
        ns = self.settings.system_namespace

        deployment = await self.k8s.get_deployment(self.settings.coredns_deployment, ns)
        directive = editor.directive_for(coredns_version(deployment))

        corefile_cm, corefile = await self._corefile_configmap()
        custom_cm = await self._custom_configmap()
        target = PatchTarget.CUSTOM if custom_cm is not None else PatchTarget.INLINE

        address = await self.dns_address(mesh_namespace, mesh_service, dns_port)
        domain = self.settings.mesh_domain
        key = self.settings.custom_key

        custom_value = ""
        if target is PatchTarget.INLINE:
            new_corefile = editor.patch(corefile, domain, address, directive)
        else:
            new_corefile = editor.restore(corefile)
            current = custom_cm.data.get(key)
            custom_value = editor.patch_custom(current, domain, address, directive)

        changed = False

        if target is PatchTarget.CUSTOM and custom_cm.data.get(key) != custom_value:
            await self.k8s.update_configmap(
                custom_cm.model_copy(update={"data": {**custom_cm.data, key: custom_value}})
            )
            logger.info("Wrote %s to ConfigMap %s/%s", key, ns, custom_cm.name)
            changed = True

        if new_corefile != corefile:
            await self.k8s.update_configmap(
                corefile_cm.model_copy(update={"data": {**corefile_cm.data, COREFILE_KEY: new_corefile}})
            )
            logger.info("Patched Corefile in ConfigMap %s/%s (%s)", ns, corefile_cm.name, target.value)
            changed = True

        if not changed:
            logger.debug("CoreDNS already forwards %s to %s", domain, address)
            return

        annotations = dict(deployment.template_annotations)
        annotations[self.settings.restart_annotation] = config_hash(new_corefile, custom_value)
        await self.k8s.set_template_annotations(
            deployment.model_copy(update={"template_annotations": annotations})
        )
        logger.info("Restarting CoreDNS deployment %s/%s", ns, deployment.name)

    async def restore(self) -> None:
        ns = self.settings.system_namespace

        corefile_cm, corefile = await self._corefile_configmap()
        custom_cm = await self._custom_configmap()

        new_corefile = editor.restore(corefile)
        if new_corefile != corefile:
            await self.k8s.update_configmap(
                corefile_cm.model_copy(update={"data": {**corefile_cm.data, COREFILE_KEY: new_corefile}})
            )
            logger.info("Removed mesh block from ConfigMap %s/%s", ns, corefile_cm.name)
        else:
            logger.debug("Corefile carries no mesh block")

        key = self.settings.custom_key
        if custom_cm is not None and key in custom_cm.data:
            await self.k8s.update_configmap(
                custom_cm.model_copy(update={"data": editor.restore_custom(custom_cm.data, key)})
            )
            logger.info("Removed %s from ConfigMap %s/%s", key, ns, custom_cm.name)
