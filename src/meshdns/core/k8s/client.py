"""Kubernetes client for DNS operations."""

import asyncio
import logging

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from meshdns.core.errors import APIFailureError, MissingResourceError
from meshdns.core.models import K8sConfigMap, K8sContainer, K8sDeployment, K8sService

logger = logging.getLogger(__name__)


def _api_error(e: ApiException, action: str, kind: str, namespace: str, name: str):
    if e.status == 404:
        return MissingResourceError(kind, namespace, name)
    return APIFailureError(f"Failed to {action} {kind} {namespace}/{name}: {e.reason}", status=e.status)


class K8sClient:
    """
    Kubernetes client for DNS-related operations.

    Handles:
    - ConfigMap get/create/update for CoreDNS and KubeDNS
    - Deployment lookup and pod template annotations
    - Service lookup for the mesh DNS address

    Updates carry the resourceVersion that was read, so a concurrent writer
    makes the call fail with a 409 instead of being overwritten.
    """

    def __init__(
        self,
        kubeconfig: str | None = None,
        context: str | None = None,
        namespace: str = "kube-system",
    ):
        self.namespace = namespace
        self._core_v1: client.CoreV1Api | None = None
        self._apps_v1: client.AppsV1Api | None = None
        self._kubeconfig = kubeconfig
        self._context = context
        self._loaded = False

    def _load_config(self) -> None:
        if self._loaded:
            return
        if self._kubeconfig:
            config.load_kube_config(config_file=self._kubeconfig, context=self._context)
        else:
            try:
                config.load_incluster_config()
            except config.ConfigException:
                config.load_kube_config(context=self._context)
        self._loaded = True

    @property
    def core_v1(self) -> client.CoreV1Api:
        if not self._core_v1:
            self._load_config()
            self._core_v1 = client.CoreV1Api()
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        if not self._apps_v1:
            self._load_config()
            self._apps_v1 = client.AppsV1Api()
        return self._apps_v1

    # ========================================================================
    # ConfigMap Operations
    # ========================================================================

    @staticmethod
    def _to_configmap(cm, namespace: str) -> K8sConfigMap:
        return K8sConfigMap(
            name=cm.metadata.name,
            namespace=namespace,
            data=cm.data or {},
            labels=cm.metadata.labels or {},
            annotations=cm.metadata.annotations or {},
            resource_version=cm.metadata.resource_version,
        )

    @staticmethod
    def _to_body(cm: K8sConfigMap) -> client.V1ConfigMap:
        return client.V1ConfigMap(
            metadata=client.V1ObjectMeta(
                name=cm.name,
                namespace=cm.namespace,
                labels=cm.labels or None,
                annotations=cm.annotations or None,
                resource_version=cm.resource_version,
            ),
            data=cm.data,
        )

    async def get_configmap(
        self,
        name: str,
        namespace: str | None = None,
    ) -> K8sConfigMap:
        """Get a ConfigMap by name."""
        ns = namespace or self.namespace

        try:
            cm = await asyncio.to_thread(
                self.core_v1.read_namespaced_config_map,
                name=name,
                namespace=ns,
            )
        except ApiException as e:
            raise _api_error(e, "get", "ConfigMap", ns, name) from e

        return self._to_configmap(cm, ns)

    async def create_configmap(self, cm: K8sConfigMap) -> K8sConfigMap:
        """Create a ConfigMap."""
        try:
            created = await asyncio.to_thread(
                self.core_v1.create_namespaced_config_map,
                namespace=cm.namespace,
                body=self._to_body(cm),
            )
        except ApiException as e:
            raise _api_error(e, "create", "ConfigMap", cm.namespace, cm.name) from e

        logger.debug("Created ConfigMap %s/%s", cm.namespace, cm.name)
        return self._to_configmap(created, cm.namespace)

    async def update_configmap(self, cm: K8sConfigMap) -> K8sConfigMap:
        """Replace a ConfigMap previously read with get_configmap."""
        try:
            updated = await asyncio.to_thread(
                self.core_v1.replace_namespaced_config_map,
                name=cm.name,
                namespace=cm.namespace,
                body=self._to_body(cm),
            )
        except ApiException as e:
            raise _api_error(e, "update", "ConfigMap", cm.namespace, cm.name) from e

        logger.debug("Updated ConfigMap %s/%s", cm.namespace, cm.name)
        return self._to_configmap(updated, cm.namespace)

    # ========================================================================
    # Deployment Operations
    # ========================================================================

    async def get_deployment(
        self,
        name: str,
        namespace: str | None = None,
    ) -> K8sDeployment:
        """Get a Deployment by name."""
        ns = namespace or self.namespace

        try:
            deployment = await asyncio.to_thread(
                self.apps_v1.read_namespaced_deployment,
                name=name,
                namespace=ns,
            )
        except ApiException as e:
            raise _api_error(e, "get", "Deployment", ns, name) from e

        template = deployment.spec.template
        return K8sDeployment(
            name=deployment.metadata.name,
            namespace=ns,
            containers=[
                K8sContainer(name=c.name, image=c.image or "")
                for c in (template.spec.containers or [])
            ],
            template_annotations=(template.metadata.annotations if template.metadata else None) or {},
            resource_version=deployment.metadata.resource_version,
        )

    async def set_template_annotations(self, deployment: K8sDeployment) -> K8sDeployment:
        """Write the pod template annotations of a Deployment.

        Changing them rolls the deployment's pods.
        """
        body = {
            "metadata": {"resourceVersion": deployment.resource_version},
            "spec": {
                "template": {
                    "metadata": {"annotations": dict(deployment.template_annotations)},
                },
            },
        }

        try:
            updated = await asyncio.to_thread(
                self.apps_v1.patch_namespaced_deployment,
                name=deployment.name,
                namespace=deployment.namespace,
                body=body,
            )
        except ApiException as e:
            raise _api_error(e, "update", "Deployment", deployment.namespace, deployment.name) from e

        return deployment.model_copy(
            update={"resource_version": updated.metadata.resource_version}
        )

    # ========================================================================
    # Service Operations
    # ========================================================================

    async def get_service(
        self,
        name: str,
        namespace: str | None = None,
    ) -> K8sService:
        """Get a Service by name."""
        ns = namespace or self.namespace

        try:
            svc = await asyncio.to_thread(
                self.core_v1.read_namespaced_service,
                name=name,
                namespace=ns,
            )
        except ApiException as e:
            raise _api_error(e, "get", "Service", ns, name) from e

        cluster_ip = svc.spec.cluster_ip
        return K8sService(
            name=svc.metadata.name,
            namespace=ns,
            cluster_ip=cluster_ip if cluster_ip and cluster_ip != "None" else None,
            ports=[p.port for p in (svc.spec.ports or [])],
        )
