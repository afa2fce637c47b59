"""Detection of the cluster DNS provider."""

import logging
import re

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from meshdns.core.errors import MissingResourceError, NoKnownProviderError, UnsupportedVersionError
from meshdns.core.k8s.client import K8sClient
from meshdns.core.models import K8sContainer, K8sDeployment, MeshDNSSettings, Provider

logger = logging.getLogger(__name__)

SUPPORTED_COREDNS_VERSIONS = SpecifierSet(">=1.3.0,<1.12.0")

# Accepts "1.6.7", "v1.8.0", "1.6.7-eksbuild.1", "1.3".
_TAG_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?")


def image_version(image: str) -> Version | None:
    """Extract the semantic version from an image reference's tag."""
    reference = image.split("@", 1)[0]
    last = reference.rsplit("/", 1)[-1]
    if ":" not in last:
        return None

    match = _TAG_VERSION_RE.match(last.split(":", 1)[1])
    if not match:
        return None

    major, minor, micro = match.groups()
    return Version(f"{major}.{minor}.{micro or 0}")


def coredns_container(deployment: K8sDeployment) -> K8sContainer | None:
    """Pick the CoreDNS container of a deployment."""
    for container in deployment.containers:
        repository = container.image.split("@", 1)[0].rsplit("/", 1)[-1].split(":", 1)[0]
        if repository == "coredns":
            return container
    return deployment.containers[0] if deployment.containers else None


def coredns_version(deployment: K8sDeployment) -> Version:
    """Return the CoreDNS version of a deployment, or raise if it is not supported."""
    container = coredns_container(deployment)
    image = container.image if container else ""

    version = image_version(image)
    if version is None:
        raise UnsupportedVersionError(image)
    if version not in SUPPORTED_COREDNS_VERSIONS:
        raise UnsupportedVersionError(image, str(version))

    return version


class ProviderClassifier:
    """
    Finds which DNS provider runs in the cluster.

    CoreDNS is looked up first, then KubeDNS. Nothing is written.
    """

    def __init__(self, k8s: K8sClient, settings: MeshDNSSettings | None = None):
        self.k8s = k8s
        self.settings = settings or MeshDNSSettings()

    async def detect(self) -> Provider:
        """Return the installed provider.

        Raises UnsupportedVersionError when CoreDNS runs a version that cannot
        be patched, and NoKnownProviderError when neither provider is found.
        In both cases the provider is unknown.
        """
        ns = self.settings.system_namespace

        try:
            deployment = await self.k8s.get_deployment(self.settings.coredns_deployment, ns)
        except MissingResourceError:
            logger.debug("No CoreDNS deployment in %s", ns)
        else:
            version = coredns_version(deployment)
            logger.info("Detected CoreDNS %s", version)
            return Provider.COREDNS

        try:
            await self.k8s.get_deployment(self.settings.kubedns_deployment, ns)
        except MissingResourceError:
            logger.debug("No KubeDNS deployment in %s", ns)
        else:
            logger.info("Detected KubeDNS")
            return Provider.KUBEDNS

        raise NoKnownProviderError(ns)
