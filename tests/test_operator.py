"""Tests for the mesh DNS operator."""

import pytest

from conftest import BASE_COREFILE, PATCHED_COREFILE
from meshdns.core.errors import NoKnownProviderError
from meshdns.core.k8s.operator import MeshDNSOperator
from meshdns.core.models import MeshDNSSettings, Provider


class TestMeshDNSOperator:
    """Tests for provider dispatch."""

    @pytest.mark.asyncio
    async def test_coredns_lifecycle(self, coredns_cluster):
        operator = MeshDNSOperator(coredns_cluster)

        assert await operator.configure("traefik-mesh", "traefik-mesh-dns", 53) == Provider.COREDNS
        assert coredns_cluster.data("coredns")["Corefile"] == PATCHED_COREFILE

        assert await operator.restore() == Provider.COREDNS
        assert coredns_cluster.data("coredns")["Corefile"] == BASE_COREFILE

    @pytest.mark.asyncio
    async def test_kubedns_lifecycle(self, kubedns_cluster):
        operator = MeshDNSOperator(kubedns_cluster)

        assert await operator.configure("traefik-mesh", "traefik-mesh-dns") == Provider.KUBEDNS
        assert kubedns_cluster.data("kube-dns")["stubDomains"] == '{"traefik.mesh":["10.10.10.10:53"]}'

        await operator.restore()
        assert kubedns_cluster.data("kube-dns")["stubDomains"] == ""

    @pytest.mark.asyncio
    async def test_custom_mesh_domain(self, kubedns_cluster):
        operator = MeshDNSOperator(kubedns_cluster, MeshDNSSettings(mesh_domain="Mesh.Local."))

        await operator.configure("traefik-mesh", "traefik-mesh-dns", 5353)

        assert kubedns_cluster.data("kube-dns")["stubDomains"] == '{"mesh.local":["10.10.10.10:5353"]}'

    @pytest.mark.asyncio
    async def test_detects_once(self, coredns_cluster):
        operator = MeshDNSOperator(coredns_cluster)

        first = await operator.configurator()
        assert await operator.configurator() is first

    @pytest.mark.asyncio
    async def test_no_provider(self, k8s):
        with pytest.raises(NoKnownProviderError):
            await MeshDNSOperator(k8s).configure("traefik-mesh", "traefik-mesh-dns", 53)
        assert k8s.writes == []
