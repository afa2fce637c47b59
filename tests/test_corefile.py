"""Tests for Corefile mesh block editing."""

import pytest
from packaging.version import Version

from conftest import BASE_COREFILE, MESH_BLOCK, PATCHED_COREFILE
from meshdns.core.coredns import corefile as editor
from meshdns.core.errors import MalformedDataError

ADDRESS = "10.10.10.10:53"


def do_patch(text: str, directive: str = "forward", address: str = ADDRESS) -> str:
    return editor.patch(text, "traefik.mesh", address, directive)


class TestDirectiveFor:
    """Tests for directive selection by CoreDNS version."""

    @pytest.mark.parametrize("version", ["1.4.0", "1.6.2", "1.8.7", "1.11.1"])
    def test_forward_from_1_4(self, version):
        assert editor.directive_for(version) == "forward"

    @pytest.mark.parametrize("version", ["1.3.0", "1.3.1", "1.2.6"])
    def test_proxy_before_1_4(self, version):
        assert editor.directive_for(version) == "proxy"

    def test_accepts_version_objects(self):
        assert editor.directive_for(Version("1.4.0")) == "forward"


class TestPatch:
    """Tests for patching a Corefile."""

    def test_appends_mesh_block(self):
        assert do_patch(BASE_COREFILE) == PATCHED_COREFILE

    def test_proxy_directive(self):
        result = do_patch(BASE_COREFILE, directive="proxy")
        assert "    proxy . 10.10.10.10:53\n" in result
        assert "forward . 10.10.10.10" not in result

    def test_idempotent(self):
        once = do_patch(BASE_COREFILE)
        assert do_patch(once) == once

    def test_already_patched_is_untouched(self):
        assert do_patch(PATCHED_COREFILE) is PATCHED_COREFILE

    def test_stale_directive_is_replaced(self):
        stale = do_patch(BASE_COREFILE, directive="proxy")
        assert do_patch(stale) == PATCHED_COREFILE

    def test_stale_address_is_replaced(self):
        stale = do_patch(BASE_COREFILE, address="10.0.0.1:53")
        assert do_patch(stale) == PATCHED_COREFILE

    def test_is_patched(self):
        assert not editor.is_patched(BASE_COREFILE)
        assert editor.is_patched(do_patch(BASE_COREFILE))
        assert not editor.is_patched(editor.restore(do_patch(BASE_COREFILE)))


class TestRestore:
    """Tests for removing the mesh block."""

    @pytest.mark.parametrize(
        "original",
        [
            BASE_COREFILE,
            BASE_COREFILE.rstrip("\n"),
            BASE_COREFILE + "\n\n",
            "",
            ".:53 {\n    forward . 8.8.8.8\n}\n\nexample.org:53 {\n    file db.example.org\n}\n",
        ],
    )
    def test_round_trip(self, original):
        assert editor.restore(do_patch(original)) == original

    def test_repeated_cycles(self):
        text = BASE_COREFILE
        for _ in range(3):
            text = editor.restore(do_patch(do_patch(text)))
        assert text == BASE_COREFILE

    def test_not_patched_is_noop(self):
        assert editor.restore(BASE_COREFILE) == BASE_COREFILE

    def test_keeps_trailing_content(self):
        corefile = BASE_COREFILE + "\n" + MESH_BLOCK + "\n# This is test data that must be present\n"
        expected = BASE_COREFILE + "\n# This is test data that must be present\n"
        assert editor.restore(corefile) == expected

    def test_missing_end_marker(self):
        corefile = BASE_COREFILE + "\n#### Begin Traefik Mesh Block\ntraefik.mesh:53 {\n}\n"
        with pytest.raises(MalformedDataError):
            editor.restore(corefile)


class TestCustomVariant:
    """Tests for the coredns-custom ConfigMap entry."""

    def test_new_entry(self):
        value = editor.patch_custom(None, "traefik.mesh", ADDRESS, "forward")
        assert value == "\n" + MESH_BLOCK

    def test_marker_wrapped_entry_is_patched(self):
        assert editor.patch_custom(MESH_BLOCK, "traefik.mesh", ADDRESS, "forward") is MESH_BLOCK

    def test_bare_entry_is_patched(self):
        bare = "traefik.mesh:53 {\n  errors\n  cache 30\n  forward . 10.10.10.10:53\n}\n"
        assert editor.patch_custom(bare, "traefik.mesh", ADDRESS, "forward") is bare

    def test_different_entry_is_replaced(self):
        old = MESH_BLOCK.replace("10.10.10.10", "10.0.0.1")
        assert editor.patch_custom(old, "traefik.mesh", ADDRESS, "forward") == "\n" + MESH_BLOCK

    def test_restore_keeps_other_keys(self):
        data = {"traefik.mesh.server": MESH_BLOCK, "test.server": "test:53 {}\n"}
        assert editor.restore_custom(data, "traefik.mesh.server") == {"test.server": "test:53 {}\n"}
