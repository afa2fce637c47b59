"""Corefile editing for the mesh server block.

The mesh owns a single server block, appended to the Corefile between two
marker comments. Everything outside the markers is left byte-for-byte
untouched, so no full Corefile parser is needed here.
"""

from packaging.version import Version

from meshdns.core.errors import MalformedDataError

BLOCK_BEGIN = "#### Begin Traefik Mesh Block"
BLOCK_END = "#### End Traefik Mesh Block"

# Ordered newest first: the first entry whose minimum version is met wins.
# CoreDNS 1.4.0 removed the proxy plugin in favour of forward.
DIRECTIVES: tuple[tuple[Version, str], ...] = (
    (Version("1.4.0"), "forward"),
    (Version("0"), "proxy"),
)

MESH_BLOCK_TEMPLATE = """{begin}
{domain}:53 {{
    errors
    cache 30
    {directive} . {address}
}}
{end}
"""


def directive_for(version: Version | str) -> str:
    """Return the forwarding directive understood by a CoreDNS version."""
    if isinstance(version, str):
        version = Version(version)

    for minimum, directive in DIRECTIVES:
        if version >= minimum:
            return directive

    raise ValueError(f"No directive known for CoreDNS {version}")


def mesh_block(mesh_domain: str, dns_address: str, directive: str) -> str:
    """Render the marker-wrapped server block forwarding the mesh domain."""
    return MESH_BLOCK_TEMPLATE.format(
        begin=BLOCK_BEGIN,
        end=BLOCK_END,
        domain=mesh_domain,
        directive=directive,
        address=dns_address,
    )


def is_patched(corefile: str) -> bool:
    """Check whether the Corefile carries a mesh block."""
    return BLOCK_BEGIN in corefile


def _block_span(corefile: str) -> tuple[int, int] | None:
    """Locate the mesh block, including one leading and one trailing newline."""
    start = corefile.find(BLOCK_BEGIN)
    if start == -1:
        return None

    end = corefile.find(BLOCK_END, start)
    if end == -1:
        raise MalformedDataError(
            "Corefile has a mesh block begin marker without an end marker",
            help_text=f"Remove the line {BLOCK_BEGIN!r} or add {BLOCK_END!r} after the block",
        )

    end += len(BLOCK_END)
    if corefile[end:end + 1] == "\n":
        end += 1
    if start > 0 and corefile[start - 1] == "\n":
        start -= 1

    return start, end


def _normalize(text: str) -> list[str]:
    # Marker comments and blank lines are not part of the block's meaning.
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line and line not in (BLOCK_BEGIN, BLOCK_END)]


def same_block(a: str, b: str) -> bool:
    """Compare two mesh blocks ignoring markers, indentation and blank lines."""
    return _normalize(a) == _normalize(b)


def current_block(corefile: str) -> str | None:
    """Return the mesh block currently embedded in the Corefile, if any."""
    span = _block_span(corefile)
    if span is None:
        return None
    return corefile[span[0]:span[1]]


def patch(corefile: str, mesh_domain: str, dns_address: str, directive: str) -> str:
    """Append the mesh block to the Corefile.

    A Corefile already carrying an identical block is returned unchanged. A
    stale block (other directive or address) is replaced.
    """
    block = mesh_block(mesh_domain, dns_address, directive)

    existing = current_block(corefile)
    if existing is not None:
        if same_block(existing, block):
            return corefile
        corefile = restore(corefile)

    return f"{corefile}\n{block}"


def restore(corefile: str) -> str:
    """Remove the mesh block, giving back the Corefile as it was before patch."""
    span = _block_span(corefile)
    if span is None:
        return corefile
    return corefile[:span[0]] + corefile[span[1]:]


# ============================================================================
# Custom ConfigMap variant
# ============================================================================


def patch_custom(existing: str | None, mesh_domain: str, dns_address: str, directive: str) -> str:
    """Compute the value of the mesh entry in the custom ConfigMap.

    An existing value holding the same server block, with or without marker
    comments, is kept as is.
    """
    block = mesh_block(mesh_domain, dns_address, directive)
    if existing is not None and same_block(existing, block):
        return existing
    return f"\n{block}"


def restore_custom(data: dict[str, str], key: str) -> dict[str, str]:
    """Drop the mesh entry from custom ConfigMap data, keeping other keys."""
    return {k: v for k, v in data.items() if k != key}
