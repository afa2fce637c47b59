"""Main CLI entry point for meshdns."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

# Create the main app
app = typer.Typer(
    name="meshdns",
    help="Forward the service mesh domain through the cluster DNS (CoreDNS or KubeDNS)",
    no_args_is_help=True,
)

console = Console()


# Global options stored in context
class GlobalOptions:
    def __init__(self):
        self.kubeconfig: Optional[Path] = None
        self.context: Optional[str] = None
        self.mesh_domain: str = "traefik.mesh"
        self.namespace: str = "kube-system"
        self.debug: bool = False


# ============================================================================
# DNS Commands
# ============================================================================


@app.command("detect")
def detect(ctx: typer.Context):
    """Show which DNS provider runs in the cluster."""
    from meshdns.cli.commands.dns import detect

    asyncio.run(detect(ctx.obj))


@app.command("configure")
def configure(
    ctx: typer.Context,
    mesh_namespace: str = typer.Option("traefik-mesh", "--mesh-namespace", help="Namespace of the mesh DNS service"),
    service: str = typer.Option("traefik-mesh-dns", "--service", "-s", help="Mesh DNS service name"),
    port: int = typer.Option(53, "--port", "-p", help="Mesh DNS service port"),
):
    """Forward the mesh domain to the mesh DNS service."""
    from meshdns.cli.commands.dns import configure

    asyncio.run(configure(mesh_namespace, service, port, ctx.obj))


@app.command("restore")
def restore(ctx: typer.Context):
    """Remove the mesh domain forwarding."""
    from meshdns.cli.commands.dns import restore

    asyncio.run(restore(ctx.obj))


# ============================================================================
# Version Command
# ============================================================================


@app.command("version")
def version():
    """Show version information."""
    from meshdns import __version__

    console.print(f"meshdns version {__version__}")


# ============================================================================
# Main Callback (Global Options)
# ============================================================================


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Debug logging"),
    kubeconfig: Optional[Path] = typer.Option(
        None, "--kubeconfig", help="Path to kubeconfig"
    ),
    context: Optional[str] = typer.Option(
        None, "--context", help="Kubeconfig context"
    ),
    mesh_domain: str = typer.Option(
        "traefik.mesh", "--mesh-domain", "-d", help="Domain served by the mesh DNS"
    ),
    namespace: str = typer.Option(
        "kube-system", "--namespace", "-n", help="Namespace of the cluster DNS"
    ),
):
    """Mesh DNS integration."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    ctx.ensure_object(GlobalOptions)
    ctx.obj.debug = debug
    ctx.obj.kubeconfig = kubeconfig
    ctx.obj.context = context
    ctx.obj.mesh_domain = mesh_domain
    ctx.obj.namespace = namespace


if __name__ == "__main__":
    app()
