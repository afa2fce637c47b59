"""Cluster DNS configuration commands."""

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from meshdns.core.errors import MeshDNSError
from meshdns.core.k8s.client import K8sClient
from meshdns.core.k8s.operator import MeshDNSOperator
from meshdns.core.models import MeshDNSSettings

console = Console()


def get_operator(options) -> MeshDNSOperator:
    """Build an operator from the global CLI options."""
    try:
        settings = MeshDNSSettings(
            mesh_domain=options.mesh_domain,
            system_namespace=options.namespace,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid options:[/] {e.errors()[0]['msg']}")
        raise typer.Exit(2)

    k8s = K8sClient(
        kubeconfig=str(options.kubeconfig) if options.kubeconfig else None,
        context=options.context,
        namespace=options.namespace,
    )
    return MeshDNSOperator(k8s, settings)


def fail(error: MeshDNSError):
    console.print(f"[red]Error:[/] {error.message}")
    if error.help_text:
        console.print(f"[dim]{error.help_text}[/]")
    raise typer.Exit(1)


async def detect(options):
    """Show the detected DNS provider."""
    operator = get_operator(options)

    try:
        provider = await operator.detect()
    except MeshDNSError as e:
        fail(e)

    table = Table(title="Cluster DNS")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Provider", provider.value)
    table.add_row("Namespace", operator.settings.system_namespace)
    table.add_row("Mesh domain", operator.settings.mesh_domain)
    console.print(table)


async def configure(mesh_namespace: str, service: str, port: int, options):
    """Forward the mesh domain to the mesh DNS service."""
    operator = get_operator(options)

    try:
        provider = await operator.configure(mesh_namespace, service, port)
    except MeshDNSError as e:
        fail(e)

    console.print(
        f"[green]✓[/] {provider.value} forwards {operator.settings.mesh_domain} "
        f"to {service}.{mesh_namespace}:{port}"
    )


async def restore(options):
    """Remove the mesh domain forwarding."""
    operator = get_operator(options)

    try:
        provider = await operator.restore()
    except MeshDNSError as e:
        fail(e)

    console.print(f"[green]✓[/] {provider.value} configuration restored")
