"""``certforge scan`` / ``info``: read-only ledger views."""

from __future__ import annotations

import typer
from rich.console import Console

from certforge.cli.commands import _clients
from certforge.cli.render import render_credential, render_report
from certforge.core.errors import CertforgeError
from certforge.core.scanner import OwnershipScanner

console = Console()


def scan_cmd(
    owner: str = typer.Argument(..., help="Owner ledger address."),
    metadata: bool = typer.Option(
        True, "--metadata/--no-metadata", help="Fetch each credential's metadata."
    ),
) -> None:
    """List credentials owned by an address, with statistics."""
    config = _clients.load_config()
    try:
        reader = _clients.build_reader(config)
        with _clients.build_store(config) as store:
            scanner = OwnershipScanner(reader, store, max_workers=config.hydration_workers)
            report = scanner.report(owner, with_metadata=metadata)
    except CertforgeError as exc:
        console.print(f"[bold red]Scan failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if not report.credentials:
        console.print(f"[dim]No credentials owned by {owner}.[/dim]")
    console.print(render_report(report))


def info_cmd(
    token_id: int = typer.Argument(..., min=1, help="Token id to inspect."),
) -> None:
    """Show the on-chain record of one credential."""
    config = _clients.load_config()
    try:
        credential = _clients.build_reader(config).get_info(token_id)
    except CertforgeError as exc:
        console.print(f"[bold red]Lookup failed:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(render_credential(credential))
