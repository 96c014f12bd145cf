"""``certforge check``: check the content store and the ledger.

Never raises: each check reports ready / not ready so operators can see
every misconfiguration at once.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from certforge.cli.commands import _clients
from certforge.core.errors import CertforgeError

console = Console()


def check_cmd() -> None:
    """Check storage credentials, ledger connectivity, and signing key."""
    config = _clients.load_config()
    table = Table(title="certforge readiness")
    table.add_column("Component", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Detail")

    ready = True

    with _clients.build_store(config) as store:
        storage_ok = store.validate_connection()
    ready &= storage_ok
    table.add_row(
        "Content store",
        "[green]OK[/green]" if storage_ok else "[red]FAIL[/red]",
        config.storage_api_base,
    )

    try:
        reader = _clients.build_reader(config)
        total = reader.total_supply()
        table.add_row("Ledger", "[green]OK[/green]", f"{total} certificate(s) minted")
    except CertforgeError as exc:
        ready = False
        table.add_row("Ledger", "[red]FAIL[/red]", str(exc))

    table.add_row(
        "Signing key",
        "[green]OK[/green]" if config.signing_key_configured else "[yellow]ABSENT[/yellow]",
        "server-side mint/revoke" if config.signing_key_configured else "read-only mode",
    )

    console.print(table)
    if not ready:
        raise typer.Exit(code=1)
