"""``certforge revoke TOKEN_ID``: mark a credential invalid on the ledger.

Irreversible, so the command asks for confirmation unless ``--yes``.
"""

from __future__ import annotations

import typer
from rich.console import Console

from certforge.cli.commands import _clients
from certforge.cli.render import render_revocation_result
from certforge.core.errors import CertforgeError
from certforge.core.revocation import RevocationOrchestrator

console = Console()


def revoke_cmd(
    token_id: int = typer.Argument(..., min=1, help="Token id to revoke."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Revoke a credential. This cannot be undone."""
    if not yes:
        typer.confirm(f"Revoke certificate #{token_id}? This cannot be undone", abort=True)

    config = _clients.load_config()
    try:
        ledger = _clients.build_writer(config)
    except CertforgeError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    result = RevocationOrchestrator(ledger).revoke(token_id)
    console.print(render_revocation_result(result))
    if not result.success:
        raise typer.Exit(code=1)
