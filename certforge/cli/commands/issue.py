"""``certforge issue`` / ``mint`` / ``confirm``: credential issuance.

``issue`` runs the whole pipeline. ``mint`` retries only the ledger step
against metadata that is already pinned. ``confirm`` resumes waiting for
a transaction whose confirmation timed out.

Exit codes: 0 success, 1 failure, 2 ambiguous mint (confirmed, no token id).
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console

from certforge.cli.commands import _clients
from certforge.cli.render import render_issuance_result, render_progress
from certforge.core.errors import CertforgeError
from certforge.core.issuance import IssuanceOrchestrator
from certforge.models.credentials import CredentialInput, ImageSource
from certforge.models.progress import IssuanceProgress
from certforge.models.results import IssuanceOutcome, IssuanceResult

console = Console()

_EXIT_CODES = {
    IssuanceOutcome.SUCCESS: 0,
    IssuanceOutcome.FAILED: 1,
    IssuanceOutcome.AMBIGUOUS: 2,
}


def _print_progress(progress: IssuanceProgress) -> None:
    console.print(render_progress(progress))


def _finish(result: IssuanceResult) -> None:
    console.print(render_issuance_result(result))
    code = _EXIT_CODES[result.outcome]
    if code:
        raise typer.Exit(code=code)


def _orchestrator(*, signing: bool = True) -> IssuanceOrchestrator:
    """Wire the pipeline; waiting on a known transaction needs no key."""
    config = _clients.load_config()
    build = _clients.build_writer if signing else _clients.build_reader
    try:
        ledger = build(config)
    except CertforgeError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    return IssuanceOrchestrator(_clients.build_store(config), ledger, config=config)


def issue_cmd(
    image: Path = typer.Option(..., "--image", "-i", help="Certificate image file."),
    name: str = typer.Option(..., "--name", "-n", help="Credential title."),
    issuer: str = typer.Option(..., "--issuer", help="Issuer display name."),
    recipient: str = typer.Option(..., "--recipient", help="Recipient display name."),
    recipient_address: str = typer.Option(
        ..., "--recipient-address", "-r", help="Recipient ledger address."
    ),
    issue_date: datetime = typer.Option(
        ..., "--issue-date", formats=["%Y-%m-%d"], help="Issue date (YYYY-MM-DD)."
    ),
    description: str = typer.Option("", "--description", "-d"),
    issuer_address: str = typer.Option(None, "--issuer-address"),
    expires: datetime = typer.Option(
        None, "--expires", formats=["%Y-%m-%d"], help="Expiration date (YYYY-MM-DD)."
    ),
    category: str = typer.Option(None, "--category"),
    credential_id: str = typer.Option(None, "--credential-id"),
    skills: list[str] = typer.Option([], "--skill", help="Repeat for each skill."),
    mime_type: str = typer.Option("image/png", "--mime-type"),
) -> None:
    """Upload the image and metadata, then mint the credential."""
    data = CredentialInput(
        name=name,
        description=description,
        issuer_name=issuer,
        issuer_address=issuer_address,
        recipient_name=recipient,
        recipient_address=recipient_address,
        issue_date=issue_date.date(),
        expiration_date=expires.date() if expires else None,
        category=category,
        credential_id=credential_id,
        skills=tuple(skills),
    )
    source = ImageSource(location=str(image), mime_type=mime_type, display_name=image.name)
    result = _orchestrator().issue(data, source, on_progress=_print_progress)
    _finish(result)


def mint_cmd(
    recipient_address: str = typer.Argument(..., help="Recipient ledger address."),
    metadata_uri: str = typer.Argument(..., help="Already pinned metadata URI."),
) -> None:
    """Mint against existing metadata (retry after a failed mint)."""
    result = _orchestrator().mint_existing(
        recipient_address, metadata_uri, on_progress=_print_progress
    )
    _finish(result)


def confirm_cmd(
    tx_hash: str = typer.Argument(..., help="Hash of a submitted mint transaction."),
) -> None:
    """Resume waiting for a mint transaction."""
    result = _orchestrator(signing=False).confirm_pending(tx_hash, on_progress=_print_progress)
    _finish(result)
