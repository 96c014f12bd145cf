"""Rich renderables for progress snapshots, results, and ownership reports.

Color scheme
------------
- dim      : IDLE
- cyan     : UPLOADING
- yellow   : MINTING / CONFIRMING
- green    : COMPLETE
- bold red : ERROR
"""

from __future__ import annotations

from datetime import datetime, timezone

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from certforge.models.ledger import HydratedCredential, OnChainCredential
from certforge.models.progress import (
    CompleteProgress,
    ConfirmingProgress,
    ErrorProgress,
    IssuanceProgress,
    IssuanceStage,
    UploadingProgress,
)
from certforge.models.results import (
    IssuanceOutcome,
    IssuanceResult,
    OwnershipReport,
    RevocationResult,
)

_STAGE_STYLES: dict[IssuanceStage, str] = {
    IssuanceStage.IDLE: "dim",
    IssuanceStage.UPLOADING: "cyan",
    IssuanceStage.MINTING: "yellow",
    IssuanceStage.CONFIRMING: "yellow",
    IssuanceStage.COMPLETE: "bold green",
    IssuanceStage.ERROR: "bold red",
}

_OUTCOME_STYLES: dict[IssuanceOutcome, str] = {
    IssuanceOutcome.SUCCESS: "green",
    IssuanceOutcome.AMBIGUOUS: "yellow",
    IssuanceOutcome.FAILED: "red",
}


def _ts(unix_seconds: int) -> str:
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def render_progress(progress: IssuanceProgress) -> Text:
    """One line per snapshot: ``[stage] message (details)``."""
    style = _STAGE_STYLES[progress.stage]
    line = Text()
    line.append(f"[{progress.stage.value:>10}] ", style=style)
    line.append(progress.message)
    if isinstance(progress, UploadingProgress):
        line.append(f" ({progress.percent}%)", style="dim")
    elif isinstance(progress, (ConfirmingProgress, CompleteProgress)):
        line.append(f" tx={progress.tx_hash}", style="dim")
    elif isinstance(progress, ErrorProgress):
        line.append(f" [{progress.failed_stage.value}/{progress.error_type}]", style="dim")
    return line


def render_issuance_result(result: IssuanceResult) -> Panel:
    style = _OUTCOME_STYLES[result.outcome]
    rows = [f"[bold]Outcome:[/bold]        [{style}]{result.outcome.value}[/{style}]"]
    if result.token_id is not None:
        rows.append(f"[bold]Token ID:[/bold]       {result.token_id}")
    if result.tx_hash:
        rows.append(f"[bold]Transaction:[/bold]    {result.tx_hash}")
    if result.image_uri:
        rows.append(f"[bold]Image:[/bold]          {result.image_uri}")
    if result.metadata_uri:
        rows.append(f"[bold]Metadata:[/bold]       {result.metadata_uri}")
    if result.failed_stage is not None:
        rows.append(f"[bold]Failed stage:[/bold]   {result.failed_stage.value}")
        rows.append(f"[bold]Error:[/bold]          [red]{result.error}[/red]")
    return Panel(
        "\n".join(rows),
        title="[bold]Issuance[/bold]",
        border_style=style,
        padding=(1, 2),
    )


def render_revocation_result(result: RevocationResult) -> Panel:
    if result.success:
        body = f"[green]Token {result.token_id} revoked.[/green]\n[dim]tx={result.tx_hash}[/dim]"
        border = "green"
    else:
        body = f"[red]Revocation of token {result.token_id} failed:[/red] {result.error}"
        border = "red"
    return Panel(body, title="[bold]Revocation[/bold]", border_style=border, padding=(1, 2))


def render_credential(credential: OnChainCredential) -> Panel:
    status = "[red]REVOKED[/red]" if credential.revoked else (
        "[green]VALID[/green]" if credential.is_valid else "[yellow]INVALID[/yellow]"
    )
    rows = [
        f"[bold]Token ID:[/bold]   {credential.token_id}",
        f"[bold]Status:[/bold]     {status}",
        f"[bold]Owner:[/bold]      {credential.owner}",
        f"[bold]Issuer:[/bold]     {credential.issuer}",
        f"[bold]Issued at:[/bold]  {_ts(credential.issued_at)}",
        f"[bold]Metadata:[/bold]   {credential.metadata_uri}",
    ]
    return Panel("\n".join(rows), title="[bold]Credential[/bold]", padding=(1, 2))


def render_report(report: OwnershipReport) -> Group:
    """Credential table followed by the aggregate statistics."""
    table = Table(title=f"Credentials owned by {report.owner}")
    table.add_column("Token", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Issuer")
    table.add_column("Issued", style="dim")
    table.add_column("Status", justify="center")

    for cred in report.credentials:
        meta = cred.metadata if isinstance(cred, HydratedCredential) else None
        issuer_attr = meta.attribute("Issuer") if meta else None
        status = "[red]Revoked[/red]" if cred.revoked else (
            "[green]Valid[/green]" if cred.is_valid else "[yellow]Invalid[/yellow]"
        )
        table.add_row(
            str(cred.token_id),
            meta.name if meta else "[dim]no metadata[/dim]",
            str(issuer_attr.value) if issuer_attr else cred.issuer,
            _ts(cred.issued_at),
            status,
        )

    stats = report.stats
    summary = Panel(
        "\n".join([
            f"[bold]Certificates:[/bold]  {stats.total_count}",
            f"[bold]Verified:[/bold]      {stats.verified_percent:.0f}%",
            f"[bold]On-Chain:[/bold]      {stats.on_ledger_count}",
            f"[bold]Revoked:[/bold]       {stats.revoked_count}",
        ]),
        title="[bold]Statistics[/bold]",
        border_style="blue",
    )
    return Group(table, summary)
