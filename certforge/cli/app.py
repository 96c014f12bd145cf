"""Main Typer application: imports and registers all CLI commands.

Entry point: ``certforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from certforge.cli.commands import _clients
from certforge.cli.commands.check import check_cmd
from certforge.cli.commands.issue import confirm_cmd, issue_cmd, mint_cmd
from certforge.cli.commands.revoke import revoke_cmd
from certforge.cli.commands.scan import info_cmd, scan_cmd
from certforge.logging_setup import configure_logging

app = typer.Typer(
    name="certforge",
    help="certforge: issue, revoke and reconcile verifiable certificates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _main(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level; defaults to CERTFORGE_LOG_LEVEL."
    ),
) -> None:
    configure_logging(log_level or _clients.load_config().log_level)


# Register subcommands
app.command(name="check", help="Check the content store and the ledger.")(check_cmd)
app.command(name="issue", help="Upload and mint a new certificate.")(issue_cmd)
app.command(name="mint", help="Mint against already pinned metadata.")(mint_cmd)
app.command(name="confirm", help="Resume waiting for a mint transaction.")(confirm_cmd)
app.command(name="revoke", help="Revoke a certificate.")(revoke_cmd)
app.command(name="info", help="Show one certificate's on-chain record.")(info_cmd)
app.command(name="scan", help="List certificates owned by an address.")(scan_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
