"""certforge CLI: Typer-based command-line interface.

Provides the ``certforge`` command with subcommands for checking
connectivity, issuing, minting, confirming, revoking, inspecting and
scanning credentials.

All output uses Rich for formatted terminal display.
"""
