"""femtorelease CLI: Typer-based command-line interface.

Provides the ``femtorelease`` command with subcommands for building the
binary matrix, publishing a release and listing targets.

All output uses Rich for formatted terminal display.
"""
