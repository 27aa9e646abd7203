"""Output utilities for CLI commands with clear intent.

user_output: human-facing messages, written to stderr
machine_output: structured data (JSON, paths), written to stdout
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Print a message intended for a human reader (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Print output intended for other programs (stdout)."""
    click.echo(message, nl=nl)


def error_prefix() -> str:
    return click.style("Error: ", fg="red")
