"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, logging setup and the JSON envelope shared by commands.
"""

import json
import logging
from typing import Any, Dict

import click


def echo_error(message: str) -> None:
    """Print an error message with a red cross to stderr."""
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """Print a warning message with a yellow alert symbol."""
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """Print an informational message, dimmed."""
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool) -> None:
    """
    Route library logs to stderr.

    Args:
        verbose (bool): DEBUG when set, WARNING otherwise.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def json_envelope(command: str, data: Dict[str, Any] | None = None, error: Exception | None = None) -> str:
    """Serialize a command result as {"meta": ..., "data"|"error": ...}."""
    if error is not None:
        return json.dumps({
            "meta": {"command": command, "status": "error"},
            "error": {"type": type(error).__name__, "message": str(error)},
        })
    return json.dumps({
        "meta": {"command": command, "status": "success"},
        "data": data,
    })
