"""
CLI logger adapter - implements LoggerProtocol for command-line usage.

Writes diagnostics to stderr so they never interleave with the transcript on stdout.
"""

from __future__ import annotations

import typer


class CLILogger:
    """
    Logger implementation for CLI (implements LoggerProtocol from protocols).

    Outputs messages to stderr with optional verbose mode.
    """

    def __init__(self, verbose: bool = False) -> None:
        """
        Initialize CLI logger.

        Args:
            verbose: If True, show info messages. If False, only warnings.
        """
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Log info message (only if verbose)."""
        if self.verbose:
            typer.echo(f'[INFO] {message}', err=True)

    def warning(self, message: str) -> None:
        """Log warning message."""
        typer.secho(f'[WARNING] {message}', fg=typer.colors.YELLOW, err=True)
