"""Shared Rich console for the CLI."""

from rich.console import Console

console = Console()


def report_step(message: str) -> None:
    """Print a progress message for a deployment step.

    Args:
        message: Progress message to print.
    """
    console.print(f"[bright_white]- {message}[/bright_white]")
