"""Shared console helpers for create-modern-app.

All user-facing output goes through a single Rich ``Console`` so warnings,
errors and the download spinner share one stream and can be captured in tests.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a dimmed informational line (used for ``--verbose`` details)."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_banner(project_name: str, template: str) -> None:
    """Announce which project is being created and from which template."""
    console.print()
    console.print(
        f"[cyan]Creating [bold]{escape(project_name)}[/bold] with template: "
        f"[yellow]{escape(template)}[/yellow][/cyan]"
    )
    console.print()


def print_next_steps(project_name: str, steps: list[str]) -> None:
    """Print the post-creation guidance inside a panel.

    Args:
        project_name: Name of the project that was just created.
        steps: Shell commands the user should run next, in order.
    """
    body = "\n".join(f"  [bold]{escape(step)}[/bold]" for step in steps)
    console.print()
    console.print(
        Panel(
            f"[green]Project [bold]{escape(project_name)}[/bold] is ready.[/green]\n\n"
            f"Next steps:\n{body}",
            title="[bold]Done[/bold]",
            border_style="green",
        )
    )


def create_progress() -> Progress:
    """Create a Rich spinner for the template download.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
