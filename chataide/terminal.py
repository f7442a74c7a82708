# chataide/terminal.py
# -----------------------------------------------------------------------------
# Gemeinsame rich-Konsole und Ausgabe-Helfer für Hinweise und Diagnosen.
# -----------------------------------------------------------------------------

from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()


def shorten(txt: str, n: int = 1200) -> str:
    t = " ".join((txt or "").split())
    return (t[:n] + " …") if len(t) > n else t


def notice(message: str, style: str = "yellow") -> None:
    console.print(f"[{style}]{message}[/{style}]")


def render_extraction(diagnostics) -> Panel:
    """Diagnose-Bündel einer Extraktion als Panel (Treffer je Kette)."""
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Kette")
    table.add_column("Treffer", justify="right")
    for chain, count in diagnostics.chain_counts.items():
        marker = " ←" if chain == diagnostics.chain_used else ""
        table.add_row(f"{chain}{marker}", str(count))

    lines = [
        f"[bold]Site:[/bold] {diagnostics.site}",
        f"[bold]URL:[/bold] {escape(diagnostics.url) or '-'}",
        f"[bold]Nachrichten:[/bold] {diagnostics.message_count}"
        + (" [dim](generischer Fallback)[/dim]" if diagnostics.fell_back else ""),
    ]
    for i, sample in enumerate(diagnostics.sample):
        lines.append(f"[dim]{i:02d}:[/dim] {escape(shorten(sample, 120))}")

    grid = Table.grid()
    grid.add_row("\n".join(lines))
    grid.add_row(table)
    return Panel.fit(grid, title="Scan-Diagnose", border_style="cyan")


def render_attempts(attempts: Iterable) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Strategie")
    table.add_column("OK")
    table.add_column("Inhalt danach")
    table.add_column("Fehler")
    for i, attempt in enumerate(attempts, start=1):
        strategy = attempt.strategy.value
        if attempt.detail:
            strategy += f" [dim]({attempt.detail})[/dim]"
        table.add_row(
            str(i),
            strategy,
            "[green]ja[/green]" if attempt.succeeded else "[red]nein[/red]",
            escape(shorten(attempt.observed_content or "", 80)) or "[dim]-[/dim]",
            escape(attempt.error or ""),
        )
    return table


def render_replies(replies) -> Panel:
    body = (
        f"[bold green]1 (empfohlen):[/bold green] {escape(replies.recommended)}\n"
        f"[bold]2:[/bold] {escape(replies.backup1)}\n"
        f"[bold]3:[/bold] {escape(replies.backup2)}"
    )
    return Panel.fit(body, title="Antwortvorschläge", border_style="green")
