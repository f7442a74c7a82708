# chataide/cli.py
# -----------------------------------------------------------------------------
# Interaktive Shell: verbindet sich per CDP mit Chrome und treibt eine
# ChatSession (scan / regen / insert / new / selection).
# -----------------------------------------------------------------------------

import argparse
import asyncio
from typing import Optional

from rich.markup import escape
from rich.panel import Panel

from . import __version__, config
from .backend import BackendClient
from .browser import BrowserSession, launch_and_connect
from .errors import ChatAideError, InjectionUnverified
from .models import ReplySource
from .session import ChatSession
from .terminal import console, render_attempts, render_extraction, render_replies, shorten

HELP = """Befehle:
  scan              -> Konversation lesen, Ton bestimmen, 3 Vorschläge holen
  regen             -> neue Vorschläge für dieselbe Konversation
  insert [1|2|3]    -> Vorschlag ins Eingabefeld schreiben (Default: 1)
  new               -> Konversation/Vorschläge verwerfen
  selection         -> aktuell markierten Text anzeigen
  hilfe             -> diese Hilfe anzeigen
  ende              -> beenden
"""


def _print_acquisition(session: ChatSession, acquisition) -> None:
    conversation = session.conversation
    emoji = " · Emojis" if conversation.has_emojis else ""
    console.print(f"[cyan]Ton:[/cyan] {conversation.tone.value}{emoji}")
    if acquisition.source is ReplySource.FALLBACK:
        console.print("[dim]Quelle: lokale Vorschläge[/dim]")
    else:
        console.print(f"[dim]Quelle: {acquisition.attempts[-1].endpoint}[/dim]")
    console.print(render_replies(acquisition.replies))


async def cmd_scan(session: ChatSession):
    try:
        acquisition = await session.scan_and_generate()
    finally:
        if session.last_extraction is not None:
            console.print(render_extraction(session.last_extraction.diagnostics))
    _print_acquisition(session, acquisition)


async def cmd_regen(session: ChatSession):
    acquisition = await session.regenerate()
    _print_acquisition(session, acquisition)


async def cmd_insert(session: ChatSession, choice: str):
    result = await session.insert(choice or "1")
    if result.success:
        console.print("[green]Antwort eingefügt! ✓[/green]")
        return
    console.print(f"[red]Einfügen fehlgeschlagen:[/red] {escape(str(result.error))}")
    if result.log:
        console.print(render_attempts(result.log))


async def cmd_selection(session: ChatSession):
    text = await session.selected_text()
    console.print(Panel.fit(escape(shorten(text, 1500)) or "[dim][keine Auswahl][/dim]",
                            title="Auswahl", border_style="cyan"))


def _report_error(err: ChatAideError) -> None:
    console.print(f"[red]{escape(str(err))}[/red] [dim]({err.kind})[/dim]")
    if isinstance(err, InjectionUnverified) and err.attempts:
        console.print(render_attempts(err.attempts))


async def repl(session: ChatSession):
    console.print(Panel.fit(HELP, title="ChatAIde", border_style="magenta"))
    while True:
        try:
            raw = await asyncio.to_thread(console.input, "[bold magenta]› [/bold magenta]")
        except (EOFError, KeyboardInterrupt):
            break

        raw = raw.strip()
        if not raw:
            continue
        cmd, _, arg = raw.partition(" ")
        cmd = cmd.lower()

        try:
            if cmd in ("ende", "quit", "exit"):
                break
            elif cmd in ("hilfe", "help", "?"):
                console.print(Panel.fit(HELP, title="Hilfe", border_style="magenta"))
            elif cmd == "scan":
                await cmd_scan(session)
            elif cmd == "regen":
                await cmd_regen(session)
            elif cmd == "insert":
                await cmd_insert(session, arg.strip())
            elif cmd == "new":
                session.new_scan()
                console.print("[green]Zurückgesetzt.[/green]")
            elif cmd == "selection":
                await cmd_selection(session)
            else:
                console.print("[red]Unbekannter Befehl. Tippe 'hilfe'.[/red]")
        except ChatAideError as e:
            _report_error(e)
        except Exception as e:
            console.print(f"[red]Fehler:[/red] {escape(str(e))}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chataide", description="Antwortvorschläge für den aktiven Chat-Tab.")
    parser.add_argument("--port", type=int, default=config.DEBUG_PORT, help="Chrome Remote-Debugging-Port")
    parser.add_argument("--launch", action="store_true", help="Chrome mit Debug-Port selbst starten")
    parser.add_argument("--restart", action="store_true", help="laufendes Chrome vorher beenden (nur Windows)")
    parser.add_argument("--age", type=int, default=config.USER_AGE, help="Alter für das Backend (optional)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def run(args: argparse.Namespace):
    console.print(f"[bold green]ChatAIde Version {__version__}[/bold green]")
    if args.launch:
        browser = await launch_and_connect(args.port, restart=args.restart)
    else:
        browser = await BrowserSession.connect(args.port)

    try:
        async with BackendClient(age=args.age) as backend:
            session = ChatSession(browser.active_document, backend)
            await repl(session)
    finally:
        await browser.close()


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except ChatAideError as e:
        _report_error(e)
        return 1
    return 0
