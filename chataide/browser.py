# chataide/browser.py
# -----------------------------------------------------------------------------
# Playwright/CDP-Anbindung: Chrome mit Debug-Port starten, verbinden, aktiven
# Tab finden und als `Document` (siehe document.py) bereitstellen.
# Die DOM-Operationen laufen als kleine JS-Snippets über evaluate().
# -----------------------------------------------------------------------------

import asyncio
import os
import subprocess
import sys
from typing import Optional, Sequence

from playwright.async_api import async_playwright

from . import config
from .document import NodeText
from .errors import NoActiveTarget
from .sites import hostname
from .terminal import console

# --------------------- JS-Snippets -------------------------------------------
_SCAN_JS = r"""
({selectors, exclude, countOnly}) => {
  const ex = exclude.length ? exclude.join(', ') : null;
  const isVisible = (el) => {
    if (!el.isConnected) return false;
    const r = el.getBoundingClientRect();
    if (r.width <= 0 || r.height <= 0) return false;
    const st = getComputedStyle(el);
    return st.visibility !== 'hidden' && st.display !== 'none';
  };
  let nodes = [];
  try {
    nodes = Array.from(document.querySelectorAll(selectors.join(', ')));
  } catch (err) {
    return countOnly ? 0 : [];
  }
  // nur sichtbare Knoten mit Text verlassen die Seite
  const rows = [];
  let count = 0;
  for (const el of nodes) {
    if (ex && el.matches(ex)) continue;
    if (!isVisible(el)) continue;
    const text = el.innerText || '';
    if (!text.trim()) continue;
    count++;
    if (!countOnly) rows.push({ text, visible: true });
  }
  return countOnly ? count : rows;
}
"""

_INSERT_TEXT_JS = r"""
(el, value) => {
  el.focus();
  return document.execCommand('insertText', false, value);
}
"""

_SPLICE_RANGE_JS = r"""
(el, value) => {
  const range = document.createRange();
  range.selectNodeContents(el);
  range.deleteContents();
  range.insertNode(document.createTextNode(value));
}
"""

_CARET_TO_END_JS = r"""
(el) => {
  try {
    const range = document.createRange();
    range.selectNodeContents(el);
    range.collapse(false);
    const sel = window.getSelection();
    sel.removeAllRanges();
    sel.addRange(range);
  } catch (err) {}
}
"""

_DISPATCH_INPUT_JS = r"""
(el) => {
  try {
    el.dispatchEvent(new InputEvent('input', { bubbles: true, inputType: 'insertText' }));
  } catch (err) {
    el.dispatchEvent(new Event('input', { bubbles: true }));
  }
  el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""

_READ_BACK_JS = r"""
(el) => {
  if (el.tagName === 'TEXTAREA' || el.tagName === 'INPUT') return el.value || '';
  return el.innerText || el.textContent || '';
}
"""


def _scan_args(selectors: Sequence[str], exclude: Sequence[str], count_only: bool) -> dict:
    return {"selectors": list(selectors), "exclude": list(exclude), "countOnly": count_only}

class PageNode:
    """Live-Element (ElementHandle) hinter dem `Node`-Protokoll."""

    def __init__(self, handle):
        self._handle = handle

    async def is_visible(self) -> bool:
        return await self._handle.is_visible()

    async def attribute(self, name: str) -> Optional[str]:
        return await self._handle.get_attribute(name)

    async def within(self, selectors: Sequence[str]) -> bool:
        return await self._handle.evaluate("(el, sel) => !!el.closest(sel)", ", ".join(selectors))

    async def is_rich_editable(self) -> bool:
        return await self._handle.evaluate("(el) => !!el.isContentEditable")

    async def focus(self) -> None:
        await self._handle.focus()

    async def insert_text(self, text: str) -> bool:
        return bool(await self._handle.evaluate(_INSERT_TEXT_JS, text))

    async def has_single_text_child(self) -> bool:
        return await self._handle.evaluate(
            "(el) => el.childNodes.length === 1 && el.childNodes[0].nodeType === Node.TEXT_NODE"
        )

    async def set_child_text(self, text: str) -> None:
        await self._handle.evaluate("(el, value) => { el.childNodes[0].nodeValue = value; }", text)

    async def set_text_content(self, text: str) -> None:
        await self._handle.evaluate("(el, value) => { el.textContent = value; }", text)

    async def splice_range(self, text: str) -> None:
        await self._handle.evaluate(_SPLICE_RANGE_JS, text)

    async def set_value(self, text: str) -> None:
        await self._handle.evaluate("(el, value) => { el.value = value; }", text)

    async def caret_to_end(self) -> None:
        await self._handle.evaluate(_CARET_TO_END_JS)

    async def dispatch_input(self) -> None:
        await self._handle.evaluate(_DISPATCH_INPUT_JS)

    async def read_back(self) -> str:
        return await self._handle.evaluate(_READ_BACK_JS)


class PageDocument:
    """Ein Browser-Tab als `Document`; Hauptframe zuerst, dann iframes."""

    def __init__(self, page):
        self.page = page

    @property
    def url(self) -> str:
        try:
            return self.page.url
        except Exception:
            return ""

    @property
    def host(self) -> str:
        return hostname(self.url)

    def _frames(self) -> list:
        frames, seen = [], set()
        try:
            main_frame = self.page.main_frame
        except Exception:
            main_frame = None
        if main_frame:
            frames.append(main_frame)
            seen.add(main_frame)
        for fr in getattr(self.page, "frames", []):
            if fr is None or fr in seen:
                continue
            frames.append(fr)
            seen.add(fr)
        return frames

    async def scan_text(self, selectors: Sequence[str], exclude: Sequence[str] = ()) -> list[NodeText]:
        out: list[NodeText] = []
        for frame in self._frames():
            try:
                rows = await frame.evaluate(_SCAN_JS, _scan_args(selectors, exclude, False))
            except Exception:
                # Frame navigiert oder cross-origin-gesperrt
                continue
            out.extend(NodeText(text=r.get("text", ""), visible=bool(r.get("visible"))) for r in rows or [])
        return out

    async def count_text(self, selectors: Sequence[str], exclude: Sequence[str] = ()) -> int:
        total = 0
        for frame in self._frames():
            try:
                total += int(await frame.evaluate(_SCAN_JS, _scan_args(selectors, exclude, True)) or 0)
            except Exception:
                continue
        return total

    async def query_all(self, selectors: Sequence[str]) -> list[PageNode]:
        out: list[PageNode] = []
        for frame in self._frames():
            try:
                handles = await frame.query_selector_all(", ".join(selectors))
            except Exception:
                continue
            out.extend(PageNode(h) for h in handles)
        return out

    async def selected_text(self) -> str:
        try:
            return (await self.page.evaluate("() => (window.getSelection() || '').toString()")).strip()
        except Exception:
            return ""


# -------------------- Chrome-Start mit Debug-Port -----------------------------
def start_chrome_with_debug_port(
    port: int = config.DEBUG_PORT,
    chrome_path: str = config.CHROME_PATH,
    profile_dir: str = config.CHROME_PROFILE_DIR,
    restart: bool = False,
):
    if restart and sys.platform.startswith("win"):
        console.print("[cyan]Beende alle laufenden Chrome-Prozesse...[/cyan]")
        try:
            subprocess.run(["taskkill", "/IM", "chrome.exe", "/F"], capture_output=True)
        except Exception as e:
            console.print(f"[yellow]Warnung: Konnte Chrome nicht beenden: {e}[/yellow]")

    os.makedirs(profile_dir, exist_ok=True)

    console.print(f"[cyan]Starte Chrome mit Debug-Port {port}...[/cyan]")
    subprocess.Popen([
        chrome_path,
        f"--remote-debugging-port={port}",
        f"--user-data-dir={profile_dir}",
    ])


# -------------------- Playwright-Verbindung ----------------------------------
class BrowserSession:
    """Hält die CDP-Verbindung und liefert das Dokument des aktiven Tabs."""

    def __init__(self, pw, browser):
        self._pw = pw
        self._browser = browser
        self._page = None

    @classmethod
    async def connect(cls, port: int = config.DEBUG_PORT) -> "BrowserSession":
        pw = await async_playwright().start()
        try:
            browser = await pw.chromium.connect_over_cdp(f"http://localhost:{port}")
        except Exception as e:
            await pw.stop()
            raise NoActiveTarget(f"Konnte nicht zu Chrome verbinden (Port {port}).") from e
        return cls(pw, browser)

    def _pages(self) -> list:
        pages = []
        for ctx in self._browser.contexts:
            pages.extend(ctx.pages)
        return pages

    async def active_document(self) -> PageDocument:
        """Zuletzt geöffneter http(s)-Tab; interne chrome://-Tabs zählen nicht."""
        candidate = None
        for p in reversed(self._pages()):
            try:
                if p.is_closed():
                    continue
                url = p.url
            except Exception:
                continue
            if url.startswith(("http://", "https://")):
                candidate = p
                break
        if candidate is None:
            raise NoActiveTarget("Kein aktiver http(s)-Tab gefunden.")

        try:
            await candidate.bring_to_front()
        except Exception:
            pass
        try:
            await candidate.wait_for_load_state("domcontentloaded")
        except Exception:
            pass

        self._page = candidate
        return PageDocument(candidate)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._pw.stop()


async def launch_and_connect(port: int = config.DEBUG_PORT, restart: bool = False) -> BrowserSession:
    start_chrome_with_debug_port(port, restart=restart)
    await asyncio.sleep(config.CHROME_STARTUP_WAIT)
    return await BrowserSession.connect(port)
