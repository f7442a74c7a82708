# chataide/injector.py
# -----------------------------------------------------------------------------
# Antwort-Injektion: Zielfeld suchen (Site-Kette), dann Schreibstrategien der
# Reihe nach versuchen. Erfolg nur nach Read-back-Verifikation; jeder Versuch
# landet im Protokoll, auch der erfolgreiche.
# -----------------------------------------------------------------------------

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from . import config
from .document import Document, Node
from .errors import InjectionUnverified, NoInputFound
from .models import (
    InjectionAttempt,
    InjectionResult,
    InjectionStrategy,
    SiteId,
    SiteProfile,
)
from .sites import resolve_site
from .terminal import notice

# WhatsApp: Suchleisten & Header nie anfassen
_EXCLUDED_REGIONS = (
    "header",
    "[role='search']",
    ".app-search",
    ".chat-search",
    "[data-testid='chat-list-search']",
)
_FOOTER_REGIONS = (
    "footer",
    "[role='contentinfo']",
    "[data-testid='conversation-compose-box-input']",
)
_NAME_ATTRIBUTES = ("title", "aria-label", "aria-placeholder")
_MESSAGE_KEYWORDS = ("message", "nachricht", "mensaje", "mensagem", "messaggio")


@dataclass
class InjectionTarget:
    node: Node
    selector: str


# --------------------- Zielsuche ---------------------------------------------
async def _is_visible(node: Node) -> bool:
    try:
        return await node.is_visible()
    except Exception:
        # detached
        return False


async def _has_message_name(node: Node) -> bool:
    for name in _NAME_ATTRIBUTES:
        value = (await node.attribute(name) or "").lower()
        if any(k in value for k in _MESSAGE_KEYWORDS):
            return True
    return False


async def _find_whatsapp_target(document: Document, profile: SiteProfile) -> Optional[InjectionTarget]:
    visible = [n for n in await document.query_all(profile.injection_selectors) if await _is_visible(n)]

    candidates, preferred = [], []
    for node in visible:
        try:
            excluded = await node.within(_EXCLUDED_REGIONS)
            prefer = not excluded and (
                await node.within(_FOOTER_REGIONS) or await _has_message_name(node)
            )
        except Exception:
            # zwischendurch neu gerendert -> detached, verwerfen
            continue
        candidates.append(node)
        if prefer:
            preferred.append(node)

    # letzter Treffer = unterster Composer im DOM
    if preferred:
        return InjectionTarget(preferred[-1], "whatsapp-preferred")
    if candidates:
        return InjectionTarget(candidates[-1], "whatsapp-fallback")
    return None


async def _first_visible(document: Document, selectors) -> Optional[InjectionTarget]:
    for sel in selectors:
        for node in await document.query_all((sel,)):
            if await _is_visible(node):
                return InjectionTarget(node, sel)
    return None


async def find_target(document: Document, profile: SiteProfile) -> Optional[InjectionTarget]:
    if profile.id is SiteId.WHATSAPP:
        return await _find_whatsapp_target(document, profile)
    return await _first_visible(document, profile.injection_selectors)


async def _focus_with_retries(
    node: Node,
    attempts: int = config.FOCUS_ATTEMPTS,
    delay: float = config.FOCUS_RETRY_DELAY,
) -> bool:
    for attempt in range(attempts):
        try:
            await node.focus()
            return True
        except Exception:
            if attempt + 1 < attempts:
                await asyncio.sleep(delay)
    return False


# --------------------- Schreibstrategien -------------------------------------
async def _settle(node: Node) -> None:
    await node.caret_to_end()
    await node.dispatch_input()


async def _native_insert(node: Node, text: str) -> Optional[str]:
    ok = await node.insert_text(text)
    await _settle(node)
    return None if ok else "insertText meldete false"


async def _content_replace(node: Node, text: str) -> Optional[str]:
    if await node.has_single_text_child():
        await node.set_child_text(text)
        detail = "single_text_node"
    else:
        await node.set_text_content(text)
        detail = "text_content"
    await _settle(node)
    return detail


async def _range_splice(node: Node, text: str) -> Optional[str]:
    await node.splice_range(text)
    await _settle(node)
    return None


async def _value_assign(node: Node, text: str) -> Optional[str]:
    await node.set_value(text)
    await node.dispatch_input()
    return None


WriteFn = Callable[[Node, str], Awaitable[Optional[str]]]

RICH_STRATEGIES: list[tuple[InjectionStrategy, WriteFn]] = [
    (InjectionStrategy.NATIVE_INSERT, _native_insert),
    (InjectionStrategy.CONTENT_REPLACE, _content_replace),
    (InjectionStrategy.RANGE_SPLICE, _range_splice),
]
PLAIN_STRATEGIES: list[tuple[InjectionStrategy, WriteFn]] = [
    (InjectionStrategy.VALUE_ASSIGN, _value_assign),
]


def _normalize(txt: Optional[str]) -> str:
    return (txt or "").replace("\xa0", " ").strip()


def verified(observed: Optional[str], expected: str) -> bool:
    """Read-back gilt, wenn der Inhalt dem Text gleicht oder ihn enthält."""
    want = _normalize(expected)
    have = _normalize(observed)
    if not want or not have:
        return False
    return have == want or want in have


async def _attempt(node: Node, strategy: InjectionStrategy, write: WriteFn, text: str) -> InjectionAttempt:
    detail = error = observed = None
    try:
        detail = await write(node, text)
    except Exception as e:
        error = str(e) or type(e).__name__
    try:
        observed = await node.read_back()
    except Exception as e:
        error = error or f"read-back: {e}"
    return InjectionAttempt(
        strategy=strategy,
        succeeded=error is None and verified(observed, text),
        observed_content=observed,
        error=error,
        detail=detail,
    )


async def inject_reply(document: Document, text: str, profile: Optional[SiteProfile] = None) -> InjectionResult:
    """Schreibt `text` in das aktive Eingabefeld und verifiziert per Read-back.

    Nicht reentrant: parallele Injektionen ins selbe Ziel muss der Aufrufer
    serialisieren.
    """
    profile = profile or resolve_site(document.host)
    site = profile.id.value

    target = await find_target(document, profile)
    if target is None:
        return InjectionResult(success=False, site=site, error=NoInputFound(site))

    node = target.node
    log: list[InjectionAttempt] = []
    if not await _focus_with_retries(node):
        notice("Konnte Eingabefeld nicht zuverlässig fokussieren.")

    try:
        rich = await node.is_rich_editable()
    except Exception:
        rich = False
    chain = RICH_STRATEGIES if rich else PLAIN_STRATEGIES

    for strategy, write in chain:
        attempt = await _attempt(node, strategy, write, text)
        log.append(attempt)
        if attempt.succeeded:
            return InjectionResult(success=True, log=log, site=site, selector=target.selector)

    return InjectionResult(
        success=False,
        log=log,
        site=site,
        selector=target.selector,
        error=InjectionUnverified(log),
    )
