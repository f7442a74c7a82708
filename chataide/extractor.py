# chataide/extractor.py
# -----------------------------------------------------------------------------
# Nachrichten-Extraktion: Site-Kette → (falls leer) generische Kette →
# Zeilen splitten → letzte N behalten → Ton bestimmen.
# Diagnosen (Treffer je Kette) gehen immer mit zurück, auch bei Fehlschlag.
# -----------------------------------------------------------------------------

from dataclasses import replace
from typing import Iterable, Optional, Sequence

from . import config
from .document import Document
from .errors import NoMessagesFound
from .models import (
    Conversation,
    ExtractionDiagnostics,
    ExtractionResult,
    Message,
    SiteId,
    SiteProfile,
)
from .sites import GENERIC_EXCLUDE_SELECTORS, PROFILES, resolve_site
from .tone import classify_tone


def split_fragments(texts: Iterable[str]) -> list[str]:
    """Ein sichtbares Element kann mehrere logische Nachrichten enthalten."""
    out = []
    for t in texts:
        for line in (t or "").splitlines():
            line = line.strip()
            if line:
                out.append(line)
    return out


def _last(items: Sequence, n: int) -> list:
    if n <= 0:
        return []
    return list(items[-n:])


def _exclude(profile: SiteProfile) -> tuple[str, ...]:
    return GENERIC_EXCLUDE_SELECTORS if profile.id is SiteId.GENERIC else ()


async def _candidates(document: Document, profile: SiteProfile) -> list[str]:
    snaps = await document.scan_text(profile.extraction_selectors, _exclude(profile))
    return [s.text.strip() for s in snaps if s.visible and s.text and s.text.strip()]


def site_messages(candidates: Sequence[str], window: int) -> list[str]:
    return _last(split_fragments(candidates), window)


def generic_messages(candidates: Sequence[str], window: int, pool_cap: int) -> list[str]:
    # erst deduplizieren, dann kappen (erstes Vorkommen bleibt)
    deduped = list(dict.fromkeys(candidates))
    return _last(split_fragments(_last(deduped, pool_cap)), window)


async def extract_conversation(
    document: Document,
    profile: Optional[SiteProfile] = None,
    *,
    window: Optional[int] = None,
    pool_cap: Optional[int] = None,
) -> ExtractionResult:
    """Liest die letzten Nachrichten aus `document`.

    Ohne `profile` entscheidet der Host. `window` und `pool_cap` überschreiben
    config.MESSAGE_WINDOW bzw. config.GENERIC_POOL_CAP. Schlägt die Extraktion
    fehl, trägt das Ergebnis NoMessagesFound samt Diagnose.
    """
    window = config.MESSAGE_WINDOW if window is None else window
    pool_cap = config.GENERIC_POOL_CAP if pool_cap is None else pool_cap
    profile = profile or resolve_site(document.host)
    generic = PROFILES[SiteId.GENERIC]

    found: dict[SiteId, list[str]] = {}

    async def candidates_for(p: SiteProfile) -> list[str]:
        if p.id not in found:
            found[p.id] = await _candidates(document, p)
        return found[p.id]

    fell_back = False
    if profile.id is SiteId.GENERIC:
        chain_used = SiteId.GENERIC
        messages = generic_messages(await candidates_for(generic), window, pool_cap)
    else:
        chain_used = profile.id
        site_candidates = await candidates_for(profile)
        messages = site_messages(site_candidates, window)
        if not site_candidates:
            fell_back = True
            chain_used = SiteId.GENERIC
            messages = generic_messages(await candidates_for(generic), window, pool_cap)

    # nicht benötigte Ketten nur zählen, Texte bleiben in der Seite
    chain_counts = {}
    for site_id, p in PROFILES.items():
        if site_id in found:
            chain_counts[site_id.value] = len(found[site_id])
        else:
            chain_counts[site_id.value] = await document.count_text(p.extraction_selectors, _exclude(p))

    diagnostics = ExtractionDiagnostics(
        site=profile.id.value,
        url=document.url,
        chain_used=chain_used.value if messages else None,
        fell_back=fell_back,
        chain_counts=chain_counts,
        message_count=len(messages),
        sample=messages[: config.DIAGNOSTIC_SAMPLE],
    )

    if not messages:
        return ExtractionResult(
            conversation=None,
            diagnostics=diagnostics,
            error=NoMessagesFound(diagnostics=diagnostics),
        )

    conversation = Conversation(messages=tuple(Message(m) for m in messages))
    tone, emojis = classify_tone(conversation.joined)
    conversation = replace(conversation, tone=tone, has_emojis=emojis)
    return ExtractionResult(conversation=conversation, diagnostics=diagnostics)
