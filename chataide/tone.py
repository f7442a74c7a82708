# chataide/tone.py
# -----------------------------------------------------------------------------
# Ton-Erkennung über den verbundenen Konversationstext. Rein regelbasiert:
# feste Reihenfolge, erster Treffer gewinnt, sonst neutral. Emojis werden
# unabhängig vom Ton gemeldet.
# -----------------------------------------------------------------------------

import re

from .models import Tone

# Emoji-Blöcke inkl. Misc Symbols und Dingbats
_EMOJI_RE = re.compile(
    "[\U0001F300-\U0001F6FF\U0001F900-\U0001FAFF\u2600-\u27BF]"
)

_ENTHUSIASTIC_PATTERNS = [r"!{2,}", r"\b(omg|wow|yay)\b"]
_CASUAL_PATTERNS = [r"\b(lol|haha)\b"]
_FORMAL_PHRASES = ["thank you", "regards", "sincerely"]


def _matches_any(text: str, patterns: list) -> bool:
    for p in patterns:
        if re.search(p, text, re.IGNORECASE):
            return True
    return False


def has_emojis(text: str) -> bool:
    return bool(_EMOJI_RE.search(text or ""))


def classify_tone(text: str) -> tuple[Tone, bool]:
    """Liefert (Ton, enthält Emojis) für den mit Leerzeichen verbundenen Text."""
    text = text or ""
    emojis = has_emojis(text)

    if emojis or _matches_any(text, _ENTHUSIASTIC_PATTERNS):
        return Tone.ENTHUSIASTIC, emojis

    if _matches_any(text, _CASUAL_PATTERNS):
        return Tone.CASUAL, emojis

    low = text.lower()
    if any(phrase in low for phrase in _FORMAL_PHRASES):
        return Tone.FORMAL, emojis

    return Tone.NEUTRAL, emojis
