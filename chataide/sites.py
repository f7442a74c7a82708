# chataide/sites.py
# -----------------------------------------------------------------------------
# Site-Profile: Host → feste Extraktions-/Injektions-Selektorketten.
# Unbekannte Hosts landen immer bei `generic`, nie bei einem Fehler.
# -----------------------------------------------------------------------------

from urllib.parse import urlparse

from .models import SiteId, SiteProfile

WHATSAPP_MESSAGE_SELECTORS = (
    "span.selectable-text",
    "div.copyable-text",
    "[data-testid^='msg-']",
    ".message-in",
    ".message-out",
)
MESSENGER_MESSAGE_SELECTORS = (
    "[data-testid='message-text']",
    "[data-testid^='msg']",
)
GENERIC_MESSAGE_SELECTORS = ("div", "span", "p")
GENERIC_EXCLUDE_SELECTORS = ("script", "style", "[contenteditable]")

WHATSAPP = SiteProfile(
    id=SiteId.WHATSAPP,
    extraction_selectors=WHATSAPP_MESSAGE_SELECTORS,
    injection_selectors=("div[contenteditable='true']", "textarea"),
)
MESSENGER = SiteProfile(
    id=SiteId.MESSENGER,
    extraction_selectors=MESSENGER_MESSAGE_SELECTORS,
    injection_selectors=(
        "div[role='textbox'][contenteditable='true']",
        "div[contenteditable='true']",
        "textarea",
    ),
)
GENERIC = SiteProfile(
    id=SiteId.GENERIC,
    extraction_selectors=GENERIC_MESSAGE_SELECTORS,
    injection_selectors=("div[contenteditable='true']", "textarea", "input[type='text']"),
)

PROFILES = {p.id: p for p in (WHATSAPP, MESSENGER, GENERIC)}

# Reihenfolge zählt: erster Treffer gewinnt.
_HOST_FRAGMENTS: list[tuple[str, SiteProfile]] = [
    ("web.whatsapp.com", WHATSAPP),
    ("messenger.com", MESSENGER),
    ("facebook.com", MESSENGER),
]


def hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except Exception:
        return ""


def resolve_site(host: str) -> SiteProfile:
    host = (host or "").lower()
    for fragment, profile in _HOST_FRAGMENTS:
        if fragment in host:
            return profile
    return GENERIC
