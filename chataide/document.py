# chataide/document.py
# -----------------------------------------------------------------------------
# Dokument-Oberfläche für Extraktor und Injektor. Der Kern kennt nur diese
# Protokolle; browser.py setzt sie mit Playwright um, die Tests mit Fakes.
# -----------------------------------------------------------------------------

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence


@dataclass(frozen=True)
class NodeText:
    text: str
    visible: bool


class Node(Protocol):
    async def is_visible(self) -> bool: ...

    async def attribute(self, name: str) -> Optional[str]: ...

    async def within(self, selectors: Sequence[str]) -> bool:
        """Knoten selbst oder ein Vorfahre passt auf einen der Selektoren."""
        ...

    async def is_rich_editable(self) -> bool: ...

    async def focus(self) -> None: ...

    async def insert_text(self, text: str) -> bool:
        """Natives insertText; Rückgabe ist das Urteil des Browsers selbst."""
        ...

    async def has_single_text_child(self) -> bool: ...

    async def set_child_text(self, text: str) -> None: ...

    async def set_text_content(self, text: str) -> None: ...

    async def splice_range(self, text: str) -> None: ...

    async def set_value(self, text: str) -> None: ...

    async def caret_to_end(self) -> None: ...

    async def dispatch_input(self) -> None: ...

    async def read_back(self) -> str: ...


class Document(Protocol):
    @property
    def url(self) -> str: ...

    @property
    def host(self) -> str: ...

    async def scan_text(
        self, selectors: Sequence[str], exclude: Sequence[str] = ()
    ) -> list[NodeText]: ...

    async def count_text(self, selectors: Sequence[str], exclude: Sequence[str] = ()) -> int:
        """Nur die Anzahl sichtbarer Treffer mit Text, ohne die Texte selbst."""
        ...

    async def query_all(self, selectors: Sequence[str]) -> list[Node]: ...

    async def selected_text(self) -> str: ...
