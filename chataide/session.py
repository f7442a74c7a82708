# chataide/session.py
# -----------------------------------------------------------------------------
# Orchestrierung pro Benutzersitzung: scan → Ton → Vorschläge → (optional)
# einfügen. Hält Konversation/Vorschläge zwischen den Aktionen; die
# Kernkomponenten selbst bleiben zustandslos.
# -----------------------------------------------------------------------------

import asyncio
from typing import Awaitable, Callable, Optional, Union

from .backend import BackendClient
from .document import Document
from .errors import NoMessagesFound
from .extractor import extract_conversation
from .injector import inject_reply
from .models import (
    Conversation,
    ExtractionResult,
    InjectionResult,
    ReplyAcquisition,
    ReplySet,
)

DocumentProvider = Callable[[], Awaitable[Document]]


class ChatSession:
    """Ein Flow zur Zeit: scan, generate, regenerate und insert laufen serialisiert."""

    def __init__(self, documents: DocumentProvider, backend: BackendClient):
        self._documents = documents
        self.backend = backend
        self.conversation: Optional[Conversation] = None
        self.replies: Optional[ReplySet] = None
        self.last_extraction: Optional[ExtractionResult] = None
        self.last_acquisition: Optional[ReplyAcquisition] = None
        self._lock = asyncio.Lock()

    async def _acquire(self, conversation: Conversation) -> ReplyAcquisition:
        acquisition = await self.backend.acquire(conversation)
        self.replies = acquisition.replies
        self.last_acquisition = acquisition
        return acquisition

    async def scan_and_generate(self) -> ReplyAcquisition:
        async with self._lock:
            self.last_extraction = None
            document = await self._documents()
            result = await extract_conversation(document)
            self.last_extraction = result
            conversation = result.unwrap()
            self.conversation = conversation
            return await self._acquire(conversation)

    async def regenerate(self) -> ReplyAcquisition:
        async with self._lock:
            if self.conversation is None:
                raise NoMessagesFound("Noch keine Konversation – zuerst scannen.")
            return await self._acquire(self.conversation)

    async def insert(self, choice: Union[str, int] = "recommended") -> InjectionResult:
        async with self._lock:
            if self.replies is None:
                raise NoMessagesFound("Noch keine Vorschläge – zuerst scannen.")
            text = self.replies.pick(choice)
            document = await self._documents()
            return await inject_reply(document, text)

    def new_scan(self) -> None:
        self.conversation = None
        self.replies = None
        self.last_extraction = None
        self.last_acquisition = None

    async def selected_text(self) -> str:
        document = await self._documents()
        return await document.selected_text()
