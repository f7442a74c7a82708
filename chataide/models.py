# chataide/models.py
# -----------------------------------------------------------------------------
# Datenmodell: Konversation, Site-Profile, Injektions- und Backend-Protokolle.
# Alles wird pro Benutzeraktion frisch erzeugt; nichts wird persistiert.
# -----------------------------------------------------------------------------

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Tone(str, Enum):
    NEUTRAL = "neutral"
    CASUAL = "casual"
    FORMAL = "formal"
    ENTHUSIASTIC = "enthusiastic"


class SiteId(str, Enum):
    WHATSAPP = "whatsapp"
    MESSENGER = "messenger"
    GENERIC = "generic"


@dataclass(frozen=True)
class Message:
    text: str


@dataclass(frozen=True)
class Conversation:
    """Letzte Nachrichten (älteste zuerst) plus erkannter Ton."""
    messages: tuple[Message, ...]
    tone: Tone = Tone.NEUTRAL
    has_emojis: bool = False

    def __post_init__(self):
        if not self.messages:
            raise ValueError("Conversation braucht mindestens eine Nachricht.")

    @property
    def texts(self) -> list[str]:
        return [m.text for m in self.messages]

    @property
    def joined(self) -> str:
        return " ".join(self.texts)


@dataclass(frozen=True)
class SiteProfile:
    id: SiteId
    extraction_selectors: tuple[str, ...]
    injection_selectors: tuple[str, ...]


# --------------------- Extraktion --------------------------------------------
@dataclass
class ExtractionDiagnostics:
    site: str
    url: str = ""
    chain_used: Optional[str] = None
    fell_back: bool = False
    chain_counts: dict[str, int] = field(default_factory=dict)
    message_count: int = 0
    sample: list[str] = field(default_factory=list)


@dataclass
class ExtractionResult:
    conversation: Optional[Conversation]
    diagnostics: ExtractionDiagnostics
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.conversation is not None

    def unwrap(self) -> Conversation:
        if self.conversation is None:
            raise self.error
        return self.conversation


# --------------------- Injektion ---------------------------------------------
class InjectionStrategy(str, Enum):
    NATIVE_INSERT = "native_insert"
    CONTENT_REPLACE = "content_replace"
    RANGE_SPLICE = "range_splice"
    VALUE_ASSIGN = "value_assign"


@dataclass
class InjectionAttempt:
    strategy: InjectionStrategy
    succeeded: bool
    observed_content: Optional[str] = None
    error: Optional[str] = None
    detail: Optional[str] = None


@dataclass
class InjectionResult:
    success: bool
    log: list[InjectionAttempt] = field(default_factory=list)
    site: Optional[str] = None
    selector: Optional[str] = None
    error: Optional[Exception] = None


# --------------------- Antworten ---------------------------------------------
REPLY_CHOICES = ("recommended", "backup1", "backup2")


@dataclass(frozen=True)
class ReplySet:
    recommended: str
    backup1: str
    backup2: str

    def __post_init__(self):
        for name in REPLY_CHOICES:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"ReplySet.{name} darf nicht leer sein.")

    @classmethod
    def from_list(cls, replies: list) -> "ReplySet":
        if len(replies) != 3:
            raise ValueError(f"Genau 3 Antworten erwartet, erhalten: {len(replies)}")
        return cls(*replies)

    def as_list(self) -> list[str]:
        return [self.recommended, self.backup1, self.backup2]

    def pick(self, choice: Union[str, int]) -> str:
        """`choice` ist ein Feldname (recommended/backup1/backup2) oder 1..3."""
        if isinstance(choice, int) or (isinstance(choice, str) and choice.strip().isdigit()):
            idx = int(choice)
            if not 1 <= idx <= 3:
                raise ValueError(f"Auswahl muss 1..3 sein, nicht {idx}.")
            return self.as_list()[idx - 1]
        key = choice.strip().lower().replace("-", "")
        if key not in REPLY_CHOICES:
            raise ValueError(f"Unbekannte Auswahl: {choice!r}")
        return getattr(self, key)


class BackendOutcome(str, Enum):
    OK = "ok"
    HTTP_ERROR = "httpError"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "networkError"
    MALFORMED = "malformed"


@dataclass
class BackendAttempt:
    endpoint: str
    outcome: BackendOutcome
    status_code: Optional[int] = None
    error: Optional[str] = None

    def describe(self) -> str:
        if self.outcome is BackendOutcome.HTTP_ERROR:
            return f"httpError({self.status_code})"
        if self.error:
            return f"{self.outcome.value}: {self.error}"
        return self.outcome.value


class ReplySource(str, Enum):
    REMOTE = "remote"
    FALLBACK = "fallback"


@dataclass
class ReplyAcquisition:
    replies: ReplySet
    source: ReplySource
    attempts: list[BackendAttempt] = field(default_factory=list)
    last_error: Optional[Exception] = None
