# chataide/errors.py
# -----------------------------------------------------------------------------
# Fehler-Taxonomie. Jede Klasse trägt einen stabilen `kind`-Code, damit
# Aufrufer ohne isinstance-Kaskaden verzweigen können.
# -----------------------------------------------------------------------------

from typing import Optional


class ChatAideError(Exception):
    kind = "error"


class NoActiveTarget(ChatAideError):
    """Kein Dokument/Tab verfügbar."""
    kind = "no_active_target"


class NoMessagesFound(ChatAideError):
    """Alle Extraktionsketten erschöpft; `diagnostics` erklärt warum."""
    kind = "no_messages_found"

    def __init__(self, message: str = "Keine Nachrichten gefunden.", diagnostics=None):
        super().__init__(message)
        self.diagnostics = diagnostics


class NoInputFound(ChatAideError):
    kind = "no_input_found"

    def __init__(self, site: str, message: Optional[str] = None):
        super().__init__(message or f"Kein Eingabefeld gefunden (site={site}).")
        self.site = site


class InjectionUnverified(ChatAideError):
    """Alle Schreibstrategien versucht, keine per Read-back bestätigt."""
    kind = "injection_unverified"

    def __init__(self, attempts, message: str = "Text konnte nicht verifiziert eingefügt werden."):
        super().__init__(message)
        self.attempts = list(attempts)


class BackendUnreachable(ChatAideError):
    kind = "backend_unreachable"

    def __init__(self, attempts, message: Optional[str] = None):
        attempts = list(attempts)
        if message is None:
            last = attempts[-1] if attempts else None
            message = (
                f"Backend nicht erreichbar ({len(attempts)} Endpunkte); zuletzt {last.endpoint}: {last.describe()}"
                if last else "Backend nicht erreichbar (keine Endpunkte)."
            )
        super().__init__(message)
        self.attempts = attempts


class MalformedBackendResponse(ChatAideError):
    kind = "malformed_backend_response"

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"Ungültige Antwort von {endpoint}: {reason}")
        self.endpoint = endpoint
        self.reason = reason
