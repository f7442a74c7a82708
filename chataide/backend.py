# chataide/backend.py
# -----------------------------------------------------------------------------
# Backend-Client: Konversation an den Antwort-Dienst schicken. Kandidaten-
# Endpunkte strikt nacheinander (kein Fan-out, kein Backoff), fester Timeout
# pro Versuch. Sind alle erschöpft → lokaler Mock-Generator. Wirft nie.
# -----------------------------------------------------------------------------

import asyncio
from typing import Optional, Sequence

import httpx
from rich.markup import escape

from . import config
from .errors import BackendUnreachable, MalformedBackendResponse
from .models import (
    BackendAttempt,
    BackendOutcome,
    Conversation,
    ReplyAcquisition,
    ReplySet,
    ReplySource,
)
from .replies import mock_replies
from .terminal import notice


def candidate_endpoints(
    host: str = config.BACKEND_HOST,
    base_port: int = config.BACKEND_BASE_PORT,
    span: int = config.BACKEND_PORT_SPAN,
    path: str = config.BACKEND_PATH,
) -> list[str]:
    """Gleicher Pfad, aufsteigende Ports (fängt Port-Drift des Backends ab)."""
    if not path.startswith("/"):
        path = "/" + path
    return [f"http://{host}:{port}{path}" for port in range(base_port, base_port + max(span, 0))]


def build_payload(conversation: Conversation, age: Optional[int] = None) -> dict:
    payload: dict = {"messages": conversation.texts}
    if age is not None:
        payload["age"] = age
    return payload


def parse_replies(endpoint: str, response: httpx.Response) -> ReplySet:
    try:
        data = response.json()
    except ValueError as e:
        raise MalformedBackendResponse(endpoint, f"kein JSON ({e})") from e
    if not isinstance(data, dict):
        raise MalformedBackendResponse(endpoint, "JSON-Objekt erwartet")
    replies = data.get("replies")
    if not isinstance(replies, list) or len(replies) != 3:
        raise MalformedBackendResponse(endpoint, "`replies` muss eine Liste mit 3 Einträgen sein")
    if not all(isinstance(r, str) and r.strip() for r in replies):
        raise MalformedBackendResponse(endpoint, "leere oder nicht-textuelle Antwort")
    return ReplySet.from_list(replies)


class BackendClient:
    """Holt drei Antwortvorschläge; fällt bei Ausfall auf `mock_replies` zurück."""

    def __init__(
        self,
        endpoints: Optional[Sequence[str]] = None,
        timeout: float = config.BACKEND_TIMEOUT,
        age: Optional[int] = config.USER_AGE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoints = list(endpoints) if endpoints is not None else candidate_endpoints()
        self.timeout = timeout
        self.age = age
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _try_endpoint(self, endpoint: str, payload: dict) -> tuple[BackendAttempt, Optional[ReplySet]]:
        try:
            # Timeout als Wettlauf; der Peer wird nicht benachrichtigt
            response = await asyncio.wait_for(
                self.http_client.post(endpoint, json=payload, timeout=self.timeout),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return BackendAttempt(endpoint, BackendOutcome.TIMEOUT, error=str(e) or None), None
        except httpx.HTTPError as e:
            return BackendAttempt(endpoint, BackendOutcome.NETWORK_ERROR, error=str(e) or type(e).__name__), None

        if not response.is_success:
            return BackendAttempt(endpoint, BackendOutcome.HTTP_ERROR, status_code=response.status_code), None

        try:
            replies = parse_replies(endpoint, response)
        except MalformedBackendResponse as e:
            return BackendAttempt(endpoint, BackendOutcome.MALFORMED, response.status_code, e.reason), None
        return BackendAttempt(endpoint, BackendOutcome.OK, response.status_code), replies

    async def acquire(self, conversation: Conversation) -> ReplyAcquisition:
        """Idle → Trying(endpoint_i) → Succeeded | … → ExhaustedFallback → Done."""
        payload = build_payload(conversation, self.age)
        attempts: list[BackendAttempt] = []

        for endpoint in self.endpoints:
            try:
                attempt, replies = await self._try_endpoint(endpoint, payload)
            except Exception as e:
                attempt, replies = BackendAttempt(endpoint, BackendOutcome.NETWORK_ERROR, error=str(e)), None
            attempts.append(attempt)
            if replies is not None:
                return ReplyAcquisition(replies=replies, source=ReplySource.REMOTE, attempts=attempts)

        error = BackendUnreachable(attempts)
        notice(f"Backend nicht erreichbar → nutze lokale Vorschläge. [dim]({escape(str(error))})[/dim]")
        return ReplyAcquisition(
            replies=mock_replies(conversation.tone),
            source=ReplySource.FALLBACK,
            attempts=attempts,
            last_error=error,
        )

    async def generate_replies(self, conversation: Conversation) -> ReplySet:
        return (await self.acquire(conversation)).replies
