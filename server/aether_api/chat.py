"""Chat transcript and guarded chat turns for the portfolio assistant."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Literal

from aether_api.guardrails import (
    GuardrailResult,
    evaluate_inbound,
    evaluate_outbound,
)

log = logging.getLogger(__name__)

Role = Literal["user", "model"]

GREETING = "Aether Assistant initialized. Ask about work, services, or booking."
INTERRUPTED_REPLY = "Signal interrupted. Please try again."
EMPTY_REPLY = "I received an empty signal."

SUGGESTED_PROMPTS: tuple[str, ...] = (
    "Who are you?",
    "What services do you offer?",
    "Show me your work",
    "How can I book you?",
)

BOOKING_KEYWORDS: tuple[str, ...] = (
    "book",
    "hire",
    "contact",
    "reach out",
    "work together",
    "collaborate",
    "project",
    "get started",
    "inquiry",
)
_CONTACT_PHRASES = ("contact form", "opening contact")


class ChatBackendError(RuntimeError):
    """Raised by a backend when a reply cannot be produced."""


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Role
    text: str
    timestamp: float = field(default_factory=time.time)
    flagged: bool = False  # blocked exchange, kept for display only


class ChatTranscript:
    """Append-only, in-memory list of chat messages."""

    def __init__(self, greeting: str | None = GREETING) -> None:
        self._messages: list[ChatMessage] = []
        if greeting:
            self.add_model(greeting)

    def add_user(self, text: str, *, flagged: bool = False) -> ChatMessage:
        msg = ChatMessage(role="user", text=text, flagged=flagged)
        self._messages.append(msg)
        return msg

    def add_model(self, text: str, *, flagged: bool = False) -> ChatMessage:
        msg = ChatMessage(role="model", text=text, flagged=flagged)
        self._messages.append(msg)
        return msg

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def history(self) -> list[ChatMessage]:
        """Messages safe to hand back to the model (flagged ones omitted)."""
        return [m for m in self._messages if not m.flagged]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self._messages)


class ChatBackend(ABC):
    """Produces a model reply for a message given the prior conversation."""

    @abstractmethod
    async def generate(self, history: Sequence[ChatMessage], message: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """Outcome of one `ChatSession.send` call."""

    user: ChatMessage
    reply: ChatMessage
    guardrail: GuardrailResult
    open_contact: bool = False


def has_booking_intent(user_text: str, reply_text: str = "") -> bool:
    """True when the user asks to book or the reply points at the contact form."""
    user = user_text.lower()
    reply = reply_text.lower()
    return any(k in user for k in BOOKING_KEYWORDS) or any(
        p in reply for p in _CONTACT_PHRASES
    )


class ChatSession:
    """One visitor's conversation.

    Every user message is checked before it reaches the backend and every
    backend reply is checked before it reaches the transcript. A blocked
    message or reply is replaced by its category's canned text; the original
    is never shown or sent on.
    """

    def __init__(
        self, backend: ChatBackend, transcript: ChatTranscript | None = None
    ) -> None:
        self._backend = backend
        self.transcript = transcript if transcript is not None else ChatTranscript()
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def send(self, text: str) -> ChatTurn | None:
        """Run one chat turn. Returns None for blank input or while a turn is in flight."""
        if not isinstance(text, str) or not text.strip() or self._busy:
            return None
        user_text = text.strip()

        outbound = evaluate_outbound(user_text)
        if not outbound.allowed:
            user_msg = self.transcript.add_user(user_text, flagged=True)
            reply = self.transcript.add_model(outbound.replacement, flagged=True)
            return ChatTurn(user=user_msg, reply=reply, guardrail=outbound)

        history = self.transcript.history()
        user_msg = self.transcript.add_user(user_text)

        self._busy = True
        try:
            reply_text = await self._generate(history, user_text)
        finally:
            self._busy = False

        inbound = evaluate_inbound(reply_text)
        if inbound.allowed:
            reply = self.transcript.add_model(reply_text)
        else:
            reply = self.transcript.add_model(inbound.replacement, flagged=True)

        return ChatTurn(
            user=user_msg,
            reply=reply,
            guardrail=inbound,
            open_contact=has_booking_intent(user_text, reply.text),
        )

    async def _generate(self, history: list[ChatMessage], message: str) -> str:
        try:
            reply = await self._backend.generate(history, message)
        except ChatBackendError as e:
            log.error("Chat backend failed: %s", e)
            return INTERRUPTED_REPLY
        except Exception:
            log.exception("Unexpected chat backend failure")
            return INTERRUPTED_REPLY
        if not reply or not reply.strip():
            return EMPTY_REPLY
        return reply
