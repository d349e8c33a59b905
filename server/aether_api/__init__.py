"""Studio Aether chat guardrails, chat session and scrape proxy."""

from aether_api.chat import (
    ChatBackend,
    ChatBackendError,
    ChatMessage,
    ChatSession,
    ChatTranscript,
    ChatTurn,
)
from aether_api.guardrails import (
    Category,
    GuardrailResult,
    evaluate_inbound,
    evaluate_outbound,
)

__all__ = [
    "Category",
    "ChatBackend",
    "ChatBackendError",
    "ChatMessage",
    "ChatSession",
    "ChatTranscript",
    "ChatTurn",
    "GuardrailResult",
    "evaluate_inbound",
    "evaluate_outbound",
]
