"""Conversational coach: transports, reply parsing and action dispatch."""

from .bridge import APOLOGY, ActionOutcome, ChatBridge, ChatResult
from .parsers import ChatAction, ChatReply, extract_actions, parse_chat_response, strip_actions
from .transports import (
    BackendChatTransport,
    ChatTransport,
    DeepSeekTransport,
    N8nWebhookTransport,
    build_transport,
)

__all__ = [
    "ActionOutcome",
    "APOLOGY",
    "BackendChatTransport",
    "build_transport",
    "ChatAction",
    "ChatBridge",
    "ChatReply",
    "ChatResult",
    "ChatTransport",
    "DeepSeekTransport",
    "extract_actions",
    "N8nWebhookTransport",
    "parse_chat_response",
    "strip_actions",
]
