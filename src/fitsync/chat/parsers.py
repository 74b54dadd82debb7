"""Parsing of conversational-agent replies and embedded action tags."""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from ..errors import ChatResponseError

logger = structlog.get_logger(__name__)

ACTION_PATTERN = re.compile(r"\[ACTION:([A-Z_]+)\]([\s\S]*?)\[/ACTION\]")
MENSAJE_AGENTE_PATTERN = re.compile(r'"mensaje_agente"\s*:\s*"([^"]+)"')
FENCE_START = re.compile(r"^\s*```(?:json)?\s*\n")
FENCE_END = re.compile(r"\n```\s*$")


@dataclass
class ChatReply:
    """Normalised agent reply."""

    message: str
    data: dict | None = None
    action: dict | None = None


@dataclass
class ChatAction:
    """A domain operation requested by the agent."""

    type: str
    data: dict = field(default_factory=dict)
    target_id: Any = None  # entity to update, from the action's planId


def strip_fences(text: str) -> str:
    """Remove a surrounding markdown ```json fence, if any."""
    return FENCE_END.sub("", FENCE_START.sub("", text))


def _dict_or_none(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


def _match_envelope(body: Any) -> ChatReply | None:
    # {success, message, data: {mensaje_agente, data?, action?}}
    if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
        return None
    inner = body["data"]
    if not inner.get("mensaje_agente"):
        return None
    return ChatReply(
        message=str(inner["mensaje_agente"]),
        data=_dict_or_none(inner.get("data")),
        action=_dict_or_none(inner.get("action")),
    )


def _match_legacy(body: Any) -> ChatReply | None:
    if not isinstance(body, dict) or not body.get("mensaje_agente"):
        return None
    return ChatReply(
        message=str(body["mensaje_agente"]),
        data=_dict_or_none(body.get("data")),
        action=_dict_or_none(body.get("action")),
    )


def _match_output(body: Any) -> ChatReply | None:
    # n8n wraps the agent JSON as a string, sometimes inside a markdown fence
    if not isinstance(body, dict) or not isinstance(body.get("output"), str):
        return None
    output = body["output"]
    try:
        inner = json.loads(strip_fences(output))
    except ValueError:
        match = MENSAJE_AGENTE_PATTERN.search(output)
        if match:
            logger.debug("chat_output_regex_rescue")
            return ChatReply(message=match.group(1), data={})
        return None
    return _first_match(inner, OUTPUT_MATCHERS)


def _match_message(body: Any) -> ChatReply | None:
    if not isinstance(body, dict) or not isinstance(body.get("message"), str):
        return None
    if not body["message"]:
        return None
    return ChatReply(
        message=body["message"],
        data=_dict_or_none(body.get("data")),
        action=_dict_or_none(body.get("action")),
    )


def _match_text(body: Any) -> ChatReply | None:
    if not isinstance(body, str) or not body.strip():
        return None
    # Model output is often the JSON reply itself, as text
    candidate = strip_fences(body).strip()
    if candidate.startswith("{"):
        try:
            inner = json.loads(candidate)
        except ValueError:
            pass
        else:
            reply = _first_match(inner, OUTPUT_MATCHERS)
            if reply is not None:
                return reply
    return ChatReply(message=body)


Matcher = Callable[[Any], ChatReply | None]

MATCHERS: tuple[Matcher, ...] = (
    _match_envelope,
    _match_legacy,
    _match_output,
    _match_message,
    _match_text,
)

# Shapes accepted inside an already-unwrapped payload
OUTPUT_MATCHERS: tuple[Matcher, ...] = (_match_envelope, _match_legacy, _match_message)


def _first_match(body: Any, matchers: tuple[Matcher, ...]) -> ChatReply | None:
    for matcher in matchers:
        reply = matcher(body)
        if reply is not None:
            return reply
    return None


def parse_chat_response(body: Any) -> ChatReply:
    """Normalise any known reply shape.

    Raises:
        ChatResponseError: If no shape matches
    """
    reply = _first_match(body, MATCHERS)
    if reply is None:
        logger.error("chat_response_unrecognised", body_type=type(body).__name__)
        raise ChatResponseError("Unrecognised response format from chat service")
    return reply


def extract_actions(text: str) -> list[ChatAction]:
    """Extract [ACTION:TYPE]{json}[/ACTION] blocks from a reply.

    Blocks are parsed independently; a malformed one is logged and
    skipped without affecting the others.
    """
    actions = []
    for match in ACTION_PATTERN.finditer(text):
        action_type, raw = match.group(1), match.group(2)
        try:
            data = json.loads(strip_fences(raw.strip()))
        except ValueError as e:
            logger.error("chat_action_malformed", action=action_type, error=str(e))
            continue
        if not isinstance(data, dict):
            logger.error("chat_action_malformed", action=action_type, error="payload is not an object")
            continue
        actions.append(ChatAction(type=action_type, data=data))
    return actions


def strip_actions(text: str) -> str:
    """Remove action blocks from text meant for display."""
    return ACTION_PATTERN.sub("", text).strip()


def structured_action(reply: ChatReply) -> ChatAction | None:
    """The reply's ``action: {type, ...}`` field as a ChatAction."""
    if not reply.action or not isinstance(reply.action.get("type"), str):
        return None
    data = reply.action.get("data")
    if not isinstance(data, dict):
        data = reply.data or {}
    return ChatAction(
        type=reply.action["type"].upper(),
        data=data,
        target_id=reply.action.get("planId", reply.action.get("plan_id")),
    )
