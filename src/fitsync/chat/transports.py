"""Transports that deliver a chat message to a conversational service.

Each transport returns the raw decoded reply body; shape handling lives
in parsers.
"""

from typing import Any, Protocol

import httpx
import structlog

from ..clients.api import ApiClient, TokenProvider
from ..config import Settings
from ..errors import BackendError, ChatResponseError, ChatServiceError
from .prompts import COACH_SYSTEM_PROMPT

logger = structlog.get_logger(__name__)


class ChatTransport(Protocol):
    # True when the service applies actions itself before replying
    acts_on_server: bool

    async def send(self, message: str) -> Any: ...


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class N8nWebhookTransport:
    """Posts messages to the n8n webhook that fronts the agent."""

    acts_on_server = False

    def __init__(
        self,
        url: str,
        username: str,
        token_provider: TokenProvider | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.username = username
        self.token_provider = token_provider
        self.timeout = timeout
        self.transport = transport

    async def send(self, message: str) -> Any:
        token = await self.token_provider() if self.token_provider else None
        payload = {
            "type": "mensaje_chat",
            "token": token,
            "data": {"nombre_usuario": self.username, "mensaje": message},
        }
        logger.debug("n8n_request", url=self.url, message_length=len(message))
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    self.url, json=payload, headers={"Accept": "application/json"}
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("n8n_request_failed", url=self.url, error=str(e) or type(e).__name__)
                raise ChatServiceError(f"n8n webhook failed: {e or type(e).__name__}") from e
        return _decode(response)


class DeepSeekTransport:
    """Calls the OpenAI-compatible DeepSeek chat completions endpoint."""

    acts_on_server = False

    def __init__(
        self,
        api_url: str,
        api_key: str | None,
        model: str = "deepseek-chat",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def send(self, message: str) -> Any:
        if not self.api_key:
            raise ChatServiceError("DeepSeek API key is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": COACH_SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            "temperature": 0.7,
            "max_tokens": 2000,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.api_url}/chat/completions", json=payload, headers=headers
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("deepseek_request_failed", error=str(e) or type(e).__name__)
                raise ChatServiceError(f"DeepSeek request failed: {e or type(e).__name__}") from e

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ChatResponseError("DeepSeek reply has no message content") from e


class BackendChatTransport:
    """Sends chat messages through the REST backend's AI endpoint."""

    acts_on_server = True

    def __init__(self, api: ApiClient, user_id: int = 1):
        self.api = api
        self.user_id = user_id

    async def send(self, message: str) -> Any:
        try:
            response = await self.api.post("/ai/chat", {"message": message, "userId": self.user_id})
        except BackendError as e:
            raise ChatServiceError(f"Backend chat failed: {e}") from e
        return response.data


def build_transport(
    settings: Settings,
    api: ApiClient,
    token_provider: TokenProvider | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ChatTransport:
    """Create the transport selected by settings.chat_backend."""
    if settings.chat_backend == "deepseek":
        return DeepSeekTransport(
            settings.deepseek_api_url,
            settings.deepseek_api_key,
            model=settings.deepseek_model,
            timeout=settings.chat_timeout,
            transport=transport,
        )
    if settings.chat_backend == "backend":
        return BackendChatTransport(api, user_id=settings.default_user_id)
    return N8nWebhookTransport(
        settings.n8n_webhook_url,
        settings.username,
        token_provider=token_provider,
        timeout=settings.chat_timeout,
        transport=transport,
    )
