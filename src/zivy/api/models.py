"""Pydantic models for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from zivy.core.models import ROLE_USER, ChatMessage
from zivy.core.usage import UsageSnapshot

MESSAGES_FIELD = "messages"

_MESSAGES_ADAPTER = TypeAdapter(list[ChatMessage])


class InvalidChatRequest(Exception):
    """The /chat body failed validation (answered with HTTP 400)."""


def parse_chat_messages(body: Any) -> list[ChatMessage]:
    """Validate a raw /chat body and return its messages.

    Raises:
        InvalidChatRequest: when ``messages`` is missing, not an array,
            empty, malformed, or does not end with a user message.
    """
    if not isinstance(body, dict):
        raise InvalidChatRequest("Invalid request format: expected a JSON object.")

    raw = body.get(MESSAGES_FIELD)
    if not isinstance(raw, list):
        raise InvalidChatRequest("Invalid request format: 'messages' must be an array.")
    if not raw:
        raise InvalidChatRequest("Invalid request format: 'messages' must not be empty.")

    try:
        messages = _MESSAGES_ADAPTER.validate_python(raw)
    except ValidationError:
        raise InvalidChatRequest(
            "Invalid request format: each message needs a role "
            "(user, system or assistant) and string content."
        ) from None

    if messages[-1].role != ROLE_USER:
        raise InvalidChatRequest(
            "Invalid request format: the last message must come from the user."
        )
    return messages


class ChatReply(BaseModel):
    reply: str = Field(description="Assistant reply or a friendly fallback")


class SwitchModelRequest(BaseModel):
    model: str = Field(description="Model name from llm.allowed_models")


class SwitchModelResponse(BaseModel):
    success: bool = True
    previous_model: str
    active_model: str


class ReloadKnowledgeResponse(BaseModel):
    success: bool = True
    knowledge_length: int
    source: str


class ReadinessFlags(BaseModel):
    knowledge_loaded: bool
    vendor_configured: bool
    relay_ready: bool


class HealthResponse(BaseModel):
    status: str
    provider: str
    model: str
    ready: ReadinessFlags
    metrics: UsageSnapshot


class ConfigEcho(BaseModel):
    provider: str
    active_model: str
    allowed_models: list[str]
    knowledge_length: int
    knowledge_source: str
    domain_keywords: list[str]
    sessions: int
    session_capacity: int
    cors: str


class StatsResponse(BaseModel):
    metrics: UsageSnapshot
    average_cost_per_request: float
    pricing: dict[str, Any]
    config: ConfigEcho
    notes: list[str]


class ConnectivityResponse(BaseModel):
    status: str
    message: str
    provider: str
    model: str
    timestamp: datetime
