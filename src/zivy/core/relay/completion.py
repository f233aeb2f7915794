"""Stateless chat-completion relay (OpenAI Chat Completions or Gemini)."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from zivy.core.models import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ChatMessage,
    RelayResult,
    VendorErrorKind,
)
from zivy.core.prompt import PromptBuilder

from .base import VendorRelay

logger = logging.getLogger(__name__)

ChatModelFactory = Callable[[str], BaseChatModel]
"""``model_name -> chat model``, see ``relay.deps.build_chat_model``."""


def to_lc_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """Convert API messages to langchain message objects."""
    converted: list[BaseMessage] = []
    for msg in messages:
        if msg.role == ROLE_SYSTEM:
            converted.append(SystemMessage(content=msg.content))
        elif msg.role == ROLE_ASSISTANT:
            converted.append(AIMessage(content=msg.content))
        else:
            converted.append(HumanMessage(content=msg.content))
    return converted


def content_text(content: Any) -> str:
    """Flatten a chat model's ``content`` (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


class CompletionRelay(VendorRelay):
    """One vendor call per request with the full message list.

    The system prompt is rebuilt for every request from the latest user
    query, so keyword routing and knowledge reloads take effect
    immediately.
    """

    def __init__(
        self,
        *,
        provider: str,
        prompts: PromptBuilder,
        model_factory: ChatModelFactory,
        model_name: str,
    ) -> None:
        super().__init__(prompts=prompts, model_name=model_name)
        self.provider = provider
        self._model_factory = model_factory
        self._llm: BaseChatModel | None = None

    def _chat_model(self) -> BaseChatModel:
        # Built lazily so a missing API key surfaces as a classified
        # vendor error on the first call instead of failing startup.
        if self._llm is None:
            self._llm = self._model_factory(self._model_name)
        return self._llm

    def switch_model(self, model_name: str) -> str:
        previous = super().switch_model(model_name)
        self._llm = None
        return previous

    async def _send(
        self, messages: Sequence[ChatMessage], *, session_key: str
    ) -> RelayResult:
        query = messages[-1].content
        system_prompt = self._prompts.build(query)
        outbound = self._prompts.apply(messages, system_prompt)

        logger.debug(
            "Completion call: provider=%s model=%s mode=%s messages=%d",
            self.provider,
            self._model_name,
            self._prompts.select_mode(query).value,
            len(outbound),
        )
        response = await self._chat_model().ainvoke(to_lc_messages(outbound))
        reply = content_text(response.content).strip()
        if not reply:
            return RelayResult.failure(
                VendorErrorKind.UNKNOWN,
                "Vendor returned an empty reply",
                model_name=self._model_name,
            )

        return RelayResult.success(
            reply,
            model_name=self._model_name,
            input_chars=sum(len(m.content) for m in outbound),
        )
