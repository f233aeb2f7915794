"""System prompt templates and keyword routing."""

from __future__ import annotations

import enum
from collections.abc import Sequence

from zivy.configs.system import PromptConfig

from .knowledge import KnowledgeStore
from .models import ROLE_SYSTEM, ChatMessage


class PromptMode(str, enum.Enum):
    DOMAIN = "domain"
    GENERAL = "general"


DOMAIN_PROMPT = """You are {assistant_name}, the AI assistant for {product_name}.
Answer all questions concisely and clearly, with a friendly but professional tone.
Be warm and human, but avoid lengthy replies or unnecessary details.
Mirror the user's mood: act chill and casual if they are, businesslike if they're serious.
For store, product, booking and support questions, answer only from the {product_name} knowledge below.
If the knowledge does not cover the question, say so and point the user to {support_contact}.
Never invent prices, dates or policies.

Formatting rules:
- Keep replies under 120 words unless the user asks for detail.
- Use short bullet lists for steps or options.
- Do not use headings.

{product_name} knowledge:
{knowledge}"""  # noqa: E501

GENERAL_PROMPT = """You are {assistant_name}, the AI assistant for {product_name}.
Answer the question using your general world knowledge, concisely and clearly, with a friendly but professional tone.
Mirror the user's mood: act chill and casual if they are, businesslike if they're serious.
If the user asks about {product_name} itself, invite them to ask about our travel packages, prices or support.
Keep replies under 120 words unless the user asks for detail."""  # noqa: E501

ASSISTANT_INSTRUCTIONS = """You are {assistant_name}, the AI assistant for {product_name}.
Answer concisely and clearly, with a friendly but professional tone.
Mirror the user's mood: act chill and casual if they are, businesslike if they're serious.
For store, product, booking and support questions, search the attached {product_name} knowledge file and answer only from it.
If the file does not cover the question, say so and point the user to {support_contact}.
For other topics, use your general world knowledge.
Keep replies under 120 words unless the user asks for detail."""  # noqa: E501


class PromptBuilder:
    """Builds the system instruction for a user query.

    A query containing any configured keyword (case-insensitive
    substring) gets the domain prompt with the full knowledge blob
    inlined; anything else gets the general persona prompt.
    """

    def __init__(self, config: PromptConfig, knowledge: KnowledgeStore) -> None:
        self._config = config
        self._knowledge = knowledge
        self._keywords = [k.lower() for k in config.domain_keywords if k.strip()]

    @property
    def keywords(self) -> list[str]:
        return list(self._keywords)

    def matched_keywords(self, query: str) -> list[str]:
        lowered = query.lower()
        return [k for k in self._keywords if k in lowered]

    def select_mode(self, query: str) -> PromptMode:
        lowered = query.lower()
        if any(k in lowered for k in self._keywords):
            return PromptMode.DOMAIN
        return PromptMode.GENERAL

    def build(self, query: str) -> str:
        if self.select_mode(query) is PromptMode.DOMAIN:
            return self._format(DOMAIN_PROMPT, knowledge=self._knowledge.text)
        return self._format(GENERAL_PROMPT)

    def assistant_instructions(self) -> str:
        return self._format(ASSISTANT_INSTRUCTIONS)

    def apply(
        self, messages: Sequence[ChatMessage], system_prompt: str
    ) -> list[ChatMessage]:
        """Return *messages* with *system_prompt* as the only system message.

        Client-supplied system messages are dropped wherever they appear.
        """
        system = ChatMessage(role=ROLE_SYSTEM, content=system_prompt)
        return [system, *(m for m in messages if m.role != ROLE_SYSTEM)]

    def _format(self, template: str, **extra: str) -> str:
        return template.format(
            assistant_name=self._config.assistant_name,
            product_name=self._config.product_name,
            support_contact=self._config.support_contact,
            **extra,
        ).strip()
