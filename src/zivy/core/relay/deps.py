"""Relay and chat model factories."""

import logging
from functools import partial

from langchain_core.language_models import BaseChatModel
from openai import AsyncOpenAI

from zivy.configs.config import AppConfig
from zivy.configs.system import LLMConfig
from zivy.core.knowledge import KnowledgeStore
from zivy.core.prompt import PromptBuilder
from zivy.core.sessions import SessionRegistry

from .assistant import AssistantRelay
from .base import VendorRelay
from .completion import CompletionRelay

logger = logging.getLogger(__name__)


def build_chat_model(config: LLMConfig, model_name: str) -> BaseChatModel:
    """Create the langchain chat model for the configured provider."""
    timeout = config.model_timeout.total_seconds()
    if config.provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=model_name,
            google_api_key=config.google_api_key or None,
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
            timeout=timeout,
            max_retries=config.max_retries,
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=model_name,
        api_key=config.openai_api_key or None,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=timeout,
        max_retries=config.max_retries,
    )


def build_openai_client(config: LLMConfig) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=config.openai_api_key or None,
        timeout=config.model_timeout.total_seconds(),
        max_retries=config.max_retries,
    )


def build_relay(
    config: AppConfig,
    prompts: PromptBuilder,
    knowledge: KnowledgeStore,
    sessions: SessionRegistry,
) -> VendorRelay:
    """Pick the relay implementation for ``config.llm.provider``."""
    llm = config.llm
    if not llm.api_key:
        logger.error(
            "No API key configured for provider %r, vendor calls will fail",
            llm.provider,
        )

    if llm.provider == "assistant":
        return AssistantRelay(
            client_factory=partial(build_openai_client, llm),
            prompts=prompts,
            knowledge=knowledge,
            sessions=sessions,
            config=config.assistant,
            model_name=llm.model_name,
        )

    return CompletionRelay(
        provider=llm.provider,
        prompts=prompts,
        model_factory=partial(build_chat_model, llm),
        model_name=llm.model_name,
    )
