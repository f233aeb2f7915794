"""Shared fixtures: config on a temp knowledge file, a scripted relay, an app."""

from collections.abc import AsyncGenerator, Generator, Sequence
from pathlib import Path
from typing import Annotated

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from zivy.app import get_app
from zivy.configs.config import AppConfig
from zivy.configs.system import (
    APIConfig,
    CORSConfig,
    KnowledgeConfig,
    LLMConfig,
    LoggingConfig,
)
from zivy.core.context import RelayContext, build_relay_context
from zivy.core.knowledge import KnowledgeStore
from zivy.core.models import ChatMessage, RelayResult
from zivy.core.prompt import PromptBuilder
from zivy.core.relay.base import VendorRelay
from zivy.core.sessions import SessionRegistry
from zivy.infra.lifespan import get_app as lifespan_app

KNOWLEDGE_TEXT = (
    "TravDif sells the Alpine Explorer package for $1,299 per person.\n"
    "Support: support@travdif.com"
)

ALLOWED_ORIGIN = "https://travdif.com"


class ScriptedRelay(VendorRelay):
    """Relay that replays queued outcomes (results or exceptions)."""

    provider = "openai"

    def __init__(self, prompts: PromptBuilder, model_name: str = "gpt-4o") -> None:
        super().__init__(prompts=prompts, model_name=model_name)
        self._ready = True
        self.outcomes: list[RelayResult | Exception] = []
        self.calls: list[tuple[list[ChatMessage], str]] = []

    def queue(self, *outcomes: RelayResult | Exception) -> None:
        self.outcomes.extend(outcomes)

    async def _send(
        self, messages: Sequence[ChatMessage], *, session_key: str
    ) -> RelayResult:
        self.calls.append((list(messages), session_key))
        if self.outcomes:
            outcome = self.outcomes.pop(0)
        else:
            outcome = RelayResult.success(
                "Hello from Zivy!", model_name=self._model_name, input_chars=100
            )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def knowledge_file(tmp_path: Path) -> Path:
    path = tmp_path / "travdif_knowledge.txt"
    path.write_text(KNOWLEDGE_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def app_config(knowledge_file: Path) -> AppConfig:
    return AppConfig(
        llm=LLMConfig(
            provider="openai",
            openai_api_key="sk-test",
            google_api_key="",
            model_name="gpt-4o",
            allowed_models=["gpt-4o", "gpt-4o-mini"],
        ),
        knowledge=KnowledgeConfig(
            directory=str(knowledge_file.parent), filename=knowledge_file.name
        ),
        cors=CORSConfig(allow_all=False, allow_origins=[ALLOWED_ORIGIN]),
        api=APIConfig(admin_token=""),
        logging=LoggingConfig(json_output=False),
    )


@pytest.fixture
def relay_context(app_config: AppConfig) -> RelayContext:
    knowledge = KnowledgeStore(
        app_config.knowledge_path, app_config.knowledge.fallback
    )
    knowledge.load()
    prompts = PromptBuilder(app_config.prompt, knowledge)
    return RelayContext(
        config=app_config,
        knowledge=knowledge,
        prompts=prompts,
        sessions=SessionRegistry(app_config.sessions.capacity),
        relay=ScriptedRelay(prompts, app_config.llm.model_name),
    )


@pytest.fixture
def relay(relay_context: RelayContext) -> ScriptedRelay:
    assert isinstance(relay_context.relay, ScriptedRelay)
    return relay_context.relay


def build_test_app(config: AppConfig, context: RelayContext) -> FastAPI:
    """App whose lifespan installs *context* instead of a real relay."""
    app = get_app(config)

    async def fake_build_relay_context(
        app: Annotated[FastAPI, Depends(lifespan_app)],
    ) -> AsyncGenerator[RelayContext, None]:
        app.state.relay_context = context
        yield context

    app.dependency_overrides[build_relay_context] = fake_build_relay_context
    return app


@pytest.fixture
def client(
    app_config: AppConfig, relay_context: RelayContext
) -> Generator[TestClient, None, None]:
    with TestClient(build_test_app(app_config, relay_context)) as test_client:
        yield test_client


def user_messages(*contents: str) -> list[dict[str, str]]:
    return [{"role": "user", "content": c} for c in contents]
