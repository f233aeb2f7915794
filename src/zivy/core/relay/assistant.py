"""Stateful relay on the OpenAI Assistants API with file search.

Each visitor session owns one vendor thread (see ``SessionRegistry``).
A request appends the user message to that thread, starts a run and
polls it at a fixed interval.  When the run does not complete within
the attempt budget the request gives up with a ``timeout`` result; the
run itself is left alone on the vendor side and nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import openai
from openai import AsyncOpenAI

from zivy.configs.system import AssistantConfig
from zivy.core.knowledge import KnowledgeStore
from zivy.core.metrics import ASSISTANT_POLL_ATTEMPTS
from zivy.core.models import ROLE_ASSISTANT, ChatMessage, RelayResult, VendorErrorKind
from zivy.core.prompt import PromptBuilder
from zivy.core.sessions import SessionRegistry
from zivy.infra.telemetry import (
    ATTR_POLL_ATTEMPTS,
    ATTR_RUN_STATUS,
    SPAN_ASSISTANT_POLL,
    SPAN_KNOWLEDGE_UPLOAD,
    tracer,
)

from .base import VendorRelay

logger = logging.getLogger(__name__)

RUN_STATUS_COMPLETED = "completed"
TERMINAL_RUN_STATUSES = frozenset(
    {"completed", "failed", "cancelled", "expired", "incomplete"}
)

FILE_SEARCH_TOOL = {"type": "file_search"}

# File search citations look like 【4:0†travdif_knowledge.txt】
_CITATION_RE = re.compile(r"\s?【[^】]*】")

Sleep = Callable[[float], Awaitable[Any]]


def strip_citations(text: str) -> str:
    return _CITATION_RE.sub("", text).strip()


class AssistantRelay(VendorRelay):
    """Relay through a vendor-side assistant, thread and polled run."""

    provider = "assistant"

    def __init__(
        self,
        *,
        client_factory: Callable[[], AsyncOpenAI],
        prompts: PromptBuilder,
        knowledge: KnowledgeStore,
        sessions: SessionRegistry,
        config: AssistantConfig,
        model_name: str,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        super().__init__(prompts=prompts, model_name=model_name)
        self._client_factory = client_factory
        self._client: AsyncOpenAI | None = None
        self._knowledge = knowledge
        self._sessions = sessions
        self._config = config
        self._sleep = sleep
        self._assistant_id = config.assistant_id
        self._vector_store_id = ""
        self._setup_lock = asyncio.Lock()

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    @property
    def assistant_id(self) -> str:
        return self._assistant_id

    @property
    def vector_store_id(self) -> str:
        return self._vector_store_id

    # ------------------------------------------------------------------
    # Vendor-side setup
    # ------------------------------------------------------------------

    async def setup(self) -> None:
        """Upload the knowledge and create (or update) the assistant."""
        self._vector_store_id = await self._upload_knowledge()
        params = {
            "instructions": self._prompts.assistant_instructions(),
            "model": self._model_name,
            "tools": [FILE_SEARCH_TOOL],
            "tool_resources": self._tool_resources(),
        }
        if self._assistant_id:
            assistant = await self.client.beta.assistants.update(
                self._assistant_id, **params
            )
        else:
            assistant = await self.client.beta.assistants.create(
                name=self._config.name, **params
            )
        self._assistant_id = assistant.id
        self._ready = True
        logger.info(
            "Assistant %s ready (model=%s, vector_store=%s)",
            self._assistant_id,
            self._model_name,
            self._vector_store_id,
        )

    async def ensure_setup(self) -> None:
        """Run ``setup`` once if it has not succeeded yet.

        Concurrent callers wait on the same attempt instead of each
        creating an assistant.
        """
        if self._ready:
            return
        async with self._setup_lock:
            if not self._ready:
                await self.setup()

    async def reload_knowledge(self) -> None:
        """Re-upload the knowledge text and point the assistant at it.

        Before the first successful setup this runs the full setup instead.
        """
        if not self._ready:
            await self.ensure_setup()
            return

        previous = self._vector_store_id
        self._vector_store_id = await self._upload_knowledge()
        await self.client.beta.assistants.update(
            self._assistant_id, tool_resources=self._tool_resources()
        )
        if previous:
            try:
                await self.client.vector_stores.delete(previous)
            except Exception:
                logger.warning(
                    "Could not delete old vector store %s", previous, exc_info=True
                )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    def _tool_resources(self) -> dict[str, Any]:
        return {"file_search": {"vector_store_ids": [self._vector_store_id]}}

    async def _upload_knowledge(self) -> str:
        filename = self._knowledge.path.name or "knowledge.txt"
        with tracer.start_as_current_span(SPAN_KNOWLEDGE_UPLOAD):
            store = await self.client.vector_stores.create(
                name=self._config.vector_store_name
            )
            await self.client.vector_stores.files.upload_and_poll(
                vector_store_id=store.id,
                file=(filename, self._knowledge.text.encode("utf-8")),
            )
        logger.info(
            "Uploaded knowledge (%d chars) to vector store %s",
            self._knowledge.length,
            store.id,
        )
        return store.id

    # ------------------------------------------------------------------
    # Per-request path
    # ------------------------------------------------------------------

    async def _create_thread(self) -> str:
        thread = await self.client.beta.threads.create()
        logger.debug("Created thread %s", thread.id)
        return thread.id

    async def _send(
        self, messages: Sequence[ChatMessage], *, session_key: str
    ) -> RelayResult:
        await self.ensure_setup()

        query = messages[-1].content
        thread_id = await self._sessions.get_or_create(
            session_key, self._create_thread
        )
        try:
            await self.client.beta.threads.messages.create(
                thread_id=thread_id, role="user", content=query
            )
        except openai.NotFoundError:
            # Thread is gone vendor-side; the next request starts a new one.
            self._sessions.discard(session_key)
            logger.warning("Thread %s not found, dropped its session", thread_id)
            raise
        run = await self.client.beta.threads.runs.create(
            thread_id=thread_id,
            assistant_id=self._assistant_id,
            model=self._model_name,
        )

        status = await self._wait_for_run(thread_id, run.id)
        if status != RUN_STATUS_COMPLETED:
            logger.warning(
                "Run %s on thread %s ended as %r, returning processing reply",
                run.id,
                thread_id,
                status,
            )
            return RelayResult.failure(
                VendorErrorKind.TIMEOUT,
                f"Run {run.id} status {status}",
                model_name=self._model_name,
            )

        reply = await self._latest_reply(thread_id, run.id)
        if not reply:
            return RelayResult.failure(
                VendorErrorKind.UNKNOWN,
                f"Run {run.id} completed without an assistant message",
                model_name=self._model_name,
            )
        return RelayResult.success(
            reply,
            model_name=self._model_name,
            input_chars=len(query) + len(self._prompts.assistant_instructions()),
        )

    async def _wait_for_run(self, thread_id: str, run_id: str) -> str:
        """Poll the run until it is terminal or the attempt budget is spent."""
        interval = self._config.poll_interval.total_seconds()
        status = "queued"
        attempts = 0
        with tracer.start_as_current_span(SPAN_ASSISTANT_POLL) as span:
            while attempts < self._config.max_poll_attempts:
                await self._sleep(interval)
                attempts += 1
                run = await self.client.beta.threads.runs.retrieve(
                    run_id, thread_id=thread_id
                )
                status = run.status
                if status in TERMINAL_RUN_STATUSES:
                    break
            span.set_attribute(ATTR_POLL_ATTEMPTS, attempts)
            span.set_attribute(ATTR_RUN_STATUS, status)
        ASSISTANT_POLL_ATTEMPTS.observe(attempts)
        return status

    async def _latest_reply(self, thread_id: str, run_id: str) -> str:
        page = await self.client.beta.threads.messages.list(
            thread_id=thread_id, run_id=run_id, order="desc", limit=10
        )
        for message in page.data:
            if message.role != ROLE_ASSISTANT:
                continue
            texts = [
                block.text.value
                for block in message.content
                if getattr(block, "type", None) == "text"
            ]
            if texts:
                return strip_citations("\n".join(texts))
        return ""
