"""
ResearchOrchestrator - business logic for one research request.

Key guarantees:
- CLI/API layers stay thin (no provider or engine imports there)
- Steps run strictly in order: generation, archives, web, snapshots
- Only validation and unknown-conversation errors reach the caller;
  provider exhaustion becomes a degraded answer
"""

import asyncio
import concurrent.futures
import time
from collections.abc import Callable

from config.config import Config
from context.conversation_context import ConversationContextBuilder
from context.conversation_store import ConversationStore, get_conversation_store, title_from_query
from models.errors import ConversationNotFoundError, NoProviderAvailableError
from models.search_request import SearchRequest
from models.source import AggregateResult, Source
from orchestrator.provider_router import AIProviderRouter
from tools.archive.archival_search import ArchivalSearchService
from tools.archive.snapshot_search import SnapshotSearchService
from utils.logger import get_logger

logger = get_logger(__name__)

ARCHIVE_NOTICE = (
    "\n\nI've found additional declassified documents and archival materials that provide "
    "deeper context to this topic. Please refer to the sources panel for direct access to "
    "these primary documents."
)

DEGRADED_ANSWER = (
    "I encountered an issue while searching through the archives. However, I can still provide "
    "some general information based on my knowledge base. Please note that some sources may be "
    "temporarily unavailable."
)


class _DeadlineExceeded(Exception):
    pass


class ResearchOrchestrator:
    def __init__(
        self,
        router: AIProviderRouter,
        archival: ArchivalSearchService,
        web,
        snapshots: SnapshotSearchService,
        store: ConversationStore | None = None,
        context_builder: ConversationContextBuilder | None = None,
        deadline_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            router: AI provider router
            archival: Archive family fan-out
            web: Web aggregator (anything with ``async search(query, max_results)``)
            snapshots: Snapshot search over the Wayback index
            store: Conversation store (defaults to the process singleton)
            context_builder: Prompt prefix builder over ``store``
            deadline_s: Optional overall budget per request
            clock: Monotonic time source for the deadline
        """
        self.router = router
        self.archival = archival
        self.web = web
        self.snapshots = snapshots
        self.store = store or get_conversation_store()
        self.context_builder = context_builder or ConversationContextBuilder(self.store)
        self.deadline_s = deadline_s
        self._clock = clock

    @classmethod
    def from_config(cls, config: Config | None = None) -> "ResearchOrchestrator":
        from tools.archive.adapters import load_catalog_adapters
        from tools.archive.wayback_client import WaybackCDXClient
        from tools.web.factory import create_web_aggregator

        config = config or Config()
        store = get_conversation_store()
        return cls(
            router=AIProviderRouter.from_config(config),
            archival=ArchivalSearchService(load_catalog_adapters(config.ARCHIVE_CATALOG_PATH)),
            web=create_web_aggregator(config),
            snapshots=SnapshotSearchService(
                client=WaybackCDXClient(timeout_s=config.SNAPSHOT_TIMEOUT_S),
                domains=config.SNAPSHOT_DOMAINS,
            ),
            store=store,
            context_builder=ConversationContextBuilder(store, max_messages=config.MAX_CONTEXT_MESSAGES),
            deadline_s=config.REQUEST_DEADLINE_S,
        )

    # ---------- deadline helpers ----------

    def _remaining(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise _DeadlineExceeded()
        return remaining

    async def _bounded(self, awaitable, deadline: float | None):
        try:
            remaining = self._remaining(deadline)
        except _DeadlineExceeded:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise
        if remaining is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError:
            raise _DeadlineExceeded() from None

    # ---------- main entry ----------

    async def answer(self, request: SearchRequest) -> AggregateResult:
        """
        Run the full research pipeline for one request.

        Raises:
            ConversationNotFoundError: ``request.conversation_id`` is unknown
        """
        start = self._clock()
        deadline = start + self.deadline_s if self.deadline_s else None
        loop = asyncio.get_running_loop()

        # 0. conversation
        if request.conversation_id:
            conversation = self.store.get_conversation(request.conversation_id)
            if conversation is None:
                raise ConversationNotFoundError(request.conversation_id)
        else:
            conversation = self.store.create_conversation(title_from_query(request.query))
        conversation_id = conversation.id

        has_history = bool(self.store.get_messages(conversation_id))
        prompt = self.context_builder.build(conversation_id, request.query) if has_history else request.query

        answer_text = DEGRADED_ANSWER
        model_used = None
        degraded = True
        sources: list[Source] = []
        step_counts: dict[str, int] = {}
        attempts: list[dict] = []
        deadline_exceeded = False

        try:
            # 1. generation
            try:
                routed = await self._bounded(loop.run_in_executor(None, self.router.route, prompt), deadline)
            except NoProviderAvailableError as e:
                logger.warning(
                    "Falling back to degraded answer",
                    extra={"extra_fields": {"conversation_id": conversation_id, "error": str(e)}},
                )
                attempts = [a.to_dict() for a in e.attempts]
            else:
                answer_text = routed.content
                model_used = routed.model_used
                degraded = False
                sources.extend(routed.sources)
                attempts = [a.to_dict() for a in routed.attempts]
            step_counts["ai"] = len(sources)

            # 2. archives
            archive_families = request.archive_sources
            if archive_families:
                cap = request.max_sources * 3 // 5
                archival = await self._bounded(
                    loop.run_in_executor(None, self.archival.search, archive_families, cap, request.query),
                    deadline,
                )
                sources.extend(archival)
                step_counts["archival"] = len(archival)

            # 3. web
            if request.wants_web:
                cap = request.max_sources - len(sources)
                if cap > 0:
                    web = await self._bounded(self.web.search(request.query, max_results=cap), deadline)
                    sources.extend(web)
                    step_counts["web"] = len(web)

            # 4. snapshots
            if request.wants_snapshots:
                cap = request.max_sources // 5
                if cap > 0:
                    snapshots = await self._bounded(
                        self.snapshots.search(request.query, request.archive_years, cap), deadline
                    )
                    sources.extend(snapshots)
                    step_counts["wayback"] = len(snapshots)

        except _DeadlineExceeded:
            deadline_exceeded = True
            logger.warning(
                f"Request deadline of {self.deadline_s}s exceeded; returning partial result",
                extra={"extra_fields": {"conversation_id": conversation_id, "steps": step_counts}},
            )

        if any(s.is_archive for s in sources):
            answer_text += ARCHIVE_NOTICE

        final_sources = tuple(sources[: request.max_sources])

        self.store.add_message(conversation_id, "user", request.query)
        assistant_message = self.store.add_message(conversation_id, "assistant", answer_text, final_sources)
        self.store.add_search_history(request.query, len(final_sources))

        latency_ms = int((self._clock() - start) * 1000)
        logger.info(
            "Research request complete",
            extra={
                "extra_fields": {
                    "conversation_id": conversation_id,
                    "model_used": model_used,
                    "degraded": degraded,
                    "sources": len(final_sources),
                    "steps": step_counts,
                    "latency_ms": latency_ms,
                }
            },
        )

        return AggregateResult(
            answer_text=answer_text,
            sources=final_sources,
            conversation_id=conversation_id,
            message_id=assistant_message.id,
            model_used=model_used,
            degraded=degraded,
            metadata={
                "attempts": attempts,
                "step_counts": step_counts,
                "deadline_exceeded": deadline_exceeded,
                "latency_ms": latency_ms,
            },
        )

    def answer_sync(self, request: SearchRequest) -> AggregateResult:
        """
        Synchronous wrapper for answer().

        When an event loop is already running in this thread, the pipeline
        runs in a worker thread with its own loop.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.answer(request))

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, self.answer(request)).result()
