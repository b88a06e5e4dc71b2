"""Asynchronous enrichment of search results with analysis records.

Results are shown to the user first and analysed afterwards. An
``EnrichmentBatch`` walks its result list and yields one event when an item
starts and one when it finishes (``analyzed`` or ``failed``). Each update
replaces the item in the batch's own list with a new immutable copy. Items
that already carry an analysis emit nothing and count as completed.

Progress counts successful analyses only, so it reaches 1.0 iff every item
was analysed. The batch itself is finished once every item was attempted;
``EnrichmentSummary`` reports both numbers.
"""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable

from pressroom.agents.scorer import Scorer
from pressroom.models.schemas import AnalysisResult, SearchResult
from pressroom.services import logger as log_service


class EnrichmentPhase(str, Enum):
    STARTED = "started"
    ANALYZED = "analyzed"
    FAILED = "failed"


@dataclass(frozen=True)
class EnrichmentEvent:
    index: int
    result: SearchResult
    progress: float
    phase: EnrichmentPhase
    error: str | None = None


@dataclass
class EnrichmentSummary:
    total: int
    completed: int = 0
    failed: int = 0
    cancelled: bool = False

    @property
    def is_complete(self) -> bool:
        """True when every item was analysed successfully."""
        return not self.cancelled and self.completed == self.total

    @property
    def progress(self) -> float:
        return 1.0 if self.total == 0 else self.completed / self.total


class EnrichmentBatch:
    """A single, non-restartable pass of analysis over a result list."""

    def __init__(
        self,
        scorer: Scorer,
        results: list[SearchResult],
        *,
        max_parallel: int = 1,
        cancel: asyncio.Event | None = None,
    ) -> None:
        self.scorer = scorer
        self.results = results
        self.max_parallel = max(int(max_parallel), 1)
        self.cancel = cancel or asyncio.Event()
        # Results that already carry an analysis are never scored again.
        self.pending = [i for i, r in enumerate(results) if r.analysis is None]
        self.summary = EnrichmentSummary(
            total=len(results), completed=len(results) - len(self.pending)
        )
        self._consumed = False

    def __aiter__(self) -> AsyncIterator[EnrichmentEvent]:
        if self._consumed:
            raise RuntimeError("EnrichmentBatch can only be iterated once")
        self._consumed = True
        if self.max_parallel == 1:
            return self._run_sequential()
        return self._run_bounded()

    def _cancelled(self) -> bool:
        if self.cancel.is_set():
            self.summary.cancelled = True
            return True
        return False

    def _started(self, index: int) -> SearchResult:
        started = self.results[index].model_copy(update={"is_analyzing": True})
        self.results[index] = started
        return started

    def _finish(
        self, index: int, analysis: AnalysisResult | None, error: Exception | None
    ) -> EnrichmentEvent:
        if analysis is not None:
            updated = self.results[index].model_copy(
                update={"is_analyzing": False, "analysis": analysis}
            )
            self.results[index] = updated
            self.summary.completed += 1
            return EnrichmentEvent(index, updated, self.summary.progress, EnrichmentPhase.ANALYZED)

        updated = self.results[index].model_copy(update={"is_analyzing": False})
        self.results[index] = updated
        self.summary.failed += 1
        log_service.log_event(
            event_type="analysis_failed",
            message="Analysis failed for result",
            result_id=updated.id,
            error=str(error),
        )
        return EnrichmentEvent(
            index,
            updated,
            self.summary.progress,
            EnrichmentPhase.FAILED,
            error=str(error) or type(error).__name__,
        )

    def _abandon(self, index: int) -> None:
        self.results[index] = self.results[index].model_copy(update={"is_analyzing": False})

    async def _score(self, index: int) -> tuple[AnalysisResult | None, Exception | None]:
        try:
            return await self.scorer.score(self.results[index]), None
        except Exception as e:
            return None, e

    async def _run_sequential(self) -> AsyncIterator[EnrichmentEvent]:
        for index in self.pending:
            if self._cancelled():
                return
            started = self._started(index)
            yield EnrichmentEvent(index, started, self.summary.progress, EnrichmentPhase.STARTED)

            analysis, error = await self._score(index)
            if self._cancelled():
                self._abandon(index)
                return
            yield self._finish(index, analysis, error)

    async def _run_bounded(self) -> AsyncIterator[EnrichmentEvent]:
        """Up to ``max_parallel`` items in flight, started in input order.

        Events of one item stay ordered (started before finished); events of
        different items interleave.
        """
        queue: asyncio.Queue[tuple[str, int, Any, Any]] = asyncio.Queue()
        semaphore = asyncio.Semaphore(self.max_parallel)

        async def worker(index: int) -> None:
            try:
                async with semaphore:
                    if self.cancel.is_set():
                        return
                    await queue.put(("started", index, None, None))
                    analysis, error = await self._score(index)
                    await queue.put(("finished", index, analysis, error))
            finally:
                await queue.put(("done", index, None, None))

        tasks = [asyncio.create_task(worker(i)) for i in self.pending]
        remaining = len(tasks)
        try:
            while remaining:
                kind, index, analysis, error = await queue.get()
                if kind == "done":
                    remaining -= 1
                    continue
                if self._cancelled():
                    self._abandon(index)
                    continue
                if kind == "started":
                    started = self._started(index)
                    yield EnrichmentEvent(
                        index, started, self.summary.progress, EnrichmentPhase.STARTED
                    )
                else:
                    yield self._finish(index, analysis, error)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)


UpdateCallback = Callable[[int, SearchResult], Any]
ProgressCallback = Callable[[float], Any]
CompleteCallback = Callable[[EnrichmentSummary], Any]


async def _call(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class Enricher:
    """Attaches an AnalysisResult to every result of a batch.

    Args:
        scorer: Any object with ``async score(result) -> AnalysisResult``.
        max_parallel: 1 analyses items strictly one after another; larger
            values allow that many items in flight.
    """

    def __init__(self, scorer: Scorer, *, max_parallel: int = 1) -> None:
        self.scorer = scorer
        self.max_parallel = max(int(max_parallel), 1)

    def enrich(
        self,
        results: list[SearchResult],
        *,
        cancel: asyncio.Event | None = None,
    ) -> EnrichmentBatch:
        return EnrichmentBatch(
            self.scorer,
            results,
            max_parallel=self.max_parallel,
            cancel=cancel,
        )

    async def run(
        self,
        results: list[SearchResult],
        *,
        on_update: UpdateCallback | None = None,
        on_progress: ProgressCallback | None = None,
        on_complete: CompleteCallback | None = None,
        cancel: asyncio.Event | None = None,
    ) -> EnrichmentSummary:
        """Drive a batch, invoking callbacks for each event.

        ``on_progress`` fires after every finished item; ``on_complete`` only
        when all items were analysed successfully.
        """
        batch = self.enrich(results, cancel=cancel)
        async for event in batch:
            await _call(on_update, event.index, event.result)
            if event.phase != EnrichmentPhase.STARTED:
                await _call(on_progress, event.progress)
        if batch.summary.is_complete:
            await _call(on_complete, batch.summary)
        return batch.summary
