from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from painpoint_miner.errors import ChunkAnalysisError, PipelineError
from painpoint_miner.merge import merge_analyses
from painpoint_miner.schemas import Analysis
from painpoint_miner.tokenizer import DEFAULT_MAX_CHUNK_SIZE, split_content

log = logging.getLogger(__name__)


class SupportsAnalyzeChunk(Protocol):
    def analyze_chunk(self, chunk: str) -> Awaitable[Analysis]: ...


MergeFn = Callable[[Sequence[Analysis]], Optional[Analysis]]


class AnalysisPipeline:
    """
    chunk -> concurrent per-chunk analysis -> merge.

    The join is all-or-nothing: the first failing chunk cancels the rest and the
    whole run fails with PipelineError. Merging only starts once every chunk
    has an analysis.
    """

    def __init__(
        self,
        analyzer: SupportsAnalyzeChunk,
        *,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        max_concurrency: int | None = 4,
        chunk_timeout_s: float | None = 120.0,
        merge: MergeFn = merge_analyses,
    ):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1 or None, got {max_concurrency}")
        self.analyzer = analyzer
        self.max_chunk_size = max_chunk_size
        self.max_concurrency = max_concurrency
        self.chunk_timeout_s = chunk_timeout_s
        self.merge = merge

    async def run(self, content: str) -> Optional[Analysis]:
        chunks = split_content(content, self.max_chunk_size)
        log.info("Split content into %d chunks", len(chunks))

        analyses = await self._analyze_all(chunks)
        log.info("Successfully analyzed %d chunks", len(chunks))

        merged = self.merge(analyses)
        if merged is not None:
            log.info(
                "Merged analysis: %d pain points, %d ideas, %d comments",
                len(merged.pain_points), len(merged.potential_ideas), merged.total_comments,
            )
        return merged

    async def _analyze_all(self, chunks: List[str]) -> List[Analysis]:
        if not chunks:
            return []

        sem = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        tasks = [
            asyncio.ensure_future(self._analyze_one(chunk_id, chunk, sem))
            for chunk_id, chunk in enumerate(chunks, start=1)
        ]

        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            await _cancel_all(tasks)
            raise

        if pending:
            await _cancel_all(pending)

        # Report the failure of the lowest chunk id among those that finished.
        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                cause = task.exception()
                log.error("Chunk analysis failed, aborting %d chunk(s): %s", len(chunks), cause)
                raise PipelineError(cause, total_chunks=len(chunks)) from cause

        return [task.result() for task in tasks]

    async def _analyze_one(self, chunk_id: int, chunk: str, sem: asyncio.Semaphore | None) -> Analysis:
        if sem is None:
            return await self._call_analyzer(chunk_id, chunk)
        async with sem:
            return await self._call_analyzer(chunk_id, chunk)

    async def _call_analyzer(self, chunk_id: int, chunk: str) -> Analysis:
        log.debug("Analyzing chunk %d (%d chars)", chunk_id, len(chunk))
        try:
            if self.chunk_timeout_s is None:
                return await self.analyzer.analyze_chunk(chunk)
            return await asyncio.wait_for(self.analyzer.analyze_chunk(chunk), self.chunk_timeout_s)
        except ChunkAnalysisError as e:
            if e.chunk_id is None:
                e.chunk_id = chunk_id
            raise
        except asyncio.TimeoutError as e:
            raise ChunkAnalysisError(f"timed out after {self.chunk_timeout_s}s", chunk_id=chunk_id) from e
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise ChunkAnalysisError(f"{type(e).__name__}: {e}", chunk_id=chunk_id) from e


async def _cancel_all(tasks) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
