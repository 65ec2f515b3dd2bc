from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx
from fastapi.concurrency import run_in_threadpool

from painpoint_miner.analyzer import ChunkAnalyzer
from painpoint_miner.comments import CommentExtractor, TitleGenerator
from painpoint_miner.config import Settings
from painpoint_miner.errors import EmptyContentError, ModelResponseError
from painpoint_miner.ideas import IdeaAnalyzer
from painpoint_miner.openai_client import build_async_client
from painpoint_miner.pipeline import AnalysisPipeline
from painpoint_miner.schemas import Analysis, IdeaAnalysis, PainPoint, SavedAnalysis
from painpoint_miner.sources import SourceFetcher
from painpoint_miner.store import AnalysisStore
from painpoint_miner.tokenizer import PARAGRAPH_SEPARATOR

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled analysis"


class AnalysisService:
    """
    Application flow around the chunk pipeline: comment extraction, analysis,
    titles, idea market analysis and persistence. All collaborators are
    injected; build_service() wires the real ones from Settings.

    The async flows run store file I/O in the threadpool. The plain accessors
    (list, get, delete) are blocking and meant for sync callers.
    """

    def __init__(
        self,
        *,
        pipeline: AnalysisPipeline,
        extractor: CommentExtractor,
        titles: TitleGenerator,
        ideas: IdeaAnalyzer,
        fetcher: SourceFetcher,
        store: AnalysisStore,
        closers: Iterable[Any] = (),
    ):
        self.pipeline = pipeline
        self.extractor = extractor
        self.titles = titles
        self.ideas = ideas
        self.fetcher = fetcher
        self.store = store
        self._closers = list(closers)

    async def aclose(self) -> None:
        for c in self._closers:
            if isinstance(c, httpx.AsyncClient):
                await c.aclose()
            else:
                await c.close()

    async def filter_comments(self, content: str) -> List[str]:
        if not content or not content.strip():
            raise EmptyContentError("No content to filter")
        return await self.extractor.extract(content)

    async def analyze(self, content: str) -> Optional[Analysis]:
        return await self.pipeline.run(content)

    async def generate_title(self, pain_points: Iterable[PainPoint], ideas: Iterable[str]) -> str:
        return await self.titles.generate(pain_points, ideas)

    async def create_analysis(self, content: str, title: str | None = None, *, extract: bool = True) -> SavedAnalysis:
        if not content or not content.strip():
            raise EmptyContentError("No content to analyze")

        if extract:
            comments = await self.filter_comments(content)
            # One comment per paragraph so the chunker never splits a comment.
            content = PARAGRAPH_SEPARATOR.join(comments)
            log.info("Analyzing filtered content (%d chars)", len(content))

        analysis = await self.analyze(content)
        if analysis is None:
            raise EmptyContentError("Nothing to analyze after cleanup")

        title = (title or "").strip()
        if not title:
            try:
                title = await self.generate_title(analysis.pain_points, analysis.potential_ideas)
            except ModelResponseError as e:
                log.warning("Title generation failed, using default: %s", e)
                title = DEFAULT_TITLE

        return await run_in_threadpool(self.store.insert, title, analysis)

    async def analyze_idea(self, idea: str, analysis_id: str | None = None) -> IdeaAnalysis:
        if not idea or not idea.strip():
            raise EmptyContentError("No idea given")
        if analysis_id is not None:
            await run_in_threadpool(self.store.get, analysis_id)  # fail before spending a model call

        result = await self.ideas.analyze_idea(idea)
        if analysis_id is not None:
            await run_in_threadpool(self.store.set_market_analysis, analysis_id, idea, result)
        return result

    async def regenerate_title(self, analysis_id: str) -> SavedAnalysis:
        saved = await run_in_threadpool(self.store.get, analysis_id)
        title = await self.generate_title(saved.analysis.pain_points, saved.analysis.potential_ideas)
        log.info("Updated title for analysis %s: %s", analysis_id, title)
        return await run_in_threadpool(self.store.update_title, analysis_id, title)

    async def fetch_website(self, url: str) -> str:
        return await self.fetcher.fetch_website(url)

    async def search_hn_comments(self, query: str = "", time_range: str = "24h", page: int = 0) -> Dict[str, Any]:
        return await self.fetcher.search_hn_comments(query, time_range, page)

    def list_analyses(self) -> List[SavedAnalysis]:
        return self.store.list()

    def get_analysis(self, analysis_id: str) -> SavedAnalysis:
        return self.store.get(analysis_id)

    def delete_analysis(self, analysis_id: str) -> None:
        self.store.delete(analysis_id)


def build_service(settings: Settings) -> AnalysisService:
    client = build_async_client(settings.openai_api_key, timeout=settings.http_timeout_s)
    closers: List[Any] = [client]

    # Extraction and titles go to DeepSeek when configured, else to OpenAI.
    if settings.deepseek_api_key:
        aux_client = build_async_client(
            settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            timeout=settings.http_timeout_s,
        )
        aux_model = settings.deepseek_model
        closers.append(aux_client)
    else:
        aux_client, aux_model = client, settings.model

    http = httpx.AsyncClient(timeout=settings.http_timeout_s, follow_redirects=True)
    closers.append(http)

    analyzer = ChunkAnalyzer(client, model=settings.model, temperature=settings.temperature)
    pipeline = AnalysisPipeline(
        analyzer,
        max_chunk_size=settings.chunk_max_chars,
        max_concurrency=settings.chunk_max_concurrency,
        chunk_timeout_s=settings.chunk_timeout_s,
    )

    return AnalysisService(
        pipeline=pipeline,
        extractor=CommentExtractor(aux_client, model=aux_model),
        titles=TitleGenerator(aux_client, model=aux_model),
        ideas=IdeaAnalyzer(client, model=settings.idea_model, temperature=settings.idea_temperature),
        fetcher=SourceFetcher(http),
        store=AnalysisStore(settings.store_path),
        closers=closers,
    )
