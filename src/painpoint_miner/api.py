"""
FastAPI app exposing the analysis flow.

Bodies use the camelCase field names of the stored records
(painPoints, potentialIdeas, sentimentScore, totalComments, ...).
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from painpoint_miner.config import Settings
from painpoint_miner.errors import (
    AnalysisNotFoundError,
    EmptyContentError,
    ModelResponseError,
    PipelineError,
    SourceFetchError,
)
from painpoint_miner.schemas import Analysis, IdeaAnalysis, PainPoint, SavedAnalysis
from painpoint_miner.service import AnalysisService, build_service
from painpoint_miner.sources import reader_url

log = logging.getLogger(__name__)


class ContentRequest(BaseModel):
    content: str = ""


class CreateAnalysisRequest(BaseModel):
    content: str = ""
    title: Optional[str] = None
    extract: bool = True


class IdeaRequest(BaseModel):
    idea: str = ""


class TitleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pain_points: List[PainPoint] = Field(default_factory=list, alias="painPoints")
    ideas: List[str] = Field(default_factory=list)


class WebsiteRequest(BaseModel):
    url: str = ""


class WebsiteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    raw_text: str = Field(..., alias="rawText")
    url: str


class CommentsResponse(BaseModel):
    comments: List[str]


class TitleResponse(BaseModel):
    title: str


def get_service(request: Request) -> AnalysisService:
    return request.app.state.service


def _error(status: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message, **extra})


def create_app(service: AnalysisService | None = None) -> FastAPI:
    """
    Builds the app. Without an explicit service, one is built from the
    environment at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            app.state.service = service
            yield
            return
        owned = build_service(Settings.from_env())
        app.state.service = owned
        try:
            yield
        finally:
            await owned.aclose()

    app = FastAPI(title="painpoint-miner", version="0.1.0", lifespan=lifespan)
    if service is not None:
        app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        details = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
        return _error(400, "Invalid request format", details=details)

    @app.exception_handler(EmptyContentError)
    async def empty_content(request: Request, exc: EmptyContentError):
        return _error(400, str(exc))

    @app.exception_handler(AnalysisNotFoundError)
    async def not_found(request: Request, exc: AnalysisNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(PipelineError)
    async def pipeline_failed(request: Request, exc: PipelineError):
        log.error("Error in analysis: %s", exc)
        return _error(502, str(exc), chunk=exc.chunk_id, totalChunks=exc.total_chunks)

    @app.exception_handler(ModelResponseError)
    async def model_failed(request: Request, exc: ModelResponseError):
        log.error("Model call failed: %s", exc)
        return _error(502, str(exc))

    @app.exception_handler(SourceFetchError)
    async def fetch_failed(request: Request, exc: SourceFetchError):
        log.error("Error processing source: %s", exc)
        return _error(502, str(exc))

    @app.post("/api/analyze", response_model=Analysis)
    async def analyze(body: ContentRequest, svc: AnalysisService = Depends(get_service)):
        if not body.content.strip():
            raise EmptyContentError("Invalid content format")
        log.info("Processing content for analysis (%d chars)", len(body.content))
        return await svc.analyze(body.content)

    @app.post("/api/analyze-idea", response_model=IdeaAnalysis)
    async def analyze_idea(body: IdeaRequest, svc: AnalysisService = Depends(get_service)):
        return await svc.analyze_idea(body.idea)

    @app.post("/api/filter-comments", response_model=CommentsResponse)
    async def filter_comments(body: ContentRequest, svc: AnalysisService = Depends(get_service)):
        return CommentsResponse(comments=await svc.filter_comments(body.content))

    @app.post("/api/generate-title", response_model=TitleResponse)
    async def generate_title(body: TitleRequest, svc: AnalysisService = Depends(get_service)):
        return TitleResponse(title=await svc.generate_title(body.pain_points, body.ideas))

    @app.post("/api/process-website", response_model=WebsiteResponse)
    async def process_website(body: WebsiteRequest, svc: AnalysisService = Depends(get_service)):
        raw_text = await svc.fetch_website(body.url)
        return WebsiteResponse(raw_text=raw_text, url=reader_url(body.url))

    @app.get("/api/hn-comments")
    async def hn_comments(
        query: str = "",
        time_range: str = Query("24h", alias="timeRange"),
        page: int = Query(0, ge=0),
        svc: AnalysisService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await svc.search_hn_comments(query, time_range, page)

    @app.get("/api/analyses", response_model=List[SavedAnalysis])
    def list_analyses(svc: AnalysisService = Depends(get_service)):
        return svc.list_analyses()

    @app.post("/api/analyses", response_model=SavedAnalysis, status_code=201)
    async def create_analysis(body: CreateAnalysisRequest, svc: AnalysisService = Depends(get_service)):
        return await svc.create_analysis(body.content, body.title, extract=body.extract)

    @app.get("/api/analyses/{analysis_id}", response_model=SavedAnalysis)
    def get_analysis(analysis_id: str, svc: AnalysisService = Depends(get_service)):
        return svc.get_analysis(analysis_id)

    @app.delete("/api/analyses/{analysis_id}", status_code=204)
    def delete_analysis(analysis_id: str, svc: AnalysisService = Depends(get_service)):
        svc.delete_analysis(analysis_id)

    @app.post("/api/analyses/{analysis_id}/title", response_model=SavedAnalysis)
    async def regenerate_title(analysis_id: str, svc: AnalysisService = Depends(get_service)):
        return await svc.regenerate_title(analysis_id)

    @app.post("/api/analyses/{analysis_id}/ideas", response_model=SavedAnalysis)
    async def analyze_saved_idea(analysis_id: str, body: IdeaRequest, svc: AnalysisService = Depends(get_service)):
        await svc.analyze_idea(body.idea, analysis_id=analysis_id)
        return await run_in_threadpool(svc.get_analysis, analysis_id)

    return app
