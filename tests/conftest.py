import httpx
import pytest

from painpoint_miner.comments import CommentExtractor, TitleGenerator
from painpoint_miner.ideas import IdeaAnalyzer
from painpoint_miner.pipeline import AnalysisPipeline
from painpoint_miner.service import AnalysisService
from painpoint_miner.sources import SourceFetcher
from painpoint_miner.store import AnalysisStore

from fakes import FakeAnalyzer, FakeChatClient, FakeParseClient, make_idea_analysis, page_transport


@pytest.fixture
def store(tmp_path):
    return AnalysisStore(tmp_path / "analyses.jsonl")


@pytest.fixture
def make_service(store):
    def _make(
        analyzer=None,
        comments_text="first comment\nsecond comment",
        title_text="Invoicing Pain For Freelancers",
        title_error=None,
        idea_outcome=None,
        transport=None,
    ):
        analyzer = analyzer or FakeAnalyzer()
        return AnalysisService(
            pipeline=AnalysisPipeline(analyzer, max_chunk_size=200, max_concurrency=2, chunk_timeout_s=5),
            extractor=CommentExtractor(FakeChatClient(comments_text), model="fake"),
            titles=TitleGenerator(FakeChatClient(title_text, error=title_error), model="fake"),
            ideas=IdeaAnalyzer(FakeParseClient(idea_outcome or make_idea_analysis()), model="fake"),
            fetcher=SourceFetcher(httpx.AsyncClient(transport=transport or page_transport())),
            store=store,
        )
    return _make
