from __future__ import annotations


class PainpointMinerError(Exception):
    """Base class for errors raised by painpoint_miner."""


class ChunkAnalysisError(PainpointMinerError):
    """A single chunk could not be analyzed (transport failure, refusal or invalid output)."""

    def __init__(self, message: str, *, chunk_id: int | None = None):
        super().__init__(message)
        self.chunk_id = chunk_id

    def __str__(self) -> str:
        msg = super().__str__()
        if self.chunk_id is not None:
            return f"chunk {self.chunk_id}: {msg}"
        return msg


class PipelineError(PainpointMinerError):
    """Raised when the chunk fan-out fails; wraps the first chunk failure."""

    def __init__(self, cause: ChunkAnalysisError, *, total_chunks: int):
        super().__init__(f"Failed to analyze content: {cause}")
        self.cause = cause
        self.chunk_id = cause.chunk_id
        self.total_chunks = total_chunks


class ModelResponseError(PainpointMinerError):
    """A non-chunk model call failed or returned nothing usable."""


class SourceFetchError(PainpointMinerError):
    """Fetching remote content (web page, HN search) failed."""


class AnalysisNotFoundError(PainpointMinerError, KeyError):
    def __init__(self, analysis_id: str):
        super().__init__(analysis_id)
        self.analysis_id = analysis_id

    def __str__(self) -> str:
        return f"Analysis not found: {self.analysis_id}"


class EmptyContentError(PainpointMinerError, ValueError):
    """There is nothing left to analyze after cleanup/extraction."""
