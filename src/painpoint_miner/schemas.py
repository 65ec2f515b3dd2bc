from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CamelModel(BaseModel):
    # JSON keeps the camelCase names the frontend/stored records use.
    model_config = ConfigDict(populate_by_name=True)


class PainPoint(_CamelModel):
    topic: str = Field(..., description="Specific niche problem, short label")
    count: int = Field(..., ge=1, description="Number of comments mentioning this problem")
    sentiment: float = Field(..., ge=-1.0, le=1.0, description="Average sentiment from -1 (negative) to 1 (positive)")
    examples: list[str] = Field(..., description="Relevant comment excerpts")

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v: str) -> str:
        # Not min_length: strict structured output has no string length keywords.
        if not v.strip():
            raise ValueError("topic must not be empty")
        return v

    @field_validator("examples")
    @classmethod
    def dedupe_examples(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class Analysis(_CamelModel):
    pain_points: list[PainPoint] = Field(..., alias="painPoints")
    potential_ideas: list[str] = Field(
        ...,
        alias="potentialIdeas",
        description="Each idea is a specific micro-SaaS solution: 'A [type] tool for [specific user] to [solve specific problem]'",
    )
    sentiment_score: float = Field(..., alias="sentimentScore", ge=-1.0, le=1.0)
    total_comments: int = Field(..., alias="totalComments", ge=0, description="Number of comments analyzed")

    @field_validator("potential_ideas")
    @classmethod
    def dedupe_ideas(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class SimilarApp(_CamelModel):
    name: str
    description: str
    url: Optional[str]


class MarketPotential(_CamelModel):
    size: str = Field(..., description="Realistic MRR for a micro-SaaS in this space")
    growth: str = Field(..., description="Market trend")
    opportunities: list[str]


class IdeaAnalysis(_CamelModel):
    similar_apps: list[SimilarApp] = Field(..., alias="similarApps")
    market_potential: MarketPotential = Field(..., alias="marketPotential")
    key_differentiators: list[str] = Field(..., alias="keyDifferentiators", description="Specific features")
    challenges: list[str]


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedAnalysis(BaseModel):
    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_utcnow)
    title: str
    analysis: Analysis
    market_analysis: dict[str, IdeaAnalysis] = Field(default_factory=dict)
