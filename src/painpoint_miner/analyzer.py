from __future__ import annotations

import logging

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from painpoint_miner.errors import ChunkAnalysisError
from painpoint_miner.openai_client import responses_parse
from painpoint_miner.schemas import Analysis

log = logging.getLogger(__name__)


SYSTEM_CHUNK = """You analyze user comments to identify potential micro-SaaS opportunities.
Rules:
- Focus on specific, niche problems that can be solved with a simple software solution.
- Only use what is present in the comments. Do not invent mentions.
- Examples must be excerpts of the given comments.
Return structured output exactly matching the schema.
"""

USER_CHUNK = """Analyze these user comments to identify potential micro-SaaS opportunities.

Identify:
1. Pain Points: specific, recurring problems that affect a niche group of users.
   For each: a short topic, the number of comments mentioning it, the average
   sentiment from -1 (negative) to 1 (positive) and relevant comment excerpts.
2. Micro-SaaS Ideas: for each major pain point, a focused SaaS solution that
   - solves one specific problem well
   - can be built by a small team
   - has clear monetization potential
   - could reach $5k-20k MRR
   Format each idea as 'A [type] tool for [specific user] to [solve specific problem]'.
3. The overall sentiment score (-1 to 1) and the total number of comments.

COMMENTS:
{chunk}
"""


class ChunkAnalyzer:
    """Turns one chunk of comments into a validated partial Analysis."""

    def __init__(self, client: AsyncOpenAI, *, model: str, temperature: float = 0.2):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def analyze_chunk(self, chunk: str) -> Analysis:
        try:
            resp = await responses_parse(
                client=self.client,
                model=self.model,
                input_messages=[
                    {"role": "system", "content": SYSTEM_CHUNK},
                    {"role": "user", "content": USER_CHUNK.format(chunk=chunk)},
                ],
                text_format=Analysis,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise ChunkAnalysisError(f"model call failed: {e}") from e
        except ValidationError as e:
            raise ChunkAnalysisError(f"model output does not match the analysis schema: {e}") from e

        parsed = resp.output_parsed
        if parsed is None:
            raise ChunkAnalysisError("model returned no parsable analysis")

        log.debug(
            "Chunk analyzed: %d pain points, %d ideas, %d comments",
            len(parsed.pain_points), len(parsed.potential_ideas), parsed.total_comments,
        )
        return parsed
