from __future__ import annotations

import logging

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from painpoint_miner.errors import ModelResponseError
from painpoint_miner.openai_client import responses_parse
from painpoint_miner.schemas import IdeaAnalysis

log = logging.getLogger(__name__)


SYSTEM_IDEA = "You are a market research expert specializing in technology products and startups. Provide detailed, data-driven analysis."

USER_IDEA = """Analyze this idea for micro-SaaS potential. Focus on finding a very specific niche problem that can be solved with a simple, focused solution.

Idea: {idea}

Analyze and provide:
1. Niche Market: Identify a specific subset of users or businesses with this pain point
2. Similar Solutions: Focus on small, successful micro-SaaS products (not large companies)
3. Market Potential: Estimate monthly recurring revenue potential for a micro-SaaS in this space
4. Key Features: List 3-5 core features that solve the specific pain point (keep it minimal)
5. Monetization: Suggest pricing model and target price point for a micro-SaaS solution
"""


class IdeaAnalyzer:
    """Market analysis for a single candidate idea (one request, no merge)."""

    def __init__(self, client: AsyncOpenAI, *, model: str, temperature: float = 0.7):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def analyze_idea(self, idea: str) -> IdeaAnalysis:
        try:
            resp = await responses_parse(
                client=self.client,
                model=self.model,
                input_messages=[
                    {"role": "system", "content": SYSTEM_IDEA},
                    {"role": "user", "content": USER_IDEA.format(idea=idea)},
                ],
                text_format=IdeaAnalysis,
                temperature=self.temperature,
            )
        except (openai.OpenAIError, ValidationError) as e:
            raise ModelResponseError(f"Failed to analyze idea: {e}") from e

        parsed = resp.output_parsed
        if parsed is None:
            raise ModelResponseError("No content generated for idea analysis")
        log.info("Idea analyzed: %d similar apps", len(parsed.similar_apps))
        return parsed
