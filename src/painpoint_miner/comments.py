from __future__ import annotations

import logging
from typing import Iterable, List

import openai
from openai import AsyncOpenAI

from painpoint_miner.errors import ModelResponseError
from painpoint_miner.openai_client import chat_complete
from painpoint_miner.schemas import PainPoint

log = logging.getLogger(__name__)


SYSTEM_EXTRACT = "You are a comment extractor. Return only the actual comments, one per line, with no additional text or formatting."

USER_EXTRACT = """Extract only the user comments and discussions from the following content. Return ONLY the comments, one per line. Do not include any other text, formatting, or explanations.

Content:
{content}

Instructions:
- Extract only actual user comments and discussions
- Include one comment per line
- Do not include any formatting, headers, or explanations
- Do not categorize or label the comments
- Return only the text of the comments"""

USER_TITLE = """Based on the following analysis of user feedback, generate a concise and descriptive title (max 5 words) that captures the main theme or focus:

Pain Points:
{pain_points}

Potential Ideas:
{ideas}

Generate only the title, nothing else. Make it specific and descriptive."""

MAX_TITLE_WORDS = 5


def parse_comment_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def clean_title(text: str) -> str:
    lines = parse_comment_lines(text)
    if not lines:
        return ""
    title = lines[0].strip("\"'*# ")
    if title.lower().startswith("title:"):
        title = title[len("title:"):].strip("\"'*# ")
    words = title.split()
    return " ".join(words[:MAX_TITLE_WORDS])


class CommentExtractor:
    """Pulls the user comments out of raw page text (one comment per line)."""

    def __init__(self, client: AsyncOpenAI, *, model: str, temperature: float = 0.3):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def extract(self, content: str) -> List[str]:
        try:
            text = await chat_complete(
                client=self.client,
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_EXTRACT},
                    {"role": "user", "content": USER_EXTRACT.format(content=content)},
                ],
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise ModelResponseError(f"Failed to filter comments: {e}") from e

        comments = parse_comment_lines(text)
        if not comments:
            raise ModelResponseError("No comments extracted")
        log.info("Extracted %d comments", len(comments))
        return comments


class TitleGenerator:
    def __init__(self, client: AsyncOpenAI, *, model: str, temperature: float = 0.7):
        self.client = client
        self.model = model
        self.temperature = temperature

    async def generate(self, pain_points: Iterable[PainPoint], ideas: Iterable[str]) -> str:
        prompt = USER_TITLE.format(
            pain_points="\n".join(f"- {p.topic} ({p.count} mentions)" for p in pain_points),
            ideas="\n".join(f"- {idea}" for idea in ideas),
        )
        try:
            text = await chat_complete(
                client=self.client,
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=50,
            )
        except openai.OpenAIError as e:
            raise ModelResponseError(f"Failed to generate title: {e}") from e

        title = clean_title(text)
        if not title:
            raise ModelResponseError("Failed to generate title")
        return title
