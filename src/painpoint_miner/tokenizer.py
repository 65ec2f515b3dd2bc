from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List

import tiktoken

DEFAULT_MAX_CHUNK_SIZE = 12000
PARAGRAPH_SEPARATOR = "\n\n"

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


@lru_cache(maxsize=1)
def get_encoder():
    # Prefer newest encoding if available; fall back safely.
    for name in ("o200k_base", "cl100k_base"):
        try:
            return tiktoken.get_encoding(name)
        except Exception:
            continue
    return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    return len(get_encoder().encode(text or ""))


@dataclass(frozen=True)
class Chunk:
    chunk_id: int
    text: str
    token_estimate: int


def split_paragraphs(content: str) -> List[str]:
    """
    Blank-line separated paragraphs. Leading indentation is kept (quoted code,
    nested replies); trailing whitespace and whitespace-only paragraphs are dropped.
    """
    paragraphs = (p.rstrip() for p in _PARAGRAPH_SPLIT.split(content or ""))
    return [p for p in paragraphs if p.strip()]


def split_content(content: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> List[str]:
    """
    Greedy pack paragraphs into chunks of at most max_chunk_size characters.

    Paragraphs are never split: a paragraph longer than the bound becomes a
    chunk of its own. Only the ends of each chunk are trimmed.
    Empty input gives no chunks.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    chunks: List[str] = []
    buf = ""

    for paragraph in split_paragraphs(content):
        joined_len = len(buf) + len(PARAGRAPH_SEPARATOR) + len(paragraph)
        if buf and joined_len > max_chunk_size:
            chunks.append(buf.strip())
            buf = paragraph
            continue
        buf = f"{buf}{PARAGRAPH_SEPARATOR}{paragraph}" if buf else paragraph

    if buf:
        chunks.append(buf.strip())

    return chunks


def chunk_content(content: str, *, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> List[Chunk]:
    """Same split as split_content, with 1-based ids and token estimates."""
    return [
        Chunk(chunk_id=i, text=text, token_estimate=count_tokens(text))
        for i, text in enumerate(split_content(content, max_chunk_size), start=1)
    ]
