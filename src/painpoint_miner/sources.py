from __future__ import annotations

import html
import logging
import re
import time
from typing import Any, Dict, List

import httpx

from painpoint_miner.errors import SourceFetchError

log = logging.getLogger(__name__)

READER_BASE_URL = "https://r.jina.ai/"
HN_SEARCH_URL = "https://hn.algolia.com/api/v1/search"
HN_HITS_PER_PAGE = 100

_TAG_RE = re.compile(r"<[^>]+>")


def reader_url(url: str) -> str:
    return f"{READER_BASE_URL}{url.strip()}"


def hn_comment_text(raw_html: str) -> str:
    """Algolia returns comment bodies as HTML; keep paragraphs as lines."""
    text = re.sub(r"<p>", "\n", raw_html or "", flags=re.I)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


class SourceFetcher:
    """Fetches remote text: web pages through the reader proxy, HN comments through Algolia."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def fetch_website(self, url: str) -> str:
        if not url or not url.strip():
            raise SourceFetchError("No URL given")
        target = reader_url(url)
        try:
            resp = await self.http.get(target)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceFetchError(f"Failed to fetch website data: {e}") from e
        log.info("Fetched %d chars from %s", len(resp.text), target)
        return resp.text

    async def search_hn_comments(self, query: str = "", time_range: str = "24h", page: int = 0) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "tags": "comment",
            "query": query,
            "page": page,
            "hitsPerPage": HN_HITS_PER_PAGE,
        }
        if time_range == "24h":
            params["numericFilters"] = f"created_at_i>{int(time.time()) - 86400}"
        try:
            resp = await self.http.get(HN_SEARCH_URL, params=params)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceFetchError(f"Failed to fetch HN comments: {e}") from e


def hn_comments_as_paragraphs(search_response: Dict[str, Any]) -> List[str]:
    comments = []
    for hit in search_response.get("hits", []):
        text = hn_comment_text(hit.get("comment_text") or "")
        if text:
            comments.append(text)
    return comments
