# Search engine adapters.
# Tavily and Exa take different request bodies and return slightly different
# result shapes; both are normalized into ContextResult here so the fetcher
# never branches on the engine name.

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from contentgen.errors import SearchProviderError
from .types import ContextResult, SearchResult

logger = logging.getLogger(__name__)

TAVILY_URL = "https://api.tavily.com/search"
EXA_URL = "https://api.exa.ai/search"

UNTITLED = "无标题"


def format_source_block(idx: int, title: Any, content: str, url: Any) -> str:
    """One `[Source n]` block of the context text (n is 1-based)."""
    return f"[Source {idx}]\nTitle: {title}\nContent: {content}\nURL: {url}"


class SearchProvider:
    """Base adapter: POST a query, normalize `results` into a ContextResult."""

    name = ""
    url = ""

    def __init__(self, api_key: Optional[str], max_results: int = 10, timeout: float = 30.0):
        self.api_key = api_key
        self.max_results = max_results
        self.timeout = timeout

    # -------------------------
    # Engine-specific hooks
    # -------------------------
    def _headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def _payload(self, query: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _content_of(self, result: Dict[str, Any]) -> str:
        raise NotImplementedError

    # -------------------------
    # Public API
    # -------------------------
    def search(self, query: str) -> ContextResult:
        if not self.api_key:
            raise SearchProviderError(self.name, "API key is not configured")

        headers = {"Content-Type": "application/json", **self._headers()}
        try:
            resp = requests.post(self.url, json=self._payload(query), headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise SearchProviderError(self.name, f"request failed: {e}") from e

        if not resp.ok:
            raise SearchProviderError(self.name, str(resp.status_code))

        try:
            data = resp.json()
        except ValueError as e:
            raise SearchProviderError(self.name, "malformed JSON response") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            raise SearchProviderError(self.name, "No Results")

        return self._normalize(results)

    def _normalize(self, results: List[Dict[str, Any]]) -> ContextResult:
        sources = [
            SearchResult(title=r.get("title") or UNTITLED, uri=r.get("url") or "")
            for r in results
        ]
        blocks = [
            format_source_block(idx, src.title, self._content_of(r), src.uri)
            for idx, (r, src) in enumerate(zip(results, sources), start=1)
        ]
        logger.info("%s returned %d results", self.name, len(results))
        return ContextResult(text="\n\n".join(blocks), sources=sources, engine=self.name)


class TavilyProvider(SearchProvider):
    name = "Tavily"
    url = TAVILY_URL

    def __init__(
        self,
        api_key: Optional[str],
        max_results: int = 10,
        timeout: float = 30.0,
        search_depth: str = "basic",
        time_range: str = "month",
    ):
        super().__init__(api_key, max_results=max_results, timeout=timeout)
        self.search_depth = search_depth
        self.time_range = time_range

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(self, query: str) -> Dict[str, Any]:
        return {
            "query": query,
            "include_answer": "basic",
            "search_depth": self.search_depth,
            "max_results": self.max_results,
            "time_range": self.time_range,
        }

    def _content_of(self, result: Dict[str, Any]) -> str:
        content = result.get("content")
        return "" if content is None else str(content)


class ExaProvider(SearchProvider):
    name = "Exa"
    url = EXA_URL

    def __init__(
        self,
        api_key: Optional[str],
        max_results: int = 10,
        timeout: float = 30.0,
        highlight_chars: int = 4000,
    ):
        super().__init__(api_key, max_results=max_results, timeout=timeout)
        self.highlight_chars = highlight_chars

    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key or ""}

    def _payload(self, query: str) -> Dict[str, Any]:
        return {
            "query": query,
            "numResults": self.max_results,
            "type": "auto",
            "contents": {"highlights": {"maxCharacters": self.highlight_chars}},
        }

    def _content_of(self, result: Dict[str, Any]) -> str:
        highlights = result.get("highlights")
        if isinstance(highlights, list):
            return "\n".join(str(h) for h in highlights)
        return result.get("snippet") or "No snippet"


def build_providers(settings) -> Dict[str, SearchProvider]:
    """Engine name -> configured adapter."""
    return {
        TavilyProvider.name: TavilyProvider(
            settings.TAVILY_API_KEY,
            max_results=settings.SEARCH_MAX_RESULTS,
            timeout=settings.SEARCH_TIMEOUT,
            search_depth=settings.TAVILY_SEARCH_DEPTH,
            time_range=settings.TAVILY_TIME_RANGE,
        ),
        ExaProvider.name: ExaProvider(
            settings.EXA_API_KEY,
            max_results=settings.SEARCH_MAX_RESULTS,
            timeout=settings.SEARCH_TIMEOUT,
            highlight_chars=settings.EXA_HIGHLIGHT_CHARS,
        ),
    }
