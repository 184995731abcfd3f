# Context fetcher: primary engine first, one fallback to the other engine.
# No backoff, no caching; every call goes to the network.

from __future__ import annotations

import logging
from typing import Dict, List

import requests

from contentgen.errors import SearchProviderError, SearchUnavailable
from .providers import SearchProvider
from .types import ContextResult

logger = logging.getLogger(__name__)


class ContextFetcher:
    def __init__(self, providers: Dict[str, SearchProvider]):
        if len(providers) != 2:
            raise ValueError("ContextFetcher needs exactly two search engines")
        self.providers = providers

    @property
    def engines(self) -> List[str]:
        return list(self.providers)

    def secondary_for(self, engine: str) -> str:
        if engine not in self.providers:
            raise ValueError(f"Unknown search engine: {engine}")
        return next(name for name in self.providers if name != engine)

    def fetch_context(self, keyword: str, primary_engine: str) -> ContextResult:
        """Search `keyword` on `primary_engine`, falling back once to the other engine.

        Raises SearchUnavailable (naming both engines) when both attempts fail.
        """
        secondary = self.secondary_for(primary_engine)
        try:
            return self.providers[primary_engine].search(keyword)
        except (SearchProviderError, requests.RequestException) as err:
            logger.warning(
                "Primary search engine (%s) failed, retrying with %s: %s",
                primary_engine,
                secondary,
                err,
            )

        try:
            return self.providers[secondary].search(keyword)
        except (SearchProviderError, requests.RequestException) as err:
            logger.error("Fallback search engine (%s) failed: %s", secondary, err)
            raise SearchUnavailable(primary_engine, secondary) from err
