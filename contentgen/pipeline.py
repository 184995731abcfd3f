# ============================================================
# Article pipeline
# ------------------------------------------------------------
#   keyword -> search (with fallback) -> generate -> front-matter
# plus the state container that holds the current article.
# ============================================================

from __future__ import annotations

import logging
import random
import threading
from typing import Optional, Sequence

from contentgen.errors import EmptyContext, StaleGeneration
from contentgen.generate import ArticleData, ArticleGenerator, GenerationOptions
from contentgen.generate.frontmatter import add_front_matter, pick_cover
from contentgen.search import ContextFetcher, ContextResult, SearchResult

logger = logging.getLogger(__name__)


class ArticlePipeline:
    def __init__(
        self,
        fetcher: ContextFetcher,
        generator: ArticleGenerator,
        covers: Sequence[str] = (),
        rng: Optional[random.Random] = None,
    ):
        self.fetcher = fetcher
        self.generator = generator
        self.covers = list(covers)
        self.rng = rng

    def fetch(self, keyword: str, engine: str) -> ContextResult:
        ctx = self.fetcher.fetch_context(keyword, engine)
        if not ctx.text.strip():
            raise EmptyContext()
        return ctx

    def run(self, keyword: str, options: GenerationOptions) -> ArticleData:
        ctx = self.fetch(keyword, options.engine)
        logger.info("Context for '%s' from %s: %d sources", keyword[:80], ctx.engine, len(ctx.sources))
        return self._compose(keyword, ctx.text, ctx.sources, options)

    def run_from_text(self, keyword: str, text: str, options: GenerationOptions) -> ArticleData:
        """Generate from supplied text (pasted or parsed from a document); no search."""
        return self._compose(keyword, text, [], options)

    def _compose(self, keyword, raw_data: str, sources: Sequence[SearchResult], options) -> ArticleData:
        body = self.generator.generate(keyword, raw_data, options)
        content = add_front_matter(body, title=keyword, cover=pick_cover(self.covers, self.rng))
        return ArticleData(title=keyword, content=content, sources=list(sources))


class ArticleStore:
    """Holds the current article; newer requests win.

    Callers take a ticket before starting work and commit with it. A commit
    whose ticket is no longer the newest is rejected, so a slow earlier
    request can never overwrite a later one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ticket = 0
        self._current: Optional[ArticleData] = None

    def begin(self) -> int:
        with self._lock:
            self._ticket += 1
            return self._ticket

    def commit(self, ticket: int, article: ArticleData) -> ArticleData:
        with self._lock:
            if ticket != self._ticket:
                logger.warning("Discarding stale article for '%s' (ticket %d < %d)", article.title[:80], ticket, self._ticket)
                raise StaleGeneration()
            self._current = article
            return article

    @property
    def current(self) -> Optional[ArticleData]:
        with self._lock:
            return self._current
