# Shared fixtures: stub search engines, stub model clients and an app wired
# to them, so no test touches the network.

from typing import List, Optional

import pytest

from contentgen import app as app_module
from contentgen.errors import ProviderHttpError, SearchProviderError
from contentgen.generate import ArticleGenerator, EchoDevClient
from contentgen.pipeline import ArticlePipeline
from contentgen.search import ContextFetcher, ContextResult, SearchResult
from contentgen.settings import Settings


class StubEngine:
    """Search engine double: returns `count` results or raises."""

    def __init__(self, name: str, count: int = 0, fail: bool = False):
        self.name = name
        self.count = count
        self.fail = fail
        self.queries: List[str] = []

    def search(self, query: str) -> ContextResult:
        self.queries.append(query)
        if self.fail:
            raise SearchProviderError(self.name, "503")
        sources = [SearchResult(title=f"{self.name} {i}", uri=f"https://{self.name.lower()}.test/{i}") for i in range(1, self.count + 1)]
        text = "\n\n".join(
            f"[Source {i}]\nTitle: {s.title}\nContent: fact {i}\nURL: {s.uri}" for i, s in enumerate(sources, start=1)
        )
        return ContextResult(text=text, sources=sources, engine=self.name)


class FailingClient:
    engine = "Failing"
    model = "failing"

    def __init__(self, status: Optional[int] = 500):
        self.status = status
        self.calls = 0

    def generate(self, messages):
        self.calls += 1
        raise ProviderHttpError(self.status, "upstream exploded", provider=self.engine)


@pytest.fixture
def stub_engine():
    return StubEngine


@pytest.fixture
def failing_client():
    return FailingClient()


@pytest.fixture
def echo_client():
    return EchoDevClient()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        OUTPUT_DIR=str(tmp_path / "docs"),
        COVER_IMAGES=["covers/green.jpg"],
        TAVILY_API_KEY="tvly-test",
        EXA_API_KEY="exa-test",
        WECHAT_APP_ID="wx-app-id",
        WECHAT_APP_SECRET="wx-app-secret",
        PUBLISH_TIMEOUT=5,
    )


@pytest.fixture
def services(test_settings, echo_client, monkeypatch):
    """App services wired to stub engines and the echo client."""
    svc = app_module.build_services(test_settings)
    svc.client_factory = lambda provider: echo_client
    svc.engines = {"Tavily": StubEngine("Tavily", count=3), "Exa": StubEngine("Exa", count=1)}
    svc.pipeline = ArticlePipeline(
        ContextFetcher(svc.engines),
        ArticleGenerator(svc.client_factory),
        covers=test_settings.COVER_IMAGES,
    )
    monkeypatch.setattr(app_module, "services", svc)
    yield svc
    svc.publisher.shutdown()
