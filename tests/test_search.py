# ===============================================
# tests/test_search.py
# Engine adapters (Tavily / Exa) and the
# primary -> secondary fallback in ContextFetcher.
# ===============================================

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from contentgen.errors import SearchProviderError, SearchUnavailable
from contentgen.search import ContextFetcher, ExaProvider, SearchResult, TavilyProvider
from contentgen.search.providers import EXA_URL, TAVILY_URL


def _response(status=200, payload=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = payload if payload is not None else {}
    return resp


TAVILY_RESULTS = {
    "results": [
        {"title": "量子比特突破", "content": "2024 年 12 月发布 105 比特芯片", "url": "https://a.test/1"},
        {"title": "纠错进展", "content": "逻辑错误率下降", "url": "https://b.test/2"},
        {"title": None, "url": "https://c.test/3"},
    ]
}

EXA_RESULTS = {
    "results": [
        {"title": "Exa hit", "highlights": ["first highlight", "second highlight"], "url": "https://exa.test/1"},
    ]
}


def _engines():
    return {
        "Tavily": TavilyProvider("tvly-key"),
        "Exa": ExaProvider("exa-key"),
    }


# -------------------------
# Adapters
# -------------------------
@patch("contentgen.search.providers.requests.post")
def test_tavily_request_shape(mock_post):
    mock_post.return_value = _response(payload=TAVILY_RESULTS)

    TavilyProvider("tvly-key").search("量子计算")

    args, kwargs = mock_post.call_args
    assert args[0] == TAVILY_URL
    assert kwargs["headers"]["Authorization"] == "Bearer tvly-key"
    assert kwargs["json"] == {
        "query": "量子计算",
        "include_answer": "basic",
        "search_depth": "basic",
        "max_results": 10,
        "time_range": "month",
    }


@patch("contentgen.search.providers.requests.post")
def test_tavily_normalizes_results(mock_post):
    mock_post.return_value = _response(payload=TAVILY_RESULTS)

    ctx = TavilyProvider("tvly-key").search("量子计算")

    assert ctx.engine == "Tavily"
    assert ctx.sources[0] == SearchResult(title="量子比特突破", uri="https://a.test/1")
    assert ctx.sources[2].title == "无标题"
    assert ctx.text.startswith("[Source 1]\nTitle: 量子比特突破\nContent: 2024 年 12 月发布 105 比特芯片\nURL: https://a.test/1")
    # missing content renders as an empty string
    assert "[Source 3]\nTitle: 无标题\nContent: \nURL: https://c.test/3" in ctx.text


@patch("contentgen.search.providers.requests.post")
def test_exa_request_and_highlights(mock_post):
    mock_post.return_value = _response(payload=EXA_RESULTS)

    ctx = ExaProvider("exa-key").search("量子计算")

    args, kwargs = mock_post.call_args
    assert args[0] == EXA_URL
    assert kwargs["headers"]["x-api-key"] == "exa-key"
    assert kwargs["json"]["numResults"] == 10
    assert kwargs["json"]["type"] == "auto"
    assert kwargs["json"]["contents"] == {"highlights": {"maxCharacters": 4000}}
    assert "Content: first highlight\nsecond highlight" in ctx.text


@patch("contentgen.search.providers.requests.post")
def test_exa_falls_back_to_snippet(mock_post):
    mock_post.return_value = _response(payload={"results": [
        {"title": "a", "snippet": "short snippet", "url": "u1"},
        {"title": "b", "url": "u2"},
    ]})

    ctx = ExaProvider("exa-key").search("q")

    assert "Content: short snippet" in ctx.text
    assert "Content: No snippet" in ctx.text


@pytest.mark.parametrize(
    "response",
    [_response(status=401), _response(payload={"results": []}), _response(payload={"error": "quota"})],
)
def test_adapter_failures_raise(response):
    with patch("contentgen.search.providers.requests.post", return_value=response):
        with pytest.raises(SearchProviderError) as exc:
            TavilyProvider("tvly-key").search("q")
    assert exc.value.engine == "Tavily"


@patch("contentgen.search.providers.requests.post")
def test_adapter_transport_error(mock_post):
    mock_post.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(SearchProviderError):
        ExaProvider("exa-key").search("q")


@patch("contentgen.search.providers.requests.post")
def test_adapter_without_key_skips_network(mock_post):
    with pytest.raises(SearchProviderError):
        TavilyProvider(None).search("q")
    mock_post.assert_not_called()


# -------------------------
# Fallback
# -------------------------
@patch("contentgen.search.providers.requests.post")
def test_tavily_three_results_end_to_end(mock_post):
    mock_post.return_value = _response(payload=TAVILY_RESULTS)

    ctx = ContextFetcher(_engines()).fetch_context("量子计算", "Tavily")

    assert mock_post.call_count == 1
    assert len(ctx.sources) == 3
    for n in (1, 2, 3):
        assert f"[Source {n}]" in ctx.text
    assert "[Source 4]" not in ctx.text


@patch("contentgen.search.providers.requests.post")
def test_primary_failure_falls_back_once(mock_post, caplog):
    def fake_post(url, **kwargs):
        if url == TAVILY_URL:
            raise requests.ConnectionError("tavily down")
        return _response(payload=EXA_RESULTS)

    mock_post.side_effect = fake_post

    with caplog.at_level(logging.WARNING, logger="contentgen.search.fetcher"):
        ctx = ContextFetcher(_engines()).fetch_context("量子计算", "Tavily")

    assert [c.args[0] for c in mock_post.call_args_list] == [TAVILY_URL, EXA_URL]
    assert len(ctx.sources) == 1
    assert ctx.engine == "Exa"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any("Tavily" in r.getMessage() for r in warnings)


def test_secondary_called_exactly_once(stub_engine):
    tavily, exa = stub_engine("Tavily", fail=True), stub_engine("Exa", count=2)
    fetcher = ContextFetcher({"Tavily": tavily, "Exa": exa})

    ctx = fetcher.fetch_context("kw", "Tavily")

    assert tavily.queries == ["kw"]
    assert exa.queries == ["kw"]
    assert len(ctx.sources) == 2


def test_exa_primary_falls_back_to_tavily(stub_engine):
    tavily, exa = stub_engine("Tavily", count=1), stub_engine("Exa", fail=True)
    ctx = ContextFetcher({"Tavily": tavily, "Exa": exa}).fetch_context("kw", "Exa")
    assert ctx.engine == "Tavily"


def test_primary_success_skips_secondary(stub_engine):
    tavily, exa = stub_engine("Tavily", count=2), stub_engine("Exa", count=1)
    ContextFetcher({"Tavily": tavily, "Exa": exa}).fetch_context("kw", "Tavily")
    assert exa.queries == []


def test_both_failing_names_both_engines(stub_engine):
    tavily, exa = stub_engine("Tavily", fail=True), stub_engine("Exa", fail=True)
    fetcher = ContextFetcher({"Tavily": tavily, "Exa": exa})

    with pytest.raises(SearchUnavailable) as exc:
        fetcher.fetch_context("kw", "Exa")

    message = str(exc.value)
    assert "Exa" in message and "Tavily" in message
    assert len(tavily.queries) == 1 and len(exa.queries) == 1


def test_unknown_engine_rejected(stub_engine):
    fetcher = ContextFetcher({"Tavily": stub_engine("Tavily"), "Exa": stub_engine("Exa")})
    with pytest.raises(ValueError):
        fetcher.fetch_context("kw", "Bing")
