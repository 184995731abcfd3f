# Data models for the search layer.
# What the engines return once normalized, and what the fetcher hands on.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class SearchResult:
    """A citation: one search hit's title and link."""
    title: str
    uri: str


@dataclass
class ContextResult:
    """Concatenated result text plus the parallel citation list."""
    text: str
    sources: List[SearchResult] = field(default_factory=list)
    engine: str = ""
