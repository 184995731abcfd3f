# Typed dataclasses shared across the generation modules.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from contentgen.search.types import SearchResult

DEFAULT_PROVIDER = "OpenAI"


@dataclass
class Message:
    """Single transcript turn: system, user, or assistant."""
    role: str
    content: str


@dataclass(frozen=True)
class ChatMessage:
    """Display view of a chat turn: user or model."""
    role: str
    text: str


@dataclass(frozen=True)
class ChatReply:
    text: str


@dataclass(frozen=True)
class GenerationOptions:
    """Presets picked by the user for one generation run."""
    audience: str
    length: str
    style: str
    engine: str
    provider: str = DEFAULT_PROVIDER


@dataclass(frozen=True)
class ArticleData:
    """One finished article. Replaced wholesale on every run, never edited."""
    title: str
    content: str
    sources: List[SearchResult] = field(default_factory=list)
