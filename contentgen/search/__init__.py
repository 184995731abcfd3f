# Makes the folder importable as a package.
# Exports the fetcher, the engine adapters and the result types.

from .fetcher import ContextFetcher
from .providers import ExaProvider, SearchProvider, TavilyProvider, build_providers
from .types import ContextResult, SearchResult

__all__ = [
    "ContextFetcher",
    "ContextResult",
    "ExaProvider",
    "SearchProvider",
    "SearchResult",
    "TavilyProvider",
    "build_providers",
]
