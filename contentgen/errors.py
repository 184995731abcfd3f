"""Error taxonomy shared by the search, generation, storage and publish layers.

Every error carries the HTTP status the API answers with, so ``app.py`` can
translate them in one exception handler.
"""

from __future__ import annotations

from typing import Optional

BODY_PREVIEW_CHARS = 500


class ContentGenError(Exception):
    status_code = 500


class SearchProviderError(ContentGenError):
    """A single search engine failed (transport, status, payload or empty result)."""

    status_code = 502

    def __init__(self, engine: str, reason: str):
        self.engine = engine
        self.reason = reason
        super().__init__(f"{engine} Error: {reason}")


class SearchUnavailable(ContentGenError):
    status_code = 502

    def __init__(self, primary: str, secondary: str):
        self.primary = primary
        self.secondary = secondary
        super().__init__(f"检索失败：{primary} 及备用 {secondary} 均不可用。")


class EmptyContext(ContentGenError):
    status_code = 422

    def __init__(self, message: str = "未能获取到任何有效信息，请检查关键词或 API 额度。"):
        super().__init__(message)


class ProviderConfigError(ContentGenError):
    status_code = 500


class ProviderHttpError(ContentGenError):
    """Non-success or unparsable response from a generation provider."""

    status_code = 502

    def __init__(self, status: Optional[int], body: str, provider: str = ""):
        self.status = status
        self.body = body or ""
        self.provider = provider
        preview = self.body[:BODY_PREVIEW_CHARS]
        prefix = f"{provider} " if provider else ""
        if status is None:
            super().__init__(f"{prefix}request failed: {preview}")
        else:
            super().__init__(f"{prefix}HTTP {status}: {preview}")


class DocumentFetchError(ContentGenError):
    status_code = 502


class EmptyContent(ContentGenError):
    status_code = 400

    def __init__(self, message: str = "content 不能为空"):
        super().__init__(message)


class SaveFailure(ContentGenError):
    status_code = 500


class PublishFailure(ContentGenError):
    status_code = 400

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class StaleGeneration(ContentGenError):
    status_code = 409

    def __init__(self, message: str = "A newer generation request superseded this one."):
        super().__init__(message)


class SessionNotFound(ContentGenError):
    status_code = 404

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Chat session not found: {session_id}")
