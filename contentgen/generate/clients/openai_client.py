# Client for any OpenAI-compatible Chat Completions endpoint.
# Same interface as the other clients: generate(messages) -> (text, meta).

from typing import Any, Dict, List, Optional, Tuple

import openai
from openai import OpenAI

from contentgen.errors import ProviderConfigError, ProviderHttpError
from ..types import Message


class OpenAIClient:
    engine = "OpenAI"

    def __init__(self, base_url: Optional[str], api_key: Optional[str], model: str = "gpt-3.5-turbo"):
        base_url = (base_url or "").rstrip("/")
        if not base_url or not api_key:
            raise ProviderConfigError("请在 .env 或环境变量中配置 LLM_API_BASE_URL 和 LLM_API_KEY")
        self.model = model
        self.base_url = base_url
        self.client = OpenAI(base_url=f"{base_url}/v1", api_key=api_key, max_retries=0)

    @classmethod
    def from_settings(cls, settings) -> "OpenAIClient":
        return cls(settings.LLM_API_BASE_URL, settings.LLM_API_KEY, model=settings.LLM_MODEL)

    def generate(self, messages: List[Message]) -> Tuple[str, Dict[str, Any]]:
        formatted = [{"role": m.role, "content": m.content} for m in messages]
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=formatted,
                stream=False,
            )
        except openai.APIStatusError as e:
            raise ProviderHttpError(e.status_code, e.response.text, provider=self.engine) from e
        except openai.APIError as e:
            raise ProviderHttpError(None, str(e), provider=self.engine) from e

        text = ""
        if resp.choices and resp.choices[0].message is not None:
            text = resp.choices[0].message.content or ""
        meta = {"engine": "openai", "model": self.model}
        return text, meta
