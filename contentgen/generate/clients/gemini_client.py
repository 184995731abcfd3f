# Client for Gemini via the google-genai SDK.
# Transcripts are reshaped into systemInstruction + contents; the result is
# the same (text, meta) pair the OpenAI client returns.

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from google import genai
from google.genai import errors, types

from contentgen.errors import DocumentFetchError, ProviderConfigError, ProviderHttpError
from ..types import Message

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


class GeminiClient:
    engine = "Gemini"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        base_url: Optional[str] = None,
        download_timeout: float = 60.0,
    ):
        if not api_key:
            raise ProviderConfigError("请在 .env 或环境变量中配置 GEMINI_API_KEY")
        self.model = model
        self.download_timeout = download_timeout
        base_url = (base_url or "").rstrip("/")
        if base_url:
            self.client = genai.Client(api_key=api_key, http_options=types.HttpOptions(base_url=base_url))
        else:
            self.client = genai.Client(api_key=api_key)

    @classmethod
    def from_settings(cls, settings) -> "GeminiClient":
        return cls(
            settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.LLM_GEMINI_API_BASE_URL,
        )

    @staticmethod
    def to_contents(messages: List[Message]) -> Tuple[Optional[str], List[types.Content]]:
        """Split a transcript into (system instruction, contents)."""
        system_parts: List[str] = []
        contents: List[types.Content] = []
        for m in messages:
            if m.role == "system":
                system_parts.append(m.content)
            else:
                role = "user" if m.role == "user" else "model"
                contents.append(types.Content(role=role, parts=[types.Part(text=m.content)]))
        if not contents:
            contents = [types.Content(role="user", parts=[types.Part(text="")])]
        system = "\n\n".join(system_parts) if system_parts else None
        return system, contents

    def _call(self, contents, config: Optional[types.GenerateContentConfig] = None) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except errors.APIError as e:
            raise ProviderHttpError(e.code, str(e), provider=self.engine) from e
        return response.text or ""

    def generate(self, messages: List[Message]) -> Tuple[str, Dict[str, Any]]:
        system, contents = self.to_contents(messages)
        config = types.GenerateContentConfig(system_instruction=system) if system else None
        text = self._call(contents, config)
        return text, {"engine": "gemini", "model": self.model}

    def parse_document(self, pdf_url: str, prompt: str) -> str:
        """Download a PDF and ask the model to process it with `prompt`."""
        try:
            resp = requests.get(pdf_url, timeout=self.download_timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DocumentFetchError(f"PDF download failed: {e}") from e

        logger.info("Parsing document %s (%d bytes) with %s", pdf_url, len(resp.content), self.model)
        contents = [
            types.Part.from_text(text=prompt),
            types.Part.from_bytes(data=resp.content, mime_type=PDF_MIME),
        ]
        return self._call(contents)
