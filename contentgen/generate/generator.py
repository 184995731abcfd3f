# ArticleGenerator: system instruction + one user turn, sent once to the
# provider named in the options. Returns the raw text.

from __future__ import annotations

import logging
from typing import Callable, List

from .prompts import build_system_instruction, build_user_prompt
from .types import GenerationOptions, Message

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], object]


class ArticleGenerator:
    def __init__(self, client_factory: ClientFactory):
        """`client_factory(provider)` returns a model client for that provider.

        It is called per request, so missing credentials surface as
        ProviderConfigError before any network call.
        """
        self.client_factory = client_factory

    def compose_messages(self, keyword: str, raw_data: str, options: GenerationOptions) -> List[Message]:
        return [
            Message(role="system", content=build_system_instruction(raw_data, options)),
            Message(role="user", content=build_user_prompt(keyword)),
        ]

    def generate(self, keyword: str, raw_data: str, options: GenerationOptions) -> str:
        client = self.client_factory(options.provider)
        messages = self.compose_messages(keyword, raw_data, options)
        text, meta = client.generate(messages)
        logger.info(
            "Generated article for '%s' via %s/%s (%d chars)",
            keyword[:80],
            meta.get("engine"),
            meta.get("model"),
            len(text or ""),
        )
        return text or ""
