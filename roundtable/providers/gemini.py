"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from roundtable.models import CompletionOptions, ConversationTurn
from roundtable.providers.base import AIProvider, EmptyResponseError, ProviderError, read_api_key

logger = logging.getLogger(__name__)

_ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client: genai.Client | None = None

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=read_api_key(self._config))
        return self._client

    async def complete(
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        client = self._get_client()
        contents = [
            genai_types.Content(role=_ROLE_MAP[m.role], parts=[genai_types.Part.from_text(text=m.content)])
            for m in messages
        ]
        config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=options.temperature,
            max_output_tokens=min(options.max_tokens, self._config.max_tokens),
            response_mime_type="application/json" if options.structured_output else None,
        )

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self._config.model,
                    contents=contents,
                    config=config,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.text:
            raise EmptyResponseError(self._config.name, "Empty response text")

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("%s completion: %.2fs, %s tokens", self._config.name, latency, token_count)
        return response.text
