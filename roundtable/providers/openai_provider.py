"""OpenAI provider using openai SDK with native async."""

import asyncio
import logging
import time

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from roundtable.models import CompletionOptions, ConversationTurn
from roundtable.providers.base import AIProvider, EmptyResponseError, ProviderError, read_api_key

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """OpenAI chat completions provider via openai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client: AsyncOpenAI | None = None

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=read_api_key(self._config), base_url=self._config.base_url)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        client = self._get_client()
        payload = [{"role": "system", "content": system_prompt}]
        payload += [{"role": m.role, "content": m.content} for m in messages]
        extra: dict = {}
        if options.structured_output:
            extra["response_format"] = {"type": "json_object"}

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self._config.model,
                    messages=payload,
                    temperature=options.temperature,
                    max_tokens=min(options.max_tokens, self._config.max_tokens),
                    **extra,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise EmptyResponseError(self._config.name, "Empty response content")

        logger.info(
            "%s completion: %.2fs, %s tokens",
            self._config.name,
            latency,
            response.usage.total_tokens if response.usage else None,
        )
        return choice.message.content
