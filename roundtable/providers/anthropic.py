"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from roundtable.models import CompletionOptions, ConversationTurn
from roundtable.providers.base import AIProvider, EmptyResponseError, ProviderError, read_api_key

logger = logging.getLogger(__name__)

# Messages API has no JSON mode; structured requests get this appended to the system prompt.
_JSON_ONLY_SUFFIX = "\n\nRespond with a single valid JSON object and nothing else."


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config
        self._client: anthropic_sdk.AsyncAnthropic | None = None

    def name(self) -> str:
        return self._config.name

    def model_string(self) -> str:
        return self._config.model

    def _get_client(self) -> anthropic_sdk.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic_sdk.AsyncAnthropic(api_key=read_api_key(self._config))
        return self._client

    async def complete(
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        client = self._get_client()
        system = system_prompt + (_JSON_ONLY_SUFFIX if options.structured_output else "")

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self._config.model,
                    system=system,
                    max_tokens=min(options.max_tokens, self._config.max_tokens),
                    temperature=options.temperature,
                    messages=[{"role": m.role, "content": m.content} for m in messages],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in (response.content or []) if b.type == "text"]
        if not text_blocks or not any(text_blocks):
            raise EmptyResponseError(self._config.name, "No text blocks in response")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("%s completion: %.2fs, %s tokens", self._config.name, latency, token_count)
        return "\n".join(text_blocks)
