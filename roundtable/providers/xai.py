"""xAI Grok provider over the OpenAI-compatible API."""

from config.config_loader import ModelConfig
from roundtable.providers.base import ConfigurationError
from roundtable.providers.openai_provider import OpenAIProvider


class XAIProvider(OpenAIProvider):
    """xAI Grok provider; same wire protocol as OpenAI, different endpoint."""

    def __init__(self, config: ModelConfig) -> None:
        if not config.base_url:
            raise ConfigurationError(config.name, "base_url is required for xAI provider")
        super().__init__(config)
