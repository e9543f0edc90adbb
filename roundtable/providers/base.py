"""Abstract base for all language-model providers."""

import os
from abc import ABC, abstractmethod

from config.config_loader import ModelConfig
from roundtable.models import CompletionOptions, ConversationTurn


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class EmptyResponseError(ProviderError):
    """The provider answered, but with no text."""


class ConfigurationError(ProviderError):
    """Missing credential or invalid model/routing configuration."""


def read_api_key(config: ModelConfig) -> str:
    """Read the model's API key from the environment.

    Called at the first completion, not at construction, so building a provider
    never requires the credential to be present.

    Raises:
        ConfigurationError: If the environment variable is unset or blank.
    """
    api_key = os.environ.get(config.api_key_env, "").strip()
    if not api_key:
        raise ConfigurationError(config.name, f"Missing API key: {config.api_key_env}")
    return api_key


class AIProvider(ABC):
    """Abstract base for all language-model providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short model config name (e.g. 'gpt-4o', 'claude')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        """Run one completion.

        Args:
            system_prompt: The system instruction.
            messages: Conversation turns, oldest first.
            options: Sampling temperature, output token bound, structured flag.

        Returns:
            The response text (a JSON document when options.structured_output).

        Raises:
            ConfigurationError: On missing credentials.
            EmptyResponseError: When the provider returns no text.
            ProviderError: On API failure or timeout.
        """
        ...
