"""Model routing: resolve abstract roles ("agent", "synthesis") to providers."""

import logging

from config.config_loader import AppConfig, ModelConfig
from roundtable.providers.anthropic import AnthropicProvider
from roundtable.providers.base import AIProvider, ConfigurationError
from roundtable.providers.gemini import GeminiProvider
from roundtable.providers.openai_provider import OpenAIProvider
from roundtable.providers.xai import XAIProvider

logger = logging.getLogger(__name__)

AGENT_ROLE = "agent"
SYNTHESIS_ROLE = "synthesis"

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
    "xai": XAIProvider,
}


class ModelRouter:
    """Role -> model lookup with one cached provider instance per model."""

    def __init__(
        self,
        models: dict[str, ModelConfig],
        routing: dict[str, str],
        provider_classes: dict[str, type[AIProvider]] | None = None,
    ) -> None:
        self._models = models
        self._routing = dict(routing)
        self._provider_classes = provider_classes if provider_classes is not None else PROVIDER_CLASSES
        self._providers: dict[str, AIProvider] = {}

    @classmethod
    def from_config(cls, config: AppConfig) -> "ModelRouter":
        return cls(config.models, config.routing)

    def roles(self) -> list[str]:
        return list(self._routing)

    def model_for(self, role: str) -> ModelConfig:
        """Return the model configured for a role.

        Raises:
            ConfigurationError: If the role is unrouted or names an undefined model.
        """
        target = self._routing.get(role)
        if target is None:
            raise ConfigurationError("routing", f"No model routed for role '{role}'")
        model_cfg = self._models.get(target)
        if model_cfg is None:
            raise ConfigurationError("routing", f"Role '{role}' routed to unknown model '{target}'")
        return model_cfg

    def provider_for(self, role: str) -> AIProvider:
        model_cfg = self.model_for(role)
        provider = self._providers.get(model_cfg.name)
        if provider is None:
            provider_cls = self._provider_classes.get(model_cfg.sdk)
            if provider_cls is None:
                raise ConfigurationError(model_cfg.name, f"Unknown sdk '{model_cfg.sdk}'")
            provider = provider_cls(model_cfg)
            self._providers[model_cfg.name] = provider
            logger.debug("Role %s -> %s (%s)", role, model_cfg.name, model_cfg.model)
        return provider
