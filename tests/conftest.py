"""Shared pytest fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import (
    AppConfig,
    DefaultsConfig,
    InboxConfig,
    ModelConfig,
    SamplingConfig,
    SynthesisConfig,
)
from roundtable.invoker import AgentInvoker
from roundtable.models import (
    AgentResponse,
    CompletionOptions,
    ConversationTurn,
    RoundtableInput,
    SeriesSoraSettings,
)
from roundtable.personas import PERSONAS
from roundtable.providers.base import AIProvider
from roundtable.synthesis import Synthesizer

Responder = Callable[[str, list[ConversationTurn], CompletionOptions], str]


def persona_of(system_prompt: str) -> str:
    """Persona value whose system prompt matches, or "unknown"."""
    for name, persona in PERSONAS.items():
        if persona.system_prompt == system_prompt:
            return name.value
    return "unknown"


def persona_echo(system_prompt: str, messages: list[ConversationTurn], options: CompletionOptions) -> str:
    return f"Take from {persona_of(system_prompt)}"


class MockProvider(AIProvider):
    """Test double AIProvider.

    `complete` is an AsyncMock so tests can inspect call_args_list; answers
    come from `responder` when given, else the fixed `response_content`.
    """

    def __init__(
        self,
        provider_name: str = "mock",
        response_content: str = "Mock response",
        responder: Responder | None = None,
    ) -> None:
        self._name = provider_name
        self._response_content = response_content
        self._responder = responder
        self.complete = AsyncMock(side_effect=self._answer)  # type: ignore[method-assign]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def _answer(
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        if self._responder is not None:
            return self._responder(system_prompt, messages, options)
        return self._response_content

    async def complete(  # type: ignore[override]
        self,
        system_prompt: str,
        messages: list[ConversationTurn],
        options: CompletionOptions,
    ) -> str:
        """Default implementation; replaced by AsyncMock in __init__."""
        return await self._answer(system_prompt, messages, options)


SYNTHESIS_JSON = json.dumps({
    "breakdown": {
        "scene_structure": "0-3s hook, 3-10s build, 10-15s payoff",
        "visual_specs": "9:16, warm key light",
        "audio": "upbeat lo-fi groove",
        "platform_optimization": "hook in first second",
        "hashtags": ["coffee", "morning"],
    },
    "optimized_prompt": "A barista slides a latte across a sunlit counter, slow dolly in.",
    "character_count": 64,
    "suggested_shots": [
        {"timing": "0-3s", "description": "Latte art close-up", "camera": "Macro", "order": 1},
        {"timing": "3-8s", "description": "Counter slide", "camera": "Dolly in", "order": 2},
    ],
})


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="openai",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_app_config(tmp_path: Path) -> AppConfig:
    models = {
        "gpt-4o": ModelConfig("gpt-4o", "openai", "gpt-4o", "OPENAI_API_KEY", 60, 4096),
        "claude": ModelConfig("claude", "anthropic", "claude-sonnet-4-20250514", "ANTHROPIC_API_KEY", 90, 4096),
    }
    return AppConfig(
        defaults=DefaultsConfig(platform="tiktok", output_dir=tmp_path / "output"),
        inbox=InboxConfig(dir=tmp_path / "inbox", archive_dir=tmp_path / "inbox" / "archive"),
        models=models,
        routing={"agent": "gpt-4o", "synthesis": "claude"},
        sampling={
            "round1": SamplingConfig(0.7, 200),
            "round2": SamplingConfig(0.6, 150),
            "synthesis": SamplingConfig(0.4, 1500),
        },
        synthesis=SynthesisConfig(template="cinematic", challenge_probability=0.5),
    )


@pytest.fixture
def sample_input() -> RoundtableInput:
    return RoundtableInput(brief="A barista's first day on the job", platform="tiktok")


@pytest.fixture
def sora_settings() -> SeriesSoraSettings:
    return SeriesSoraSettings(
        camera_style="handheld",
        lighting_mood="golden hour",
        color_palette="warm ambers",
        overall_tone="playful",
        narrative_prefix="In a quiet corner cafe,",
    )


@pytest.fixture
def sample_round1() -> list[AgentResponse]:
    return [
        AgentResponse(agent="director", response="Open on the espresso machine hissing."),
        AgentResponse(agent="platform_expert", response="Hook in the first second."),
    ]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def agent_provider() -> MockProvider:
    return MockProvider("agent", responder=persona_echo)


@pytest.fixture
def synthesis_provider() -> MockProvider:
    return MockProvider("synthesis", response_content=SYNTHESIS_JSON)


@pytest.fixture
def invoker(agent_provider: MockProvider) -> AgentInvoker:
    return AgentInvoker(agent_provider)


@pytest.fixture
def synthesizer(synthesis_provider: MockProvider) -> Synthesizer:
    return Synthesizer(synthesis_provider)
