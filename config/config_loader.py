"""Load settings.yaml into typed dataclasses. Reports which models have API keys."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from roundtable.models import Platform

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

ROUTING_ROLES = ("agent", "synthesis")


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class SamplingConfig:
    temperature: float
    max_tokens: int


@dataclass
class SynthesisConfig:
    template: str = "short_form"
    challenge_probability: float = 0.3


@dataclass
class DefaultsConfig:
    platform: str
    output_dir: Path


@dataclass
class InboxConfig:
    dir: Path
    archive_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    inbox: InboxConfig
    models: dict[str, ModelConfig]
    routing: dict[str, str]
    sampling: dict[str, SamplingConfig]
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    available_models: set[str] = field(default_factory=set)


def _load_sampling(raw: dict) -> dict[str, SamplingConfig]:
    return {
        stage: SamplingConfig(
            temperature=float(values["temperature"]),
            max_tokens=int(values["max_tokens"]),
        )
        for stage, values in raw.items()
    }


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if routing
    points at an undefined model, the default platform is unknown or the
    challenge probability is out of range.
    Missing API keys are logged, not raised: a model is only checked for its
    credential when it is first called.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        platform=str(defaults_raw.get("platform", "tiktok")),
        output_dir=Path(defaults_raw["output_dir"]),
    )
    platforms = [p.value for p in Platform]
    if defaults.platform not in platforms:
        raise ValueError(f"defaults.platform must be one of {platforms}, got '{defaults.platform}'")

    inbox_raw = raw.get("inbox", {})
    inbox = InboxConfig(
        dir=Path(inbox_raw.get("dir", "./inbox")),
        archive_dir=Path(inbox_raw.get("archive_dir", "./inbox/archive")),
    )

    models: dict[str, ModelConfig] = {}
    available_models: set[str] = set()

    for model_name, model_raw in raw["models"].items():
        models[model_name] = ModelConfig(
            name=model_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )

        if os.environ.get(model_raw["api_key_env"], "").strip():
            available_models.add(model_name)
            logger.info("Model available: %s", model_name)
        else:
            logger.info(
                "Model has no API key: %s (set %s in .env)",
                model_name,
                model_raw["api_key_env"],
            )

    routing = {str(role): str(target) for role, target in raw["routing"].items()}
    for role in ROUTING_ROLES:
        if role not in routing:
            raise ValueError(f"Routing for role '{role}' is not configured")
    for role, target in routing.items():
        if target not in models:
            raise ValueError(f"Routing for role '{role}' points at unknown model '{target}'")

    synthesis_raw = raw.get("synthesis", {})
    synthesis = SynthesisConfig(
        template=str(synthesis_raw.get("template", "short_form")),
        challenge_probability=float(synthesis_raw.get("challenge_probability", 0.3)),
    )
    if not 0.0 <= synthesis.challenge_probability <= 1.0:
        raise ValueError(f"challenge_probability must be within [0, 1], got {synthesis.challenge_probability}")

    return AppConfig(
        defaults=defaults,
        inbox=inbox,
        models=models,
        routing=routing,
        sampling=_load_sampling(raw["sampling"]),
        synthesis=synthesis,
        available_models=available_models,
    )
