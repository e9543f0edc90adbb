"""Pure dataclasses for the agent roundtable pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Platform(str, Enum):
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    YOUTUBE_SHORTS = "youtube_shorts"


@dataclass(frozen=True)
class ConversationTurn:
    role: str      # "user" or "assistant"
    content: str


@dataclass(frozen=True)
class CompletionOptions:
    temperature: float
    max_tokens: int
    structured_output: bool = False


@dataclass(frozen=True)
class VisualTemplate:
    lighting: str | None = None
    camera_angles: tuple[str, ...] = ()
    color_grading: str | None = None
    pacing: str | None = None
    aspect_ratio: str | None = None


@dataclass(frozen=True)
class SeriesSoraSettings:
    camera_style: str | None = None
    lighting_mood: str | None = None
    color_palette: str | None = None
    overall_tone: str | None = None
    narrative_prefix: str | None = None


@dataclass(frozen=True)
class VisualCue:
    cue_type: str          # "hair", "wardrobe", "face", ...
    description: str
    url: str | None = None


@dataclass(frozen=True)
class Character:
    name: str
    description: str = ""
    role: str | None = None
    performance_style: str | None = None
    visual_reference_url: str | None = None
    visual_cues: tuple[VisualCue, ...] = ()


@dataclass(frozen=True)
class Setting:
    name: str
    description: str = ""
    visual_details: str | None = None
    mood: str | None = None


@dataclass(frozen=True)
class VisualAsset:
    asset_type: str        # "logo", "color_palette", "setting_reference", "style_reference", other
    name: str
    description: str = ""


@dataclass(frozen=True)
class CharacterRelationship:
    character_a: str
    character_b: str
    relationship_type: str
    description: str | None = None
    is_symmetric: bool = True


@dataclass(frozen=True)
class Shot:
    timing: str
    description: str
    camera: str
    order: int
    lighting: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class RoundtableInput:
    brief: str
    platform: str
    user_id: str = ""
    visual_template: VisualTemplate | None = None
    characters: tuple[Character, ...] = ()
    settings: tuple[Setting, ...] = ()
    visual_assets: tuple[VisualAsset, ...] = ()
    relationships: tuple[CharacterRelationship, ...] = ()
    sora_settings: SeriesSoraSettings | None = None
    character_context: str | None = None   # pre-rendered, locked character text


@dataclass(frozen=True)
class AdvancedRoundtableInput(RoundtableInput):
    user_prompt_edits: str | None = None
    shot_list: tuple[Shot, ...] = ()
    additional_guidance: str | None = None


@dataclass(frozen=True)
class AgentResponse:
    agent: str             # PersonaName value
    response: str
    responding_to: str | None = None
    is_challenge: bool = False
    building_on: tuple[str, ...] = ()
    latency_sec: float = 0.0


@dataclass
class AgentDiscussion:
    round1: list[AgentResponse] = field(default_factory=list)
    round2: list[AgentResponse] = field(default_factory=list)


# Section keys depend on the active synthesis template.
DetailedBreakdown = dict[str, Any]


@dataclass
class SynthesisOutput:
    breakdown: DetailedBreakdown
    prompt: str
    character_count: int
    hashtags: list[str] = field(default_factory=list)
    suggested_shots: list[Shot] = field(default_factory=list)


@dataclass(frozen=True)
class RoundtableResult:
    discussion: AgentDiscussion
    detailed_breakdown: DetailedBreakdown
    optimized_prompt: str
    character_count: int
    hashtags: list[str]
    suggested_shots: list[Shot]
    brief: str = ""
    platform: str = ""
    synthesis_template: str = ""
    total_duration_sec: float = 0.0
