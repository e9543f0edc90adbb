"""Final synthesis: build the instruction prompt, call the synthesis model, parse the result.

Transcript generation is load-bearing and fails loudly; synthesis is a
best-effort projection of the transcript. Malformed model output therefore
degrades to an empty-but-valid SynthesisOutput instead of raising.
"""

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from roundtable.context import format_shot_list
from roundtable.models import (
    AgentResponse,
    CompletionOptions,
    ConversationTurn,
    SeriesSoraSettings,
    Shot,
    SynthesisOutput,
)
from roundtable.providers.base import AIProvider, EmptyResponseError
from roundtable.templates import SHORT_FORM, SynthesisTemplate

logger = logging.getLogger(__name__)

SYNTHESIS_OPTIONS = CompletionOptions(temperature=0.5, max_tokens=2000, structured_output=True)

SYNTHESIS_SYSTEM_PROMPT = (
    "You are an expert at distilling creative discussions into structured, COPYRIGHT-SAFE video prompts. "
    "You MUST remove all copyrighted content and replace it with generic descriptions."
)
_USER_INPUT_SYSTEM_SUFFIX = (
    " When users provide edits or shot lists, respect their creative vision while ensuring copyright safety."
)

COPYRIGHT_SAFETY_RULES = """CRITICAL COPYRIGHT SAFETY RULES:
- REMOVE all copyrighted brand names, product names, celebrity names, character names
- REMOVE all references to specific movies, TV shows, songs, artists, albums
- REMOVE all trademarked terms, logos, or IP references
- REPLACE with GENERIC descriptions: "luxury car" not a car make, "action hero" not a franchise character
- ENSURE the final prompt is 100% copyright-safe and will not trigger violations
- If the discussion contains copyrighted content, translate it to generic equivalents"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def _response_record(response: AgentResponse) -> dict[str, Any]:
    record: dict[str, Any] = {"agent": response.agent, "response": response.response}
    if response.is_challenge:
        record["is_challenge"] = True
    if response.responding_to:
        record["responding_to"] = response.responding_to
    if response.building_on:
        record["building_on"] = list(response.building_on)
    return record


def format_transcript(
    brief: str,
    platform: str,
    round1: Sequence[AgentResponse],
    round2: Sequence[AgentResponse],
) -> str:
    """Serialize the discussion as JSON data for the synthesis prompt."""
    return json.dumps(
        {
            "brief": brief,
            "platform": platform,
            "round1": [_response_record(r) for r in round1],
            "round2": [_response_record(r) for r in round2],
        },
        indent=2,
        ensure_ascii=False,
    )


def _visual_consistency_block(settings: SeriesSoraSettings | None) -> str:
    if settings is None:
        return ""
    anchors = [
        f"- {label}: {value}"
        for label, value in (
            ("Camera style", settings.camera_style),
            ("Lighting mood", settings.lighting_mood),
            ("Color palette", settings.color_palette),
            ("Overall tone", settings.overall_tone),
        )
        if value and value.strip()
    ]
    prefix = settings.narrative_prefix if settings.narrative_prefix and settings.narrative_prefix.strip() else None
    if not anchors and prefix is None:
        return ""

    lines = ["SERIES VISUAL CONSISTENCY:"]
    if anchors:
        lines += anchors
        lines.append(
            "Weave these series style anchors naturally into the prompt text. "
            "Do NOT list them as a separate section."
        )
    if prefix is not None:
        lines.append(f'The optimized prompt MUST open with this exact phrase: "{prefix}"')
    return "\n".join(lines)


def _output_example(template: SynthesisTemplate) -> str:
    breakdown: dict[str, Any] = {key: "..." for key in template.section_keys()}
    breakdown["hashtags"] = ["tag1", "tag2"]
    example = {
        "breakdown": breakdown,
        "optimized_prompt": "... (COPYRIGHT-SAFE prompt)",
        "character_count": 437,
        "suggested_shots": [
            {
                "timing": "0-3s",
                "description": "Wide establishing shot description",
                "camera": "Slow dolly in, eye level",
                "order": 1,
                "lighting": "Natural, warm tones",
                "notes": "Optional specific details",
            }
        ],
    }
    return json.dumps(example, indent=2)


def build_synthesis_prompt(
    template: SynthesisTemplate,
    brief: str,
    platform: str,
    round1: Sequence[AgentResponse],
    round2: Sequence[AgentResponse],
    sora_settings: SeriesSoraSettings | None = None,
    user_prompt_edits: str | None = None,
    shot_list: Sequence[Shot] = (),
) -> str:
    """Render the full synthesis instruction for one roundtable."""
    parts = [
        "You are synthesizing a creative film crew roundtable discussion into structured video prompt outputs.",
        COPYRIGHT_SAFETY_RULES,
    ]

    consistency = _visual_consistency_block(sora_settings)
    if consistency:
        parts.append(consistency)

    if user_prompt_edits:
        parts.append(
            f"USER'S DIRECT PROMPT EDITS:\n{user_prompt_edits}\n\n"
            "IMPORTANT: Respect the user's edits while ensuring copyright safety."
        )
    if shot_list:
        parts.append(
            f"USER'S REQUESTED SHOT LIST:\n{format_shot_list(shot_list)}\n\n"
            "IMPORTANT: Incorporate this shot structure into the final prompt."
        )

    parts.append(f"DISCUSSION SUMMARY:\n{format_transcript(brief, platform, round1, round2)}")

    section_lines = "\n".join(f"- {key}: {desc}" for key, desc in template.sections)
    breakdown_spec = (
        "1. DETAILED BREAKDOWN (structured sections):\n"
        f"{section_lines}\n"
        f"- hashtags: 5-10 {platform} hashtags, NO branded hashtags"
    )
    if shot_list:
        breakdown_spec += "\n- Timestamps MUST MATCH the user shot list"

    prompt_rules = [
        f"- {template.band_label()}",
        *(f"- {rule}" for rule in template.style_rules),
        "- MUST BE 100% COPYRIGHT-SAFE (no brands, IPs, celebrities, songs)",
    ]
    if user_prompt_edits:
        prompt_rules.append("- INCORPORATE user prompt edits while maintaining quality")
    if shot_list:
        prompt_rules.append("- REFLECT shot list structure in prompt")
    prompt_spec = f"2. {template.prompt_title}:\n" + "\n".join(prompt_rules)

    shot_source = (
        "- REFINE and improve the user-provided shot list"
        if shot_list
        else "- Generate a new shot list based on the discussion"
    )
    shots_spec = (
        f"3. SUGGESTED SHOT LIST ({template.min_shots}-{template.max_shots} shots):\n"
        f"{shot_source}\n"
        "- Break the video into specific shots with timing\n"
        "- Include description, camera movement, and lighting for each shot\n"
        "- Order shots sequentially from 1 to N"
    )

    parts.append(f"Generate THREE outputs:\n\n{breakdown_spec}\n\n{prompt_spec}\n\n{shots_spec}")
    parts.append(f"Return JSON:\n{_output_example(template)}")
    return "\n\n".join(parts)


def _normalize_hashtags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [tag for tag in value if isinstance(tag, str)]


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def normalize_shots(raw_shots: Any) -> list[Shot]:
    """Coerce model output to Shot records numbered 1..N by position."""
    if not isinstance(raw_shots, list):
        return []
    shots: list[Shot] = []
    for index, item in enumerate(raw_shots):
        data = item if isinstance(item, dict) else {}
        timing = data.get("timing")
        shots.append(
            Shot(
                timing=timing if isinstance(timing, str) and timing else f"{index * 4}-{(index + 1) * 4}s",
                description=data.get("description") if isinstance(data.get("description"), str) else "",
                camera=data.get("camera") if isinstance(data.get("camera"), str) else "",
                order=index + 1,
                lighting=_optional_str(data.get("lighting")),
                notes=_optional_str(data.get("notes")),
            )
        )
    return shots


def parse_synthesis(raw: str) -> SynthesisOutput:
    """Parse the synthesis model's JSON answer. Never raises.

    Returns an empty breakdown and empty prompt when the payload is not a JSON
    object at all; otherwise every field is coerced to its expected shape.
    """
    text = raw.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        result = json.loads(text)
    except (ValueError, RecursionError, TypeError):
        logger.warning("Synthesis output is not valid JSON; returning empty result")
        return SynthesisOutput(breakdown={}, prompt="", character_count=0)

    if not isinstance(result, dict):
        logger.warning("Synthesis output is not a JSON object; returning empty result")
        return SynthesisOutput(breakdown={}, prompt="", character_count=0)

    breakdown = result.get("breakdown")
    breakdown = dict(breakdown) if isinstance(breakdown, dict) else {}

    hashtags = _normalize_hashtags(breakdown.get("hashtags") or result.get("hashtags"))
    if breakdown:
        breakdown["hashtags"] = hashtags

    prompt = result.get("optimized_prompt")
    prompt = prompt if isinstance(prompt, str) else ""

    count = result.get("character_count")
    if not (isinstance(count, int) and not isinstance(count, bool) and count > 0):
        count = len(prompt)

    return SynthesisOutput(
        breakdown=breakdown,
        prompt=prompt,
        character_count=count,
        hashtags=hashtags,
        suggested_shots=normalize_shots(result.get("suggested_shots")),
    )


class Synthesizer:
    """Turns a finished discussion into the final structured artifact."""

    def __init__(
        self,
        provider: AIProvider,
        template: SynthesisTemplate = SHORT_FORM,
        options: CompletionOptions = SYNTHESIS_OPTIONS,
    ) -> None:
        self._provider = provider
        self._template = template
        self._options = options

    @property
    def template(self) -> SynthesisTemplate:
        return self._template

    async def synthesize(
        self,
        brief: str,
        platform: str,
        round1: Sequence[AgentResponse],
        round2: Sequence[AgentResponse],
        sora_settings: SeriesSoraSettings | None = None,
        user_prompt_edits: str | None = None,
        shot_list: Sequence[Shot] = (),
    ) -> SynthesisOutput:
        """Issue the single synthesis call and parse it.

        Raises:
            ProviderError: On transport failure. An empty answer is not raised;
                it degrades to an empty result like any other malformed output.
        """
        prompt = build_synthesis_prompt(
            self._template,
            brief,
            platform,
            round1,
            round2,
            sora_settings=sora_settings,
            user_prompt_edits=user_prompt_edits,
            shot_list=shot_list,
        )
        system_prompt = SYNTHESIS_SYSTEM_PROMPT
        if user_prompt_edits or shot_list:
            system_prompt += _USER_INPUT_SYSTEM_SUFFIX

        logger.info("Running synthesis via %s (%s template)", self._provider.name(), self._template.name)
        try:
            raw = await self._provider.complete(system_prompt, [ConversationTurn("user", prompt)], self._options)
        except EmptyResponseError as exc:
            logger.warning("Synthesis returned no content: %s", exc)
            return SynthesisOutput(breakdown={}, prompt="", character_count=0)

        return parse_synthesis(raw)
