"""Context assembly: render the brief and series context into a persona user message.

Sections are emitted in a fixed order and only when they have data, so the same
input always produces the same message and absent context never leaves an
empty heading behind.
"""

import json
from collections.abc import Sequence
from dataclasses import asdict

from roundtable.models import (
    Character,
    CharacterRelationship,
    RoundtableInput,
    SeriesSoraSettings,
    Setting,
    Shot,
    VisualAsset,
    VisualTemplate,
)

VISUAL_TEMPLATE_HEADER = "SERIES VISUAL TEMPLATE:"
VISUAL_CONSISTENCY_HEADER = "SERIES VISUAL CONSISTENCY:"
CHARACTERS_HEADER = "CHARACTERS:"
VISUAL_DETAILS_HEADER = "VISUAL DETAILS:"
RELATIONSHIPS_HEADER = "CHARACTER RELATIONSHIPS:"
SETTINGS_HEADER = "SETTING / LOCATION:"
VISUAL_ASSETS_HEADER = "VISUAL ASSETS:"

SETTING_INSTRUCTION = "IMPORTANT: All scene content must take place in this location."

BIDIRECTIONAL_ARROW = "↔"
DIRECTIONAL_ARROW = "→"

# Partition order for visual assets; anything else lands in "Other".
_ASSET_PARTITIONS: tuple[tuple[str, str], ...] = (
    ("logo", "Logo"),
    ("color_palette", "Color palette"),
    ("setting_reference", "Setting reference"),
    ("style_reference", "Style reference"),
)
_OTHER_ASSETS_LABEL = "Other"


def _visual_template_block(template: VisualTemplate | None) -> str | None:
    if template is None:
        return None
    fields = {k: (list(v) if isinstance(v, tuple) else v) for k, v in asdict(template).items() if v}
    if not fields:
        return None
    return f"{VISUAL_TEMPLATE_HEADER}\n{json.dumps(fields, indent=2)}"


def _visual_consistency_block(settings: SeriesSoraSettings | None) -> str | None:
    if settings is None:
        return None
    lines = [
        f"- {label}: {value}"
        for label, value in (
            ("Narrative prefix", settings.narrative_prefix),
            ("Tone", settings.overall_tone),
            ("Camera style", settings.camera_style),
            ("Lighting mood", settings.lighting_mood),
            ("Color palette", settings.color_palette),
        )
        if value and value.strip()
    ]
    if not lines:
        return None
    return "\n".join([VISUAL_CONSISTENCY_HEADER, *lines])


def _visual_details(character: Character) -> list[str]:
    """Group a character's visual cues by cue type, in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for cue in character.visual_cues:
        text = cue.description or cue.url
        if not text:
            continue
        grouped.setdefault(cue.cue_type or "general", []).append(text)
    if not grouped:
        return []
    lines = [f"  {VISUAL_DETAILS_HEADER}"]
    for cue_type, texts in grouped.items():
        label = cue_type.replace("_", " ").capitalize()
        lines.append(f"    {label}: {'; '.join(texts)}")
    return lines


def _characters_block(characters: Sequence[Character]) -> str | None:
    if not characters:
        return None
    lines = [CHARACTERS_HEADER]
    for char in characters:
        lines.append(f"- {char.name}: {char.description}" if char.description else f"- {char.name}")
        if char.role:
            lines.append(f"  Role: {char.role}")
        if char.performance_style:
            lines.append(f"  Performance style: {char.performance_style}")
        if char.visual_reference_url:
            lines.append(f"  Visual reference: {char.visual_reference_url}")
        lines.extend(_visual_details(char))
    return "\n".join(lines)


def format_relationship(rel: CharacterRelationship) -> str:
    arrow = BIDIRECTIONAL_ARROW if rel.is_symmetric else DIRECTIONAL_ARROW
    line = f"{rel.character_a} {arrow} {rel.character_b}: {rel.relationship_type}"
    if rel.description:
        line += f" [{rel.description}]"
    return line


def _relationships_block(relationships: Sequence[CharacterRelationship]) -> str | None:
    if not relationships:
        return None
    return "\n".join([RELATIONSHIPS_HEADER, *(f"- {format_relationship(r)}" for r in relationships)])


def _settings_block(settings: Sequence[Setting]) -> str | None:
    if not settings:
        return None
    lines = [SETTINGS_HEADER]
    for setting in settings:
        lines.append(f"- {setting.name}: {setting.description}" if setting.description else f"- {setting.name}")
        if setting.visual_details:
            lines.append(f"  Visual details: {setting.visual_details}")
        if setting.mood:
            lines.append(f"  Mood: {setting.mood}")
    lines.append(SETTING_INSTRUCTION)
    return "\n".join(lines)


def _visual_assets_block(assets: Sequence[VisualAsset]) -> str | None:
    if not assets:
        return None
    known = {key for key, _ in _ASSET_PARTITIONS}
    partitions = [
        (label, [a for a in assets if a.asset_type == key]) for key, label in _ASSET_PARTITIONS
    ]
    partitions.append((_OTHER_ASSETS_LABEL, [a for a in assets if a.asset_type not in known]))

    lines = [VISUAL_ASSETS_HEADER]
    for label, members in partitions:
        if not members:
            continue
        lines.append(f"{label}:")
        lines.extend(f"- {a.name}: {a.description}" if a.description else f"- {a.name}" for a in members)
    return "\n".join(lines)


def build_user_message(
    brief: str,
    platform: str,
    visual_template: VisualTemplate | None = None,
    characters: Sequence[Character] = (),
    settings: Sequence[Setting] = (),
    visual_assets: Sequence[VisualAsset] = (),
    relationships: Sequence[CharacterRelationship] = (),
    sora_settings: SeriesSoraSettings | None = None,
    character_context: str | None = None,
) -> str:
    """Assemble the Round 1 user message shared by every persona.

    Args:
        brief: The creative brief (possibly already augmented).
        platform: Target platform value, e.g. "tiktok".
        visual_template: Optional series visual template.
        characters: Series characters appearing in the video.
        settings: Locations the scene must take place in.
        visual_assets: Series visual assets, partitioned by asset type.
        relationships: Relationships between the characters.
        sora_settings: Series-level visual consistency anchors.
        character_context: Pre-rendered locked character descriptions.

    Returns:
        The message text. Sections without data are omitted entirely.
    """
    blocks: list[str | None] = [
        f"Brief: {brief}\nPlatform: {platform}",
        _visual_template_block(visual_template),
        _visual_consistency_block(sora_settings),
        _characters_block(characters),
        character_context.strip() if character_context and character_context.strip() else None,
        _relationships_block(relationships),
        _settings_block(settings),
        _visual_assets_block(visual_assets),
    ]
    return "\n\n".join(b for b in blocks if b)


def build_input_message(roundtable_input: RoundtableInput, brief: str | None = None) -> str:
    """build_user_message() over a RoundtableInput, optionally with a replacement brief."""
    return build_user_message(
        brief=brief if brief is not None else roundtable_input.brief,
        platform=roundtable_input.platform,
        visual_template=roundtable_input.visual_template,
        characters=roundtable_input.characters,
        settings=roundtable_input.settings,
        visual_assets=roundtable_input.visual_assets,
        relationships=roundtable_input.relationships,
        sora_settings=roundtable_input.sora_settings,
        character_context=roundtable_input.character_context,
    )


def format_shot(shot: Shot) -> str:
    line = f"Shot {shot.order} ({shot.timing}): {shot.description}"
    if shot.camera:
        line += f" | Camera: {shot.camera}"
    if shot.lighting:
        line += f" | Lighting: {shot.lighting}"
    if shot.notes:
        line += f" | Notes: {shot.notes}"
    return line


def format_shot_list(shots: Sequence[Shot]) -> str:
    return "\n".join(format_shot(s) for s in shots)


def augment_brief(
    brief: str,
    additional_guidance: str | None = None,
    shot_list: Sequence[Shot] = (),
    user_prompt_edits: str | None = None,
) -> str:
    """Fold advanced-mode guidance, prompt edits and a requested shot list into the brief text."""
    enhanced = brief
    if additional_guidance:
        enhanced += f"\n\nADDITIONAL CREATIVE GUIDANCE:\n{additional_guidance}"
    if user_prompt_edits:
        enhanced += f"\n\nUSER PROMPT EDITS:\n{user_prompt_edits}"
    if shot_list:
        enhanced += f"\n\nREQUESTED SHOT LIST:\n{format_shot_list(shot_list)}"
    return enhanced
