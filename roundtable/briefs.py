"""Brief files: markdown with optional YAML frontmatter, plus inbox scanning and archiving."""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter

from roundtable.models import (
    AdvancedRoundtableInput,
    Character,
    CharacterRelationship,
    Platform,
    RoundtableInput,
    SeriesSoraSettings,
    Setting,
    Shot,
    VisualAsset,
    VisualCue,
    VisualTemplate,
)

_ADVANCED_KEYS = ("user_prompt_edits", "shot_list", "additional_guidance")


def ensure_dirs(inbox_dir: Path, archive_dir: Path) -> None:
    """Create inbox and archive directories if they don't exist."""
    inbox_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)


def scan_inbox(inbox_dir: Path) -> list[Path]:
    """Return all .md briefs in inbox_dir, oldest first."""
    return sorted(inbox_dir.glob("*.md"), key=lambda p: p.stat().st_mtime)


def parse_file(file_path: Path) -> tuple[str, dict]:
    """Split a brief file into (body, frontmatter). No frontmatter gives {}."""
    post = frontmatter.load(str(file_path))
    return post.content.strip(), dict(post.metadata)


def archive_file(file_path: Path, archive_dir: Path, *, failed: bool = False) -> Path:
    """Move a processed brief into archive_dir with a timestamp prefix.

    Failed briefs additionally get a "FAILED_" prefix.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H%M")
    prefix = "FAILED_" if failed else ""
    dest = archive_dir / f"{prefix}{timestamp}_{file_path.name}"
    shutil.move(str(file_path), str(dest))
    return dest


def _opt(data: dict, key: str) -> str | None:
    value = data.get(key)
    return str(value) if value not in (None, "") else None


def parse_shot_spec(spec: str, order: int) -> Shot:
    """Parse a "timing|description|camera" shorthand into a Shot.

    Raises:
        ValueError: If the timing or description part is missing.
    """
    parts = [p.strip() for p in spec.split("|")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Shot must look like 'timing|description|camera', got: {spec!r}")
    return Shot(
        timing=parts[0],
        description=parts[1],
        camera=parts[2] if len(parts) > 2 else "",
        order=order,
        lighting=parts[3] if len(parts) > 3 and parts[3] else None,
    )


def _shot(raw: Any, index: int) -> Shot:
    if isinstance(raw, str):
        return parse_shot_spec(raw, index + 1)
    return Shot(
        timing=str(raw.get("timing", "")),
        description=str(raw.get("description", "")),
        camera=str(raw.get("camera", "")),
        order=int(raw.get("order", index + 1)),
        lighting=_opt(raw, "lighting"),
        notes=_opt(raw, "notes"),
    )


def _character(raw: dict) -> Character:
    cues = tuple(
        VisualCue(
            cue_type=str(cue.get("cue_type", cue.get("type", ""))),
            description=str(cue.get("description", "")),
            url=_opt(cue, "url"),
        )
        for cue in raw.get("visual_cues") or []
    )
    return Character(
        name=str(raw["name"]),
        description=str(raw.get("description", "")),
        role=_opt(raw, "role"),
        performance_style=_opt(raw, "performance_style"),
        visual_reference_url=_opt(raw, "visual_reference_url"),
        visual_cues=cues,
    )


def _relationship(raw: dict) -> CharacterRelationship:
    return CharacterRelationship(
        character_a=str(raw["character_a"]),
        character_b=str(raw["character_b"]),
        relationship_type=str(raw["relationship_type"]),
        description=_opt(raw, "description"),
        is_symmetric=bool(raw.get("is_symmetric", True)),
    )


def input_from_mapping(data: dict, brief: str | None = None) -> RoundtableInput:
    """Build a roundtable input from plain data (frontmatter or a series YAML file).

    Returns an AdvancedRoundtableInput when edits, guidance or a shot list
    are present; a plain RoundtableInput otherwise.

    Raises:
        ValueError: If no brief text is available or the platform is unknown.
        KeyError: If a nested record lacks a required field.
    """
    text = brief if brief is not None else str(data.get("brief", "")).strip()
    if not text:
        raise ValueError("Brief text is empty")

    template_raw = data.get("visual_template")
    visual_template = None
    if template_raw:
        visual_template = VisualTemplate(
            lighting=_opt(template_raw, "lighting"),
            camera_angles=tuple(str(a) for a in template_raw.get("camera_angles") or []),
            color_grading=_opt(template_raw, "color_grading"),
            pacing=_opt(template_raw, "pacing"),
            aspect_ratio=_opt(template_raw, "aspect_ratio"),
        )

    sora_raw = data.get("sora_settings")
    sora_settings = None
    if sora_raw:
        sora_settings = SeriesSoraSettings(
            camera_style=_opt(sora_raw, "camera_style"),
            lighting_mood=_opt(sora_raw, "lighting_mood"),
            color_palette=_opt(sora_raw, "color_palette"),
            overall_tone=_opt(sora_raw, "overall_tone"),
            narrative_prefix=_opt(sora_raw, "narrative_prefix"),
        )

    common: dict[str, Any] = {
        "brief": text,
        "platform": Platform(str(data.get("platform", "tiktok"))).value,
        "user_id": str(data.get("user_id", "")),
        "visual_template": visual_template,
        "characters": tuple(_character(c) for c in data.get("characters") or []),
        "settings": tuple(
            Setting(
                name=str(s["name"]),
                description=str(s.get("description", "")),
                visual_details=_opt(s, "visual_details"),
                mood=_opt(s, "mood"),
            )
            for s in data.get("settings") or []
        ),
        "visual_assets": tuple(
            VisualAsset(
                asset_type=str(a.get("asset_type", a.get("type", "other"))),
                name=str(a["name"]),
                description=str(a.get("description", "")),
            )
            for a in data.get("visual_assets") or []
        ),
        "relationships": tuple(_relationship(r) for r in data.get("relationships") or []),
        "sora_settings": sora_settings,
        "character_context": _opt(data, "character_context"),
    }

    if not any(data.get(key) for key in _ADVANCED_KEYS):
        return RoundtableInput(**common)

    return AdvancedRoundtableInput(
        **common,
        user_prompt_edits=_opt(data, "user_prompt_edits"),
        shot_list=tuple(_shot(s, i) for i, s in enumerate(data.get("shot_list") or [])),
        additional_guidance=_opt(data, "additional_guidance"),
    )
