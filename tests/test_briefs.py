"""Unit tests for roundtable/briefs.py: no API calls."""

import os
import textwrap
import time
from pathlib import Path

import pytest

from roundtable.briefs import (
    archive_file,
    ensure_dirs,
    input_from_mapping,
    parse_file,
    parse_shot_spec,
    scan_inbox,
)
from roundtable.models import AdvancedRoundtableInput, RoundtableInput, Shot


def test_parse_file_no_frontmatter(tmp_path: Path) -> None:
    f = tmp_path / "brief.md"
    f.write_text("A barista's first day", encoding="utf-8")
    content, metadata = parse_file(f)
    assert content == "A barista's first day"
    assert metadata == {}


def test_frontmatter_brief_with_series_context(tmp_path: Path) -> None:
    f = tmp_path / "brief.md"
    f.write_text(
        textwrap.dedent("""\
            ---
            platform: instagram
            characters:
              - name: Mia
                description: a barista
                visual_cues:
                  - type: hair
                    description: short red bob
            relationships:
              - character_a: Mia
                character_b: Leo
                relationship_type: mentor
                is_symmetric: false
            sora_settings:
              narrative_prefix: In a quiet corner cafe,
            ---
            Mia pulls her first espresso shot.
        """),
        encoding="utf-8",
    )

    body, meta = parse_file(f)
    roundtable_input = input_from_mapping(meta, brief=body)

    assert type(roundtable_input) is RoundtableInput
    assert roundtable_input.brief == "Mia pulls her first espresso shot."
    assert roundtable_input.platform == "instagram"
    assert roundtable_input.characters[0].visual_cues[0].cue_type == "hair"
    assert roundtable_input.relationships[0].is_symmetric is False
    assert roundtable_input.sora_settings.narrative_prefix == "In a quiet corner cafe,"


def test_unknown_platform_rejected() -> None:
    with pytest.raises(ValueError, match="myspace"):
        input_from_mapping({"brief": "x", "platform": "myspace"})


def test_platform_accepts_every_known_value() -> None:
    for platform in ("tiktok", "instagram", "youtube_shorts"):
        assert input_from_mapping({"brief": "x", "platform": platform}).platform == platform


def test_advanced_keys_produce_advanced_input() -> None:
    roundtable_input = input_from_mapping({
        "brief": "Morning routine",
        "additional_guidance": "Cozy",
        "shot_list": ["0-3s|Alarm|Close-up", {"timing": "3-6s", "description": "Stretch"}],
    })
    assert isinstance(roundtable_input, AdvancedRoundtableInput)
    assert roundtable_input.additional_guidance == "Cozy"
    assert roundtable_input.user_prompt_edits is None
    assert roundtable_input.shot_list == (
        Shot("0-3s", "Alarm", "Close-up", 1),
        Shot("3-6s", "Stretch", "", 2),
    )


def test_input_defaults_platform() -> None:
    assert input_from_mapping({"brief": "x"}).platform == "tiktok"


def test_input_requires_brief() -> None:
    with pytest.raises(ValueError):
        input_from_mapping({"platform": "tiktok"})


def test_parse_shot_spec() -> None:
    assert parse_shot_spec("0-3s | Alarm rings | Close-up", 4) == Shot("0-3s", "Alarm rings", "Close-up", 4)
    assert parse_shot_spec("0-3s|Alarm", 1).camera == ""


def test_parse_shot_spec_rejects_missing_description() -> None:
    with pytest.raises(ValueError):
        parse_shot_spec("0-3s", 1)


def test_scan_inbox_oldest_first(tmp_path: Path) -> None:
    newer = tmp_path / "b.md"
    older = tmp_path / "a.md"
    newer.write_text("b", encoding="utf-8")
    older.write_text("a", encoding="utf-8")
    now = time.time()
    os.utime(older, (now - 100, now - 100))
    os.utime(newer, (now, now))
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    assert scan_inbox(tmp_path) == [older, newer]


def test_archive_file_success(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    archive = tmp_path / "archive"
    ensure_dirs(inbox, archive)

    src = inbox / "latte.md"
    src.write_text("A brief", encoding="utf-8")
    dest = archive_file(src, archive)

    assert not src.exists()
    assert dest.exists()
    assert dest.name.endswith("_latte.md")
    assert not dest.name.startswith("FAILED_")


def test_archive_file_failed_prefix(tmp_path: Path) -> None:
    inbox = tmp_path / "inbox"
    archive = tmp_path / "archive"
    ensure_dirs(inbox, archive)

    src = inbox / "latte.md"
    src.write_text("A brief", encoding="utf-8")
    dest = archive_file(src, archive, failed=True)

    assert dest.name.startswith("FAILED_")
