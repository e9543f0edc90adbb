"""Tests for roundtable/personas.py."""

import pytest

from roundtable.personas import LEGAL_SAFETY_RULES, PERSONAS, ROUNDTABLE_PANEL, PersonaName, get_persona


def test_every_persona_is_registered():
    assert set(PERSONAS) == set(PersonaName)


def test_every_prompt_carries_safety_rules():
    for persona in PERSONAS.values():
        assert LEGAL_SAFETY_RULES in persona.system_prompt


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        PERSONAS[PersonaName.DIRECTOR] = PERSONAS[PersonaName.MUSIC_PRODUCER]  # type: ignore[index]


def test_panel_order_excludes_subject_director():
    assert [p.value for p in ROUNDTABLE_PANEL] == [
        "director",
        "photography_director",
        "platform_expert",
        "social_media_marketer",
        "music_producer",
    ]
    assert PersonaName.SUBJECT_DIRECTOR not in ROUNDTABLE_PANEL


def test_get_persona_accepts_enum_and_string():
    assert get_persona("director") is get_persona(PersonaName.DIRECTOR)
    assert get_persona("director").display_name == "Director"


def test_get_persona_unknown_raises_key_error():
    with pytest.raises(KeyError):
        get_persona("gaffer")


def test_color_tags_are_hex():
    for persona in PERSONAS.values():
        assert persona.color_tag.startswith("#")
        assert len(persona.color_tag) == 7
