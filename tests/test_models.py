"""Tests for roundtable/models.py."""

import dataclasses

import pytest

from roundtable.models import (
    AdvancedRoundtableInput,
    AgentDiscussion,
    AgentResponse,
    CompletionOptions,
    Platform,
    RoundtableInput,
)


def test_platform_values():
    assert [p.value for p in Platform] == ["tiktok", "instagram", "youtube_shorts"]
    assert Platform("instagram") is Platform.INSTAGRAM


def test_agent_response_defaults():
    response = AgentResponse(agent="director", response="Wide shot.")
    assert response.responding_to is None
    assert response.is_challenge is False
    assert response.building_on == ()


def test_agent_response_is_frozen():
    response = AgentResponse(agent="director", response="Wide shot.")
    with pytest.raises(dataclasses.FrozenInstanceError):
        response.response = "Close-up."  # type: ignore[misc]


def test_discussion_rounds_are_independent():
    first, second = AgentDiscussion(), AgentDiscussion()
    first.round1.append(AgentResponse("director", "x"))
    assert second.round1 == []


def test_advanced_input_extends_plain_input():
    roundtable_input = AdvancedRoundtableInput(brief="b", platform="tiktok")
    assert isinstance(roundtable_input, RoundtableInput)
    assert roundtable_input.shot_list == ()
    assert roundtable_input.user_prompt_edits is None


def test_completion_options_plain_text_by_default():
    assert CompletionOptions(temperature=0.5, max_tokens=10).structured_output is False
