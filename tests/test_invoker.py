"""Tests for roundtable/invoker.py."""

import pytest

from roundtable.invoker import ROUND1_OPTIONS, ROUND2_OPTIONS, AgentInvoker, BranchInstruction, format_contributions
from roundtable.models import AgentResponse, CompletionOptions
from roundtable.personas import PersonaName, get_persona
from roundtable.providers.base import ProviderError
from tests.conftest import MockProvider


def test_branch_sentences():
    assert BranchInstruction(challenge_agent=PersonaName.DIRECTOR).sentence() == (
        "You disagree with DIRECTOR's approach. Respectfully challenge their perspective with your framework."
    )
    assert BranchInstruction(responding_to=PersonaName.PLATFORM_EXPERT).sentence() == (
        "Respond to PLATFORM_EXPERT's challenge. Defend your perspective or find synthesis."
    )
    assert BranchInstruction(building_on=(PersonaName.DIRECTOR, PersonaName.PLATFORM_EXPERT)).sentence() == (
        "Build upon the ideas from DIRECTOR and PLATFORM_EXPERT."
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"challenge_agent": PersonaName.DIRECTOR, "responding_to": PersonaName.PLATFORM_EXPERT},
    ],
)
def test_branch_requires_exactly_one_move(kwargs):
    with pytest.raises(ValueError):
        BranchInstruction(**kwargs)


def test_format_contributions_labels_in_order():
    text = format_contributions([
        AgentResponse("director", "Wide shot."),
        AgentResponse("music_producer", "Lo-fi beat."),
    ])
    assert text == "DIRECTOR: Wide shot.\n\nMUSIC_PRODUCER: Lo-fi beat."


async def test_call_agent_sends_single_user_turn():
    provider = MockProvider(response_content="Handheld, close.")
    persona = get_persona("photography_director")

    response = await AgentInvoker(provider).call_agent(persona, "Brief: x\nPlatform: tiktok")

    system_prompt, messages, options = provider.complete.call_args.args
    assert system_prompt == persona.system_prompt
    assert [(m.role, m.content) for m in messages] == [("user", "Brief: x\nPlatform: tiktok")]
    assert options == ROUND1_OPTIONS
    assert response.agent == "photography_director"
    assert response.response == "Handheld, close."
    assert response.is_challenge is False
    assert response.latency_sec >= 0


async def test_call_agent_with_context_replays_own_response():
    provider = MockProvider(response_content="I still prefer the slow open.")
    prior = [
        AgentResponse("director", "Slow open."),
        AgentResponse("platform_expert", "Faster hook."),
        AgentResponse("platform_expert", "Challenge: too slow.", is_challenge=True),
    ]

    response = await AgentInvoker(provider).call_agent_with_context(
        get_persona(PersonaName.DIRECTOR), "Coffee", "tiktok", prior,
        BranchInstruction(responding_to=PersonaName.PLATFORM_EXPERT),
    )

    _, messages, options = provider.complete.call_args.args
    assert [m.role for m in messages] == ["user", "assistant", "user"]
    assert messages[0].content == "Brief: Coffee\nPlatform: tiktok"
    assert messages[1].content == "Slow open."
    assert messages[2].content.startswith("Other agents have shared their perspectives:\n\nDIRECTOR: Slow open.")
    assert messages[2].content.endswith("Defend your perspective or find synthesis.")
    assert options == ROUND2_OPTIONS
    assert response.responding_to == "platform_expert"
    assert response.is_challenge is False


async def test_call_agent_with_context_without_own_response_folds_instruction():
    provider = MockProvider()
    prior = [AgentResponse("director", "Slow open.")]

    await AgentInvoker(provider).call_agent_with_context(
        get_persona(PersonaName.MUSIC_PRODUCER), "Coffee", "tiktok", prior,
        BranchInstruction(challenge_agent=PersonaName.DIRECTOR),
    )

    _, messages, _ = provider.complete.call_args.args
    assert len(messages) == 1
    assert messages[0].content.startswith("Brief: Coffee\nPlatform: tiktok\n\nOther agents")


async def test_call_agent_with_context_sets_challenge_and_build_flags():
    provider = MockProvider()
    invoker = AgentInvoker(provider)
    prior = [AgentResponse("director", "a"), AgentResponse("platform_expert", "b")]

    challenge = await invoker.call_agent_with_context(
        get_persona("platform_expert"), "b", "tiktok", prior, BranchInstruction(challenge_agent=PersonaName.DIRECTOR),
    )
    build = await invoker.call_agent_with_context(
        get_persona("social_media_marketer"), "b", "tiktok", prior,
        BranchInstruction(building_on=(PersonaName.DIRECTOR, PersonaName.PLATFORM_EXPERT)),
    )

    assert challenge.is_challenge is True
    assert challenge.responding_to is None
    assert build.building_on == ("director", "platform_expert")


async def test_custom_options_are_used():
    provider = MockProvider()
    options = CompletionOptions(temperature=0.2, max_tokens=50)
    await AgentInvoker(provider, round1_options=options).call_agent(get_persona("director"), "m")
    assert provider.complete.call_args.args[2] == options


async def test_provider_error_propagates():
    provider = MockProvider()
    provider.complete.side_effect = ProviderError("mock", "Rate limited")
    with pytest.raises(ProviderError, match="Rate limited"):
        await AgentInvoker(provider).call_agent(get_persona("director"), "m")
