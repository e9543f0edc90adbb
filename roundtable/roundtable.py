"""Roundtable orchestration: parallel first takes, a scripted exchange, synthesis."""

import asyncio
import logging
import random
import time
from collections.abc import Callable

from roundtable.context import augment_brief, build_input_message
from roundtable.invoker import AgentInvoker, BranchInstruction
from roundtable.models import (
    AdvancedRoundtableInput,
    AgentDiscussion,
    AgentResponse,
    RoundtableInput,
    RoundtableResult,
    Shot,
)
from roundtable.personas import ROUNDTABLE_PANEL, PersonaName, get_persona
from roundtable.synthesis import Synthesizer

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_PROBABILITY = 0.3

RoundCallback = Callable[[int, list[AgentResponse]], None]


def random_challenge(probability: float = DEFAULT_CHALLENGE_PROBABILITY) -> Callable[[], bool]:
    """Return a decision function that fires with the given probability."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"challenge probability must be within [0, 1], got {probability}")
    return lambda: random.random() < probability


async def _run_round1(invoker: AgentInvoker, user_message: str) -> list[AgentResponse]:
    logger.info("Starting round 1 with %d personas", len(ROUNDTABLE_PANEL))
    tasks = [invoker.call_agent(get_persona(name), user_message) for name in ROUNDTABLE_PANEL]
    # Any failure propagates; a partial first round is never synthesized.
    responses = await asyncio.gather(*tasks)
    logger.info("Round 1 complete: %d responses", len(responses))
    return list(responses)


async def _run_round2(
    invoker: AgentInvoker,
    brief: str,
    platform: str,
    round1: list[AgentResponse],
    should_challenge: Callable[[], bool],
) -> list[AgentResponse]:
    round2: list[AgentResponse] = []
    challenge = should_challenge()
    logger.debug("Challenge draw: %s", challenge)

    moves: list[tuple[PersonaName, BranchInstruction]] = []
    if challenge:
        moves.append((PersonaName.PLATFORM_EXPERT, BranchInstruction(challenge_agent=PersonaName.DIRECTOR)))
        moves.append((PersonaName.DIRECTOR, BranchInstruction(responding_to=PersonaName.PLATFORM_EXPERT)))
    moves.append((
        PersonaName.SOCIAL_MEDIA_MARKETER,
        BranchInstruction(building_on=(PersonaName.DIRECTOR, PersonaName.PLATFORM_EXPERT)),
    ))

    for name, branch in moves:
        response = await invoker.call_agent_with_context(
            get_persona(name), brief, platform, round1 + round2, branch,
        )
        round2.append(response)

    logger.info("Round 2 complete: %d responses (challenge=%s)", len(round2), challenge)
    return round2


async def _run_protocol(
    roundtable_input: RoundtableInput,
    brief: str,
    invoker: AgentInvoker,
    synthesizer: Synthesizer,
    should_challenge: Callable[[], bool] | None,
    on_round_complete: RoundCallback | None,
    user_prompt_edits: str | None = None,
    shot_list: tuple[Shot, ...] = (),
) -> RoundtableResult:
    start = time.monotonic()
    decide = should_challenge if should_challenge is not None else random_challenge()
    platform = roundtable_input.platform
    discussion = AgentDiscussion()

    discussion.round1 = await _run_round1(invoker, build_input_message(roundtable_input, brief=brief))
    if on_round_complete:
        on_round_complete(1, discussion.round1)

    discussion.round2 = await _run_round2(invoker, brief, platform, discussion.round1, decide)
    if on_round_complete:
        on_round_complete(2, discussion.round2)

    synthesis = await synthesizer.synthesize(
        brief,
        platform,
        discussion.round1,
        discussion.round2,
        sora_settings=roundtable_input.sora_settings,
        user_prompt_edits=user_prompt_edits,
        shot_list=shot_list,
    )
    if not synthesis.prompt:
        logger.warning("Synthesis produced an empty optimized prompt")

    return RoundtableResult(
        discussion=discussion,
        detailed_breakdown=synthesis.breakdown,
        optimized_prompt=synthesis.prompt,
        character_count=synthesis.character_count,
        hashtags=synthesis.hashtags,
        suggested_shots=synthesis.suggested_shots,
        brief=brief,
        platform=platform,
        synthesis_template=synthesizer.template.name,
        total_duration_sec=time.monotonic() - start,
    )


async def run_roundtable(
    roundtable_input: RoundtableInput,
    invoker: AgentInvoker,
    synthesizer: Synthesizer,
    should_challenge: Callable[[], bool] | None = None,
    on_round_complete: RoundCallback | None = None,
) -> RoundtableResult:
    """Run one full roundtable for a brief.

    Args:
        roundtable_input: Brief, platform and optional series context.
        invoker: Calls the routed agent model on behalf of each persona.
        synthesizer: Produces the final breakdown, prompt and shot list.
        should_challenge: Decides whether the platform expert challenges the
            director in round 2. Defaults to a 30% random draw.
        on_round_complete: Optional progress callback, called with the round
            number and its responses after rounds 1 and 2.

    Raises:
        ProviderError: If any round 1 or round 2 call fails.
    """
    return await _run_protocol(
        roundtable_input,
        roundtable_input.brief,
        invoker,
        synthesizer,
        should_challenge,
        on_round_complete,
    )


async def run_advanced_roundtable(
    roundtable_input: AdvancedRoundtableInput,
    invoker: AgentInvoker,
    synthesizer: Synthesizer,
    should_challenge: Callable[[], bool] | None = None,
    on_round_complete: RoundCallback | None = None,
) -> RoundtableResult:
    """Like run_roundtable(), with user guidance, prompt edits and a shot list.

    Guidance, edits and shot list are folded into the brief every persona sees;
    edits and shot list are also handed to synthesis directly.
    """
    brief = augment_brief(
        roundtable_input.brief,
        additional_guidance=roundtable_input.additional_guidance,
        shot_list=roundtable_input.shot_list,
        user_prompt_edits=roundtable_input.user_prompt_edits,
    )
    return await _run_protocol(
        roundtable_input,
        brief,
        invoker,
        synthesizer,
        should_challenge,
        on_round_complete,
        user_prompt_edits=roundtable_input.user_prompt_edits,
        shot_list=roundtable_input.shot_list,
    )
