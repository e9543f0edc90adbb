"""Agent invocation: one persona, one model call, one AgentResponse."""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from roundtable.models import AgentResponse, CompletionOptions, ConversationTurn
from roundtable.personas import Persona, PersonaName
from roundtable.providers.base import AIProvider

logger = logging.getLogger(__name__)

ROUND1_OPTIONS = CompletionOptions(temperature=0.8, max_tokens=300)
ROUND2_OPTIONS = CompletionOptions(temperature=0.8, max_tokens=250)


def _label(agent: PersonaName | str) -> str:
    return PersonaName(agent).value.upper()


@dataclass(frozen=True)
class BranchInstruction:
    """Which Round 2 move a persona is making. Exactly one field is set."""

    challenge_agent: PersonaName | None = None
    responding_to: PersonaName | None = None
    building_on: tuple[PersonaName, ...] = ()

    def __post_init__(self) -> None:
        chosen = sum([self.challenge_agent is not None, self.responding_to is not None, bool(self.building_on)])
        if chosen != 1:
            raise ValueError("BranchInstruction needs exactly one of challenge_agent, responding_to, building_on")

    def sentence(self) -> str:
        if self.challenge_agent is not None:
            return (
                f"You disagree with {_label(self.challenge_agent)}'s approach. "
                "Respectfully challenge their perspective with your framework."
            )
        if self.responding_to is not None:
            return (
                f"Respond to {_label(self.responding_to)}'s challenge. "
                "Defend your perspective or find synthesis."
            )
        return f"Build upon the ideas from {' and '.join(_label(a) for a in self.building_on)}."


def format_contributions(responses: Sequence[AgentResponse]) -> str:
    """Label every prior contribution with its persona, in transcript order."""
    return "\n\n".join(f"{_label(r.agent)}: {r.response}" for r in responses)


class AgentInvoker:
    """Calls the routed agent model on behalf of personas.

    No retries: any provider error propagates to the caller.
    """

    def __init__(
        self,
        provider: AIProvider,
        round1_options: CompletionOptions = ROUND1_OPTIONS,
        round2_options: CompletionOptions = ROUND2_OPTIONS,
    ) -> None:
        self._provider = provider
        self._round1_options = round1_options
        self._round2_options = round2_options

    async def call_agent(self, persona: Persona, user_message: str) -> AgentResponse:
        """Round 1: persona answers the assembled brief on its own."""
        start = time.monotonic()
        text = await self._provider.complete(
            persona.system_prompt,
            [ConversationTurn("user", user_message)],
            self._round1_options,
        )
        latency = time.monotonic() - start
        logger.debug("%s answered round 1 in %.2fs", persona.display_name, latency)
        return AgentResponse(agent=persona.name.value, response=text, latency_sec=latency)

    async def call_agent_with_context(
        self,
        persona: Persona,
        brief: str,
        platform: str,
        prior_responses: Sequence[AgentResponse],
        branch: BranchInstruction,
    ) -> AgentResponse:
        """Round 2: persona reacts to everything said so far.

        The persona's own earliest contribution is replayed as its assistant
        turn, then every prior contribution is listed with the branch instruction.
        """
        messages = [ConversationTurn("user", f"Brief: {brief}\nPlatform: {platform}")]
        own = next((r for r in prior_responses if r.agent == persona.name.value), None)
        if own is not None:
            messages.append(ConversationTurn("assistant", own.response))

        instruction = (
            "Other agents have shared their perspectives:\n\n"
            f"{format_contributions(prior_responses)}\n\n"
            f"{branch.sentence()}"
        )
        if own is None:
            # Fold into the opening user turn so roles keep alternating.
            messages[0] = ConversationTurn("user", f"{messages[0].content}\n\n{instruction}")
        else:
            messages.append(ConversationTurn("user", instruction))

        start = time.monotonic()
        text = await self._provider.complete(persona.system_prompt, messages, self._round2_options)
        latency = time.monotonic() - start

        return AgentResponse(
            agent=persona.name.value,
            response=text,
            responding_to=branch.responding_to.value if branch.responding_to else None,
            is_challenge=branch.challenge_agent is not None,
            building_on=tuple(a.value for a in branch.building_on),
            latency_sec=latency,
        )
