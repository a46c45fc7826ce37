"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a match state and the id of the participant it plays
for, and returns a decision. The decision's action is submitted exactly
like a human's would be.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import random

from ..engine_core.action import Action
from ..engine_core.cards import RANKS
from ..engine_core.rules import rank_groups
from ..engine_core.state import MatchState
from .personality import CLASSIC, Personality


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for logs and debugging)
    - Confidence in the decision
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations must be pure functions of the state they are shown
    plus their own random source.
    """

    @abstractmethod
    def select_action(self, state: MatchState, player_id: str) -> BotDecision:
        """
        Select an action for a participant.

        Args:
            state: Current match state
            player_id: Participant the bot acts for

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


@dataclass
class ScriptedPolicy(BotPolicy):
    """
    The table bot: count-based heuristics and dice rolls.

    Only looks at its own hand and the standing claim. No memory of
    earlier rounds, no card counting.

    Usage:
        bot = ScriptedPolicy(personality=SUSPICIOUS, rng=random.Random(7))
        decision = bot.select_action(state, "computer-2")
    """
    personality: Personality = CLASSIC
    rng: random.Random = field(default_factory=random.Random)

    def select_action(self, state: MatchState, player_id: str) -> BotDecision:
        player = state.get_player(player_id)
        if player is None:
            raise ValueError(f"Unknown participant {player_id}")

        if state.claim is None:
            return self._open(state, player_id)

        if state.claim.owner_id == player_id:
            raise ValueError(f"{player_id} cannot respond to their own claim")
        return self._respond(state, player_id)

    def _open(self, state: MatchState, player_id: str) -> BotDecision:
        """Lay down cards with a claim."""
        hand = state.get_player(player_id).hand
        if not hand:
            raise ValueError(f"{player_id} has no cards to play")

        groups = rank_groups(hand)
        best_rank = max(groups, key=lambda r: len(groups[r]))
        best = groups[best_rank]

        if len(best) >= 2 and self.rng.random() < self.personality.honest_play_chance:
            cards = best[: min(self.personality.max_batch, len(best))]
            return BotDecision(
                action=Action.play_cards(player_id, cards, best_rank),
                explanation=f"Honest set of {len(cards)} {best_rank.value}",
            )

        batch = min(self.rng.randint(1, self.personality.max_batch), len(hand))
        cards = self.rng.sample(list(hand), batch)
        if self.rng.random() < self.personality.semi_honest_chance:
            rank = cards[0].rank
            explanation = f"Random batch of {batch}, claims its own {rank.value}"
        else:
            rank = self.rng.choice(RANKS)
            explanation = f"Random batch of {batch}, bluffs {rank.value}"

        honest = all(c.rank == rank for c in cards)
        return BotDecision(
            action=Action.play_cards(player_id, cards, rank),
            explanation=explanation,
            confidence=1.0 if honest else 0.5,
        )

    def _respond(self, state: MatchState, player_id: str) -> BotDecision:
        """Challenge or pass on the standing claim."""
        count = state.claim.count
        threshold = self.personality.challenge_chance(count)
        if self.rng.random() < threshold:
            return BotDecision(
                action=Action.challenge(player_id),
                explanation=f"Doubts {count} {state.claim.rank.value} (p={threshold:.2f})",
                confidence=threshold,
            )
        return BotDecision(
            action=Action.pass_turn(player_id),
            explanation=f"Lets {count} {state.claim.rank.value} stand",
            confidence=1.0 - threshold,
        )
