"""
Bot Personalities - Tunable numbers behind the scripted heuristic.

Personalities adjust:
- How often an opening play is honest
- How often a random play claims one of its own cards
- How suspicious the bot is of large claims
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Personality:
    """
    A bot personality that defines play style.

    challenge_chance(count) = min(challenge_base + count * challenge_per_card,
    challenge_cap).
    """
    name: str
    description: str = ""

    # Opening plays
    honest_play_chance: float = 0.7  # Play a real set when holding a pair or better
    max_batch: int = 3  # Most cards put down at once
    semi_honest_chance: float = 0.4  # Random batch claims one of its own ranks

    # Responding to claims
    challenge_base: float = 0.3
    challenge_per_card: float = 0.1
    challenge_cap: float = 0.7

    def challenge_chance(self, claimed_count: int) -> float:
        return min(self.challenge_base + claimed_count * self.challenge_per_card, self.challenge_cap)


# ============================================================================
# Predefined Personalities
# ============================================================================

CLASSIC = Personality(
    name="Classic",
    description="The standard table bot: mostly honest sets, doubts big claims",
)


TRUSTING = Personality(
    name="Trusting",
    description="Rarely calls bluff, lets rounds run",
    challenge_base=0.1,
    challenge_per_card=0.05,
    challenge_cap=0.3,
)


SUSPICIOUS = Personality(
    name="Suspicious",
    description="Calls bluff often and bluffs more itself",
    honest_play_chance=0.5,
    semi_honest_chance=0.2,
    challenge_base=0.5,
    challenge_per_card=0.1,
    challenge_cap=0.9,
)


# All predefined personalities
PERSONALITIES: dict[str, Personality] = {
    "classic": CLASSIC,
    "trusting": TRUSTING,
    "suspicious": SUSPICIOUS,
}
