"""
Bots module - Scripted participant policies.

Provides:
- BotPolicy: Interface for bot decision-making
- ScriptedPolicy: The count-based table bot
- Personality: Tunable play styles
"""

from .policy import BotPolicy, BotDecision, ScriptedPolicy
from .personality import Personality, PERSONALITIES, CLASSIC

__all__ = [
    "BotPolicy",
    "BotDecision",
    "ScriptedPolicy",
    "Personality",
    "PERSONALITIES",
    "CLASSIC",
]
