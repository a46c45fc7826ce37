"""
Bluff - Card game rule engine

A deterministic rule engine for the bluffing card game Bluff (also
called Cheat), with computer opponents. The engine provides:
- Deck construction, shuffling and dealing
- A pure transition function over immutable match snapshots
- Claim, pass and challenge resolution with win detection
- Scripted policies for computer participants
"""

__version__ = "0.1.0"
