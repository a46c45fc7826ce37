"""
Runtime configuration.

Values come from the environment so the server and CLI can be tuned
without code changes.
"""

import os

# Environment name ("development", "production")
BLUFF_ENV = os.getenv("BLUFF_ENV", "development")

# Log level for the CLI and server
LOG_LEVEL = os.getenv("BLUFF_LOG_LEVEL", "INFO").upper()

# Seconds a scripted participant "thinks" before acting (cosmetic)
BOT_DELAY_SECONDS = float(os.getenv("BLUFF_BOT_DELAY", "1.5"))

# Optional fixed seed for shuffles and scripted decisions
_seed = os.getenv("BLUFF_SEED")
RANDOM_SEED = int(_seed) if _seed else None

# CORS origins for the HTTP adapter
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

# Safety limit for synchronous scripted runs
MAX_SCRIPTED_STEPS = int(os.getenv("BLUFF_MAX_SCRIPTED_STEPS", "2000"))

# How the HTTP adapter drives computer participants: "timer" schedules
# them on the event loop after BOT_DELAY_SECONDS, "inline" plays them
# before the response is returned
SCRIPTED_MODE = os.getenv("BLUFF_SCRIPTED_MODE", "timer")
