"""
Jambo - Rules engine and tiered AI opponents for the card game Jambo.

A deterministic engine for two-player Jambo that provides:
- Immutable state and a validating reducer
- Legal action generation
- Pending interaction resolution for every card effect
- Bot policies from coin flips to Monte Carlo rollouts
"""

__version__ = "0.1.0"
