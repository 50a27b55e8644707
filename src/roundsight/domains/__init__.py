"""
RoundSight Domains - Game-specific analysis modules.

This module contains:
- combat: Entry duels, trade kills, clutches, multi-kills, KOST
"""

from roundsight.domains.combat import (
    RoundAnalyzer,
    analyze,
    analyze_round,
)

__all__ = [
    "RoundAnalyzer",
    "analyze",
    "analyze_round",
]
