"""
RoundSight Analysis - Aggregation across analyzed rounds.
"""

from roundsight.analysis.aggregate import (
    clutch_summary,
    defuser_summary,
    player_summary,
    round_stats_frame,
)

__all__ = [
    "clutch_summary",
    "defuser_summary",
    "player_summary",
    "round_stats_frame",
]
