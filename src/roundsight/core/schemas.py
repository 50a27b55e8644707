"""
RoundSight Data Contracts

Raw records crossing the replay-decoder boundary, and the serialized shape
of the engine's output. The decoder hands over loosely typed dictionaries;
roundsight.core.feed turns them into the dataclasses in core.models.

Producers: replay decoder (external), models.AdvancedStats.to_dict()
Consumers: core.feed, export.py, persistence layer (external)
"""

from __future__ import annotations

from typing import NotRequired, TypedDict

# ============================================================
# DECODER INPUT
# ============================================================


class RawPlayer(TypedDict):
    """One roster entry from the replay header."""

    username: str
    teamIndex: int
    profileId: NotRequired[str]
    operator: NotRequired[str]


class RawMatchUpdate(TypedDict):
    """One match-feedback record (kill, plant, defuse, pickup, ...)."""

    type: str  # "Kill", "DefuserPlantStart", ...
    username: NotRequired[str]  # killer for kills, actor otherwise
    target: NotRequired[str]  # victim for kills
    headshot: NotRequired[bool | None]
    time: NotRequired[str]  # round clock, "m:ss"
    timeInSeconds: NotRequired[float]
    message: NotRequired[str]


class RawPlayerRoundStats(TypedDict):
    """Base per-player stats for one round."""

    username: str
    kills: int
    died: bool
    assists: int
    headshots: int
    headshotPercentage: float


# ============================================================
# ENGINE OUTPUT
# ============================================================


class AdvancedStatsDict(TypedDict):
    """Serialized AdvancedStats, keyed the way the persistence layer stores them."""

    username: str
    entryKill: bool
    entryDeath: bool
    defuserPlants: int
    defuserDefuses: int
    defuserPickups: int
    plantDenials: int
    clutchAttempts: int
    clutchWins: int
    clutch1v1: bool
    clutch1v2: bool
    clutch1v3: bool
    clutch1v4: bool
    clutch1v5: bool
    doubleKills: int
    tripleKills: int
    quadKills: int
    ace: bool
    tradeKills: int
    tradeDeaths: int
    survivalTime: float
    survived: bool
    kost: bool


# ============================================================
# ERROR REPORTING
# ============================================================


class AnalysisWarning(TypedDict):
    """A non-fatal issue detected during analysis."""

    module: str  # which module generated this warning
    code: str  # machine-readable code, e.g. "UNKNOWN_PLAYER"
    message: str  # human-readable explanation
