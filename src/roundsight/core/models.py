"""
Data Models for Round Analysis

Dataclasses shared by the feed adapter, the analytics engine and the
aggregation layer:
- Participant and the round events (kills, plant/defuse/pickup actions)
- Base per-player round stats supplied by the replay decoder
- AdvancedStats produced by the engine, and the merged PlayerRoundStats
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from roundsight.core.constants import CLUTCH_SCENARIOS, ActionPhase
from roundsight.core.schemas import AnalysisWarning

# =============================================================================
# Roster and Events
# =============================================================================


@dataclass(frozen=True)
class Participant:
    """A player in one round, identified by username."""

    username: str
    team_index: int


@dataclass(frozen=True)
class Kill:
    """A kill event. ``killer`` eliminated ``victim`` at ``time_seconds``."""

    killer: str
    victim: str
    time_seconds: float
    headshot: bool = False


@dataclass(frozen=True)
class PlantAction:
    """Defuser plant started or completed."""

    username: str
    phase: ActionPhase
    time_seconds: float = 0.0


@dataclass(frozen=True)
class DefuseAction:
    """Defuser disable started or completed."""

    username: str
    phase: ActionPhase
    time_seconds: float = 0.0


@dataclass(frozen=True)
class PickupAction:
    """Defuser picked up."""

    username: str
    time_seconds: float = 0.0


RoundEvent = Kill | PlantAction | DefuseAction | PickupAction


# =============================================================================
# Per-player Statistics
# =============================================================================


@dataclass
class BaseRoundStats:
    """Per-player round stats as reported by the replay decoder."""

    username: str
    kills: int = 0
    died: bool = False
    assists: int = 0
    headshots: int = 0
    headshot_percentage: float = 0.0


# snake_case attribute -> camelCase key used by the persistence layer
_ADVANCED_KEYS = {
    "username": "username",
    "entry_kill": "entryKill",
    "entry_death": "entryDeath",
    "defuser_plants": "defuserPlants",
    "defuser_defuses": "defuserDefuses",
    "defuser_pickups": "defuserPickups",
    "plant_denials": "plantDenials",
    "clutch_attempts": "clutchAttempts",
    "clutch_wins": "clutchWins",
    "clutch_1v1": "clutch1v1",
    "clutch_1v2": "clutch1v2",
    "clutch_1v3": "clutch1v3",
    "clutch_1v4": "clutch1v4",
    "clutch_1v5": "clutch1v5",
    "double_kills": "doubleKills",
    "triple_kills": "tripleKills",
    "quad_kills": "quadKills",
    "ace": "ace",
    "trade_kills": "tradeKills",
    "trade_deaths": "tradeDeaths",
    "survival_time": "survivalTime",
    "survived": "survived",
    "kost": "kost",
}


@dataclass
class AdvancedStats:
    """Derived statistics for a single player in a single round."""

    username: str

    # Entry duel
    entry_kill: bool = False
    entry_death: bool = False

    # Objective
    defuser_plants: int = 0
    defuser_defuses: int = 0
    defuser_pickups: int = 0
    plant_denials: int = 0  # No event produces this yet

    # Clutch
    clutch_attempts: int = 0
    clutch_wins: int = 0
    clutch_1v1: bool = False
    clutch_1v2: bool = False
    clutch_1v3: bool = False
    clutch_1v4: bool = False
    clutch_1v5: bool = False

    # Multi-kill (cumulative: a triple also counts as a double)
    double_kills: int = 0
    triple_kills: int = 0
    quad_kills: int = 0
    ace: bool = False

    # Trading
    trade_kills: int = 0
    trade_deaths: int = 0  # Times this player's death was avenged

    # Survival
    survival_time: float = 0.0  # Not derived from the event feed
    survived: bool = False

    kost: bool = False

    def set_clutch_flag(self, enemies: int) -> None:
        """Mark the 1vN scenario. Enemy counts above five are not tracked."""
        if f"1v{enemies}" in CLUTCH_SCENARIOS:
            setattr(self, f"clutch_1v{enemies}", True)

    def clutch_flags(self) -> dict[str, bool]:
        return {scenario: getattr(self, f"clutch_{scenario}") for scenario in CLUTCH_SCENARIOS}

    def to_dict(self) -> dict[str, object]:
        """Serialize with the camelCase keys used by the persistence layer."""
        return {key: getattr(self, attr) for attr, key in _ADVANCED_KEYS.items()}


@dataclass
class PlayerRoundStats:
    """Base stats merged with advanced stats: one persisted row per player per round."""

    round_number: int
    team_index: int
    base: BaseRoundStats
    advanced: AdvancedStats

    @property
    def username(self) -> str:
        return self.base.username

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "roundNumber": self.round_number,
            "username": self.base.username,
            "teamIndex": self.team_index,
            "kills": self.base.kills,
            "died": self.base.died,
            "assists": self.base.assists,
            "headshots": self.base.headshots,
            "headshotPercentage": self.base.headshot_percentage,
        }
        advanced = self.advanced.to_dict()
        advanced.pop("username")
        data.update(advanced)
        return data


@dataclass
class RoundAnalysis:
    """Result of analyzing one round."""

    roster: list[Participant]
    player_stats: dict[str, AdvancedStats]
    round_number: int = 0
    base_stats: list[BaseRoundStats] = field(default_factory=list)
    warnings: list[AnalysisWarning] = field(default_factory=list)

    def ordered_stats(self) -> Iterator[AdvancedStats]:
        """Yield stats in roster order rather than mapping order."""
        seen: set[str] = set()
        for participant in self.roster:
            if participant.username in seen:
                continue
            seen.add(participant.username)
            stats = self.player_stats.get(participant.username)
            if stats is not None:
                yield stats

    def team_of(self, username: str) -> int | None:
        for participant in self.roster:
            if participant.username == username:
                return participant.team_index
        return None

    def merged_stats(self) -> list[PlayerRoundStats]:
        """
        Merge base and advanced stats for every player that has base stats.

        Players without base stats are skipped, matching what the
        persistence layer stores.
        """
        base_by_name: dict[str, BaseRoundStats] = {}
        for base in self.base_stats:
            base_by_name.setdefault(base.username, base)

        merged = []
        for stats in self.ordered_stats():
            base = base_by_name.get(stats.username)
            if base is None:
                continue
            merged.append(
                PlayerRoundStats(
                    round_number=self.round_number,
                    team_index=self.team_of(stats.username) or 0,
                    base=base,
                    advanced=stats,
                )
            )
        return merged

    def to_dict(self) -> dict[str, object]:
        return {
            "roundNumber": self.round_number,
            "players": [s.to_dict() for s in self.ordered_stats()],
        }
