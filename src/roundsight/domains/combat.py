"""
Combat Analysis Module for Round Analysis

Single-pass analytics over one round's ordered event feed:
- Alive-state tracking and clutch detection (1vX situations)
- Trade kill detection (3-second window)
- Multi-kill streaks (2k, 3k, 4k, ace)
- Entry duels, objective counters, survival and KOST

All mutable state lives in a RoundContext created per analysis, so separate
rounds can be analyzed concurrently without sharing anything.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from roundsight.core.config import AnalysisConfig
from roundsight.core.constants import ACE_KILL_COUNT, TEAM_INDICES
from roundsight.core.models import (
    AdvancedStats,
    BaseRoundStats,
    DefuseAction,
    Kill,
    Participant,
    PickupAction,
    PlantAction,
    RoundAnalysis,
    RoundEvent,
)
from roundsight.core.schemas import AnalysisWarning
from roundsight.core.utils import timed

logger = logging.getLogger(__name__)


# =============================================================================
# Per-round State
# =============================================================================


class AliveTracker:
    """Living players per team, seeded from the roster."""

    def __init__(self, roster: Iterable[Participant]):
        self._alive: dict[int, set[str]] = {team: set() for team in TEAM_INDICES}
        for participant in roster:
            self._alive.setdefault(participant.team_index, set()).add(participant.username)

    def remove(self, username: str) -> None:
        """Mark a player dead. Unknown usernames are ignored."""
        for members in self._alive.values():
            members.discard(username)

    def alive_count(self, team_index: int) -> int:
        return len(self._alive.get(team_index, ()))

    def alive(self, team_index: int) -> frozenset[str]:
        return frozenset(self._alive.get(team_index, ()))


@dataclass(frozen=True)
class DeathRecord:
    """A death kept in the trade window."""

    victim: str
    killer: str
    time_seconds: float


class TradeWindow:
    """
    Recent deaths, oldest first, used to recognise trade kills.

    When K kills V, every death in the window whose killer was V is
    avenged by K. Deaths more than ``window_seconds`` older than the
    current kill are evicted; a gap of exactly ``window_seconds`` is
    still inside the window.
    """

    def __init__(self, window_seconds: float):
        self.window_seconds = window_seconds
        self._deaths: list[DeathRecord] = []

    def __len__(self) -> int:
        return len(self._deaths)

    def record_kill(self, killer: str, victim: str, time_seconds: float) -> list[DeathRecord]:
        """Record a kill and return the earlier deaths it avenges, newest first."""
        avenged = []
        for i in range(len(self._deaths) - 1, -1, -1):
            death = self._deaths[i]
            if time_seconds - death.time_seconds > self.window_seconds:
                # Everything at or before i is older still
                del self._deaths[: i + 1]
                break
            if death.killer == victim and killer != victim:
                avenged.append(death)

        self._deaths.append(DeathRecord(victim=victim, killer=killer, time_seconds=time_seconds))
        return avenged


@dataclass
class RoundContext:
    """Mutable state for exactly one analysis call."""

    alive: AliveTracker
    trades: TradeWindow
    kill_times: dict[str, list[float]] = field(default_factory=lambda: defaultdict(list))
    first_kill: Kill | None = None
    warnings: list[AnalysisWarning] = field(default_factory=list)


# =============================================================================
# Multi-kill Streaks
# =============================================================================


def split_streaks(kill_times: Sequence[float], window_seconds: float) -> list[int]:
    """
    Group ordered kill times into streaks and return the streak lengths.

    Consecutive kills at most ``window_seconds`` apart belong to the same
    streak.

        >>> split_streaks([0, 3, 25], 10.0)
        [2, 1]
    """
    if not kill_times:
        return []

    streaks = []
    streak = 1
    for previous, current in zip(kill_times, kill_times[1:]):
        if current - previous <= window_seconds:
            streak += 1
        else:
            streaks.append(streak)
            streak = 1
    streaks.append(streak)
    return streaks


def record_multi_kill(stats: AdvancedStats, streak: int) -> None:
    """
    Add one streak to the multi-kill tallies.

    Tallies are cumulative: a 4-kill streak counts as a double, a triple
    and a quad; five or more also sets ace.
    """
    if streak >= ACE_KILL_COUNT:
        stats.ace = True
    if streak >= 4:
        stats.quad_kills += 1
    if streak >= 3:
        stats.triple_kills += 1
    if streak >= 2:
        stats.double_kills += 1


# =============================================================================
# Analyzer
# =============================================================================


class RoundAnalyzer:
    """Derives AdvancedStats for every player of one round."""

    def __init__(
        self,
        roster: Sequence[Participant],
        base_stats: Sequence[BaseRoundStats] = (),
        events: Sequence[RoundEvent] = (),
        config: AnalysisConfig | None = None,
        round_number: int = 0,
    ):
        """
        Initialize the round analyzer.

        Args:
            roster: Players of the round with their team index (0 or 1).
            base_stats: Per-player base stats from the replay decoder.
            events: Round events in the order the decoder emitted them.
                They must already be chronological; they are never re-sorted.
            config: Timing windows. Defaults to AnalysisConfig().
            round_number: Carried through to the result.
        """
        self.roster = list(roster)
        self.base_stats = list(base_stats)
        self.events = list(events)
        self.config = config or AnalysisConfig()
        self.round_number = round_number

        self._teams: dict[str, int] = {}
        for participant in self.roster:
            self._teams.setdefault(participant.username, participant.team_index)

    @timed
    def analyze(self) -> RoundAnalysis:
        """
        Run the full analysis.

        Returns:
            RoundAnalysis with one AdvancedStats per roster player.
        """
        stats = {username: AdvancedStats(username=username) for username in self._teams}
        ctx = RoundContext(
            alive=AliveTracker(self.roster),
            trades=TradeWindow(self.config.trade_window_seconds),
        )

        logger.debug(
            f"Analyzing round {self.round_number}: {len(self.roster)} players, "
            f"{len(self.events)} events"
        )

        for event in self.events:
            if isinstance(event, Kill):
                self._on_kill(event, stats, ctx)
            elif isinstance(event, PlantAction):
                self._bump(stats, ctx, event.username, "defuser_plants")
            elif isinstance(event, DefuseAction):
                self._bump(stats, ctx, event.username, "defuser_defuses")
            elif isinstance(event, PickupAction):
                self._bump(stats, ctx, event.username, "defuser_pickups")

        self._classify_multi_kills(stats, ctx)
        self._apply_entry_duel(stats, ctx)
        self._finalize(stats)

        logger.info(
            f"Round {self.round_number} analysis complete. "
            f"{sum(s.trade_kills for s in stats.values())} trades, "
            f"{sum(s.clutch_attempts for s in stats.values())} clutch attempts, "
            f"{len(ctx.warnings)} warnings"
        )

        return RoundAnalysis(
            roster=self.roster,
            player_stats=stats,
            round_number=self.round_number,
            base_stats=self.base_stats,
            warnings=ctx.warnings,
        )

    def _warn(self, ctx: RoundContext, code: str, message: str) -> None:
        logger.debug(f"Round {self.round_number}: {message}")
        ctx.warnings.append(AnalysisWarning(module="combat", code=code, message=message))

    def _bump(
        self, stats: dict[str, AdvancedStats], ctx: RoundContext, username: str, counter: str
    ) -> None:
        """Increment an objective counter, skipping players not on the roster."""
        player = stats.get(username)
        if player is None:
            self._warn(ctx, "UNKNOWN_PLAYER", f"{counter} event for unknown player {username!r}")
            return
        setattr(player, counter, getattr(player, counter) + 1)

    def _on_kill(self, kill: Kill, stats: dict[str, AdvancedStats], ctx: RoundContext) -> None:
        if ctx.first_kill is None:
            ctx.first_kill = kill

        if kill.killer not in stats or kill.victim not in stats:
            self._warn(
                ctx,
                "UNKNOWN_PLAYER",
                f"kill {kill.killer!r} -> {kill.victim!r} references a player not on the roster",
            )

        ctx.alive.remove(kill.victim)
        ctx.kill_times[kill.killer].append(kill.time_seconds)

        self._detect_trades(kill, stats, ctx)
        self._detect_clutch(kill, stats, ctx)

    def _detect_trades(
        self, kill: Kill, stats: dict[str, AdvancedStats], ctx: RoundContext
    ) -> None:
        """Credit the killer for every recent death the victim caused."""
        for death in ctx.trades.record_kill(kill.killer, kill.victim, kill.time_seconds):
            logger.debug(
                f"Trade: {kill.killer} avenged {death.victim} by killing {kill.victim} "
                f"({kill.time_seconds - death.time_seconds:.2f}s)"
            )
            if kill.killer in stats:
                stats[kill.killer].trade_kills += 1
            if kill.victim in stats:
                stats[kill.victim].trade_deaths += 1

    def _detect_clutch(
        self, kill: Kill, stats: dict[str, AdvancedStats], ctx: RoundContext
    ) -> None:
        """
        Detect a 1vX situation for the killer after the victim is removed.

        A clutch win is counted as soon as the killer is left facing a
        single enemy, not when the last enemy falls.
        """
        killer_team = self._teams.get(kill.killer)
        killer = stats.get(kill.killer)
        if killer_team is None or killer is None:
            return

        alive_on_team = ctx.alive.alive_count(killer_team)
        alive_enemies = ctx.alive.alive_count(1 - killer_team)
        if alive_on_team != 1 or alive_enemies == 0:
            return

        killer.clutch_attempts += 1
        killer.set_clutch_flag(alive_enemies)
        if alive_enemies == 1:
            killer.clutch_wins += 1

        logger.debug(f"Clutch: {kill.killer} 1v{alive_enemies} at {kill.time_seconds}s")

    def _classify_multi_kills(self, stats: dict[str, AdvancedStats], ctx: RoundContext) -> None:
        window = self.config.multi_kill_window_seconds
        for username, kill_times in ctx.kill_times.items():
            player = stats.get(username)
            if player is None or len(kill_times) < 2:
                continue

            for streak in split_streaks(kill_times, window):
                record_multi_kill(player, streak)

            # Five kills spread over long gaps still make an ace
            if len(kill_times) >= ACE_KILL_COUNT:
                player.ace = True

    def _apply_entry_duel(self, stats: dict[str, AdvancedStats], ctx: RoundContext) -> None:
        first = ctx.first_kill
        if first is None:
            return
        if first.killer in stats:
            stats[first.killer].entry_kill = True
        if first.victim in stats:
            stats[first.victim].entry_death = True

    def _finalize(self, stats: dict[str, AdvancedStats]) -> None:
        """Apply survival and KOST from base stats; players without base stats keep defaults."""
        finalized: set[str] = set()
        for base in self.base_stats:
            player = stats.get(base.username)
            if player is None or base.username in finalized:
                continue
            finalized.add(base.username)

            player.survived = not base.died
            # "Traded" means this player's own death was avenged
            player.kost = (
                base.kills > 0
                or player.defuser_plants > 0
                or player.defuser_defuses > 0
                or player.survived
                or player.trade_deaths > 0
            )


def analyze_round(
    roster: Sequence[Participant],
    base_stats: Sequence[BaseRoundStats],
    events: Sequence[RoundEvent],
    config: AnalysisConfig | None = None,
    round_number: int = 0,
) -> RoundAnalysis:
    """
    Analyze one round and keep the roster, base stats and warnings.

    Args:
        roster: Players of the round.
        base_stats: Per-player base stats from the replay decoder.
        events: Chronologically ordered round events.
        config: Timing windows (optional).
        round_number: Carried through to the result.

    Returns:
        RoundAnalysis for the round.
    """
    analyzer = RoundAnalyzer(roster, base_stats, events, config=config, round_number=round_number)
    return analyzer.analyze()


def analyze(
    roster: Sequence[Participant],
    base_stats: Sequence[BaseRoundStats],
    events: Sequence[RoundEvent],
    config: AnalysisConfig | None = None,
) -> dict[str, AdvancedStats]:
    """
    Derive advanced stats for one round.

    Pure function: identical inputs always give identical results, and no
    state survives between calls.

    Args:
        roster: Players of the round.
        base_stats: Per-player base stats from the replay decoder.
        events: Chronologically ordered round events.
        config: Timing windows (optional).

    Returns:
        Mapping of username to AdvancedStats, one entry per roster player.
    """
    return analyze_round(roster, base_stats, events, config=config).player_stats
