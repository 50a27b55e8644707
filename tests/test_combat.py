"""Tests for the round combat analysis module."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from roundsight.core.config import AnalysisConfig
from roundsight.core.constants import ActionPhase
from roundsight.core.models import (
    AdvancedStats,
    BaseRoundStats,
    DefuseAction,
    Kill,
    Participant,
    PickupAction,
    PlantAction,
)
from roundsight.domains.combat import (
    AliveTracker,
    RoundAnalyzer,
    TradeWindow,
    analyze,
    analyze_round,
    record_multi_kill,
    split_streaks,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _roster(team0: list[str], team1: list[str]) -> list[Participant]:
    return [Participant(name, 0) for name in team0] + [Participant(name, 1) for name in team1]


def _base(*names: str, died: bool = True, kills: int = 0) -> list[BaseRoundStats]:
    return [BaseRoundStats(username=name, kills=kills, died=died) for name in names]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


class TestAliveTracker:
    """Tests for the per-team alive sets."""

    def test_seeded_from_roster(self):
        tracker = AliveTracker(_roster(["A", "B"], ["X", "Y", "Z"]))

        assert tracker.alive_count(0) == 2
        assert tracker.alive_count(1) == 3
        assert tracker.alive(1) == frozenset({"X", "Y", "Z"})

    def test_remove_and_unknown(self):
        tracker = AliveTracker(_roster(["A", "B"], ["X"]))
        tracker.remove("A")
        tracker.remove("nobody")

        assert tracker.alive(0) == frozenset({"B"})
        assert tracker.alive_count(1) == 1

    def test_unknown_team_is_empty(self):
        tracker = AliveTracker([])

        assert tracker.alive_count(0) == 0
        assert tracker.alive_count(7) == 0


class TestTradeWindow:
    """Tests for the sliding trade window."""

    def test_avenges_within_window(self):
        window = TradeWindow(3.0)
        assert window.record_kill("X", "B", 10.0) == []

        avenged = window.record_kill("A", "X", 12.5)

        assert len(avenged) == 1
        assert avenged[0].victim == "B"
        assert avenged[0].killer == "X"

    def test_exact_boundary_is_inside(self):
        window = TradeWindow(3.0)
        window.record_kill("X", "B", 10.0)

        assert len(window.record_kill("A", "X", 13.0)) == 1

    def test_old_deaths_are_evicted(self):
        window = TradeWindow(3.0)
        window.record_kill("X", "B", 10.0)
        window.record_kill("Y", "C", 11.0)

        assert window.record_kill("A", "X", 13.5) == []
        # B's death (3.5s old) is dropped, C's (2.5s old) and the new one stay
        assert len(window) == 2

    def test_multiple_deaths_avenged_newest_first(self):
        window = TradeWindow(3.0)
        window.record_kill("X", "A", 1.0)
        window.record_kill("X", "B", 2.0)

        avenged = window.record_kill("C", "X", 3.0)

        assert [d.victim for d in avenged] == ["B", "A"]


class TestStreaks:
    """Tests for multi-kill streak grouping and tallies."""

    def test_single_streak(self):
        assert split_streaks([0, 3, 6, 9, 12], 10.0) == [5]

    def test_streak_break(self):
        assert split_streaks([0, 3, 25], 10.0) == [2, 1]

    def test_gap_equal_to_window_continues_streak(self):
        assert split_streaks([0, 10, 20], 10.0) == [3]

    def test_empty(self):
        assert split_streaks([], 10.0) == []

    @pytest.mark.parametrize(
        "streak,expected",
        [
            (1, (0, 0, 0, False)),
            (2, (1, 0, 0, False)),
            (3, (1, 1, 0, False)),
            (4, (1, 1, 1, False)),
            (5, (1, 1, 1, True)),
            (7, (1, 1, 1, True)),
        ],
    )
    def test_cumulative_tally(self, streak, expected):
        stats = AdvancedStats(username="P")
        record_multi_kill(stats, streak)

        assert (stats.double_kills, stats.triple_kills, stats.quad_kills, stats.ace) == expected


# ---------------------------------------------------------------------------
# Full analysis
# ---------------------------------------------------------------------------


class TestClutchDetection:
    """Tests for 1vX clutch detection."""

    def test_lone_survivor_kill_is_clutch_win(self):
        """A's kill that leaves A alone against one enemy counts as a 1v1 win."""
        roster = _roster(["A", "B"], ["X", "Y", "Z"])
        events = [
            Kill("A", "X", 1.0),
            Kill("Z", "B", 3.0),
            Kill("A", "Y", 4.0),
            Kill("A", "Z", 5.0),
        ]

        stats = analyze(roster, [], events)

        assert stats["A"].clutch_attempts == 1
        assert stats["A"].clutch_wins == 1
        assert stats["A"].clutch_1v1 is True
        assert stats["Z"].clutch_attempts == 0

    def test_not_a_clutch_while_team_has_two_alive(self):
        roster = _roster(["A", "B"], ["X", "Y", "Z"])
        events = [Kill("A", "X", 1.0), Kill("Z", "B", 3.0)]

        stats = analyze(roster, [], events)

        assert stats["Z"].clutch_attempts == 0
        assert not any(stats["Z"].clutch_flags().values())

    def test_each_lone_kill_is_an_attempt(self):
        """Every kill while alone counts; only the one reaching 1v1 is a win."""
        roster = _roster(["A", "B"], ["X", "Y", "Z", "W"])
        events = [
            Kill("X", "B", 1.0),
            Kill("A", "Y", 2.0),
            Kill("A", "Z", 4.0),
            Kill("A", "X", 6.0),
            Kill("A", "W", 7.0),
        ]

        stats = analyze(roster, [], events)
        a = stats["A"]

        assert a.clutch_attempts == 3
        assert a.clutch_wins == 1
        assert a.clutch_flags() == {
            "1v1": True,
            "1v2": True,
            "1v3": True,
            "1v4": False,
            "1v5": False,
        }

    def test_more_than_five_enemies_sets_no_flag(self):
        enemies = [f"X{i}" for i in range(1, 8)]
        roster = _roster(["A", "B"], enemies)
        events = [Kill("X1", "B", 1.0), Kill("A", "X1", 2.0)]

        stats = analyze(roster, [], events)

        assert stats["A"].clutch_attempts == 1
        assert stats["A"].clutch_wins == 0
        assert not any(stats["A"].clutch_flags().values())

    def test_killer_not_on_roster_skips_clutch(self):
        roster = _roster(["A"], ["X", "Y"])
        events = [Kill("ghost", "X", 1.0)]

        stats = analyze(roster, [], events)

        assert all(s.clutch_attempts == 0 for s in stats.values())

    def test_attempts_cover_every_flag(self):
        roster = _roster(["A", "B"], ["X", "Y", "Z"])
        events = [Kill("X", "B", 1.0), Kill("A", "Y", 2.0)]

        a = analyze(roster, [], events)["A"]

        assert a.clutch_1v2 is True
        assert a.clutch_attempts >= 1


class TestTradeDetection:
    """Tests for trade kill detection."""

    @pytest.fixture
    def roster(self):
        return _roster(["A", "B", "C"], ["X", "Y"])

    def test_trade_within_window(self, roster):
        stats = analyze(roster, [], [Kill("X", "B", 10.0), Kill("A", "X", 12.5)])

        assert stats["A"].trade_kills == 1
        assert stats["X"].trade_deaths == 1
        assert stats["B"].trade_deaths == 0

    def test_no_trade_outside_window(self, roster):
        stats = analyze(roster, [], [Kill("X", "B", 10.0), Kill("A", "X", 13.01)])

        assert stats["A"].trade_kills == 0
        assert stats["X"].trade_deaths == 0

    def test_trade_at_exact_window(self, roster):
        stats = analyze(roster, [], [Kill("X", "B", 10.0), Kill("A", "X", 13.0)])

        assert stats["A"].trade_kills == 1

    def test_one_kill_avenges_two_deaths(self, roster):
        events = [Kill("X", "A", 1.0), Kill("X", "B", 2.0), Kill("C", "X", 3.0)]

        stats = analyze(roster, [], events)

        assert stats["C"].trade_kills == 2
        assert stats["X"].trade_deaths == 2

    def test_evicted_death_is_not_traded(self, roster):
        events = [Kill("X", "A", 0.0), Kill("Y", "B", 5.0), Kill("C", "X", 5.5)]

        stats = analyze(roster, [], events)

        assert stats["C"].trade_kills == 0
        assert stats["X"].trade_deaths == 0

    def test_custom_window(self, roster):
        config = AnalysisConfig(trade_window_seconds=5.0)
        events = [Kill("X", "B", 10.0), Kill("A", "X", 13.01)]

        stats = analyze(roster, [], events, config=config)

        assert stats["A"].trade_kills == 1


class TestMultiKills:
    """Tests for multi-kill classification."""

    @pytest.fixture
    def roster(self):
        return _roster(["P", "Q"], ["V1", "V2", "V3", "V4", "V5"])

    def _kills(self, times):
        return [Kill("P", f"V{i + 1}", t) for i, t in enumerate(times)]

    def test_five_kill_streak(self, roster):
        p = analyze(roster, [], self._kills([0, 3, 6, 9, 12]))["P"]

        assert (p.double_kills, p.triple_kills, p.quad_kills, p.ace) == (1, 1, 1, True)

    def test_streak_break(self, roster):
        p = analyze(roster, [], self._kills([0, 3, 25]))["P"]

        assert p.double_kills == 1
        assert p.triple_kills == 0
        assert p.ace is False

    def test_two_streaks(self, roster):
        p = analyze(roster, [], self._kills([0, 5, 30, 35, 40]))["P"]

        assert p.double_kills == 2
        assert p.triple_kills == 1
        assert p.quad_kills == 0

    def test_spread_out_five_kills_is_still_ace(self, roster):
        p = analyze(roster, [], self._kills([0, 20, 40, 60, 80]))["P"]

        assert p.ace is True
        assert p.double_kills == 0

    def test_single_kill(self, roster):
        p = analyze(roster, [], self._kills([4.0]))["P"]

        assert p.double_kills == 0
        assert p.ace is False


class TestEntryDuel:
    """Tests for entry kill / entry death."""

    def test_first_kill_sets_entry_flags(self):
        roster = _roster(["A", "B"], ["X", "Y"])
        events = [
            PlantAction("A", ActionPhase.START, 0.5),
            Kill("Y", "B", 2.0),
            Kill("A", "Y", 3.0),
            Kill("X", "A", 4.0),
        ]

        stats = analyze(roster, [], events)

        assert [u for u, s in stats.items() if s.entry_kill] == ["Y"]
        assert [u for u, s in stats.items() if s.entry_death] == ["B"]

    def test_no_kills_no_entry(self):
        stats = analyze(_roster(["A"], ["X"]), [], [PickupAction("A", 1.0)])

        assert not any(s.entry_kill or s.entry_death for s in stats.values())

    def test_unknown_first_killer_still_marks_victim(self):
        stats = analyze(_roster(["A"], ["X"]), [], [Kill("ghost", "A", 1.0)])

        assert stats["A"].entry_death is True
        assert stats["X"].entry_kill is False


class TestObjectives:
    """Tests for plant/defuse/pickup counters."""

    def test_both_phases_count(self):
        roster = _roster(["A"], ["X"])
        events = [
            PickupAction("A", 1.0),
            PlantAction("A", ActionPhase.START, 2.0),
            PlantAction("A", ActionPhase.COMPLETE, 9.0),
            DefuseAction("X", ActionPhase.START, 20.0),
            DefuseAction("X", ActionPhase.COMPLETE, 27.0),
        ]

        stats = analyze(roster, [], events)

        assert stats["A"].defuser_pickups == 1
        assert stats["A"].defuser_plants == 2
        assert stats["X"].defuser_defuses == 2
        assert stats["A"].plant_denials == 0

    def test_unknown_actor_is_skipped(self):
        result = analyze_round(
            _roster(["A"], ["X"]), [], [PlantAction("ghost", ActionPhase.START, 1.0)]
        )

        assert result.player_stats["A"].defuser_plants == 0
        assert result.warnings[0]["code"] == "UNKNOWN_PLAYER"


class TestFinalizer:
    """Tests for survival and KOST."""

    @pytest.fixture
    def roster(self):
        return _roster(["P", "A"], ["X", "Y"])

    def test_no_contribution_means_no_kost(self, roster):
        stats = analyze(roster, _base("P"), [])

        assert stats["P"].kost is False
        assert stats["P"].survived is False

    def test_kill_leg(self, roster):
        assert analyze(roster, _base("P", kills=1), [])["P"].kost is True

    def test_plant_leg(self, roster):
        events = [PlantAction("P", ActionPhase.START, 5.0)]

        assert analyze(roster, _base("P"), events)["P"].kost is True

    def test_defuse_leg(self, roster):
        events = [DefuseAction("P", ActionPhase.COMPLETE, 5.0)]

        assert analyze(roster, _base("P"), events)["P"].kost is True

    def test_pickup_alone_is_not_objective(self, roster):
        events = [PickupAction("P", 5.0)]

        assert analyze(roster, _base("P"), events)["P"].kost is False

    def test_survival_leg(self, roster):
        stats = analyze(roster, _base("P", died=False), [])

        assert stats["P"].survived is True
        assert stats["P"].kost is True

    def test_traded_leg(self):
        """The traded leg is this player's own death being a trade death."""
        roster = _roster(["A", "B"], ["P", "Y"])
        events = [Kill("P", "B", 1.0), Kill("A", "P", 2.0)]

        stats = analyze(roster, _base("P"), events)

        assert stats["P"].trade_deaths == 1
        assert stats["P"].kost is True

    def test_missing_base_stats_not_finalized(self, roster):
        stats = analyze(roster, _base("P", died=False), [])

        assert stats["A"].survived is False
        assert stats["A"].kost is False

    def test_base_stats_for_unknown_player_ignored(self, roster):
        stats = analyze(roster, _base("ghost", died=False), [])

        assert "ghost" not in stats


class TestAnalyzeContract:
    """Tests for the analyze() contract: coverage, purity, empty input."""

    @pytest.fixture
    def round_inputs(self):
        roster = _roster(["A", "B", "C"], ["X", "Y", "Z"])
        base = _base("A", "B", "C", "X", "Y", "Z")
        events = [
            Kill("X", "A", 5.0, headshot=True),
            Kill("B", "X", 6.5),
            PlantAction("Y", ActionPhase.START, 20.0),
            Kill("Y", "B", 21.0),
            Kill("Z", "C", 22.0),
            Kill("?", "Y", 30.0),
        ]
        return roster, base, events

    def test_empty_roster(self):
        assert analyze([], [], []) == {}

    def test_roster_without_events(self):
        roster = _roster(["A"], ["X"])

        stats = analyze(roster, [], [])

        assert stats == {"A": AdvancedStats("A"), "X": AdvancedStats("X")}

    def test_every_roster_player_present(self, round_inputs):
        roster, base, events = round_inputs

        stats = analyze(roster, base, events)

        assert set(stats) == {p.username for p in roster}

    def test_deterministic(self, round_inputs):
        roster, base, events = round_inputs

        assert analyze(roster, base, events) == analyze(roster, base, events)

    def test_roster_order_irrelevant(self, round_inputs):
        roster, base, events = round_inputs

        assert analyze(roster, base, events) == analyze(list(reversed(roster)), base, events)

    def test_analyzer_reusable(self, round_inputs):
        analyzer = RoundAnalyzer(*round_inputs)

        assert analyzer.analyze().player_stats == analyzer.analyze().player_stats

    def test_parallel_rounds_match_sequential(self, round_inputs):
        roster, base, events = round_inputs
        variants = [events[:n] for n in range(len(events) + 1)]

        sequential = [analyze(roster, base, ev) for ev in variants]
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel = list(pool.map(lambda ev: analyze(roster, base, ev), variants))

        assert parallel == sequential

    def test_unknown_reference_does_not_abort(self, round_inputs):
        roster, base, events = round_inputs

        result = analyze_round(roster, base, events, round_number=3)

        assert result.round_number == 3
        assert len(result.warnings) == 1
        assert result.player_stats["X"].trade_deaths == 1
        assert result.player_stats["B"].trade_kills == 1

    def test_ordered_stats_follow_roster(self, round_inputs):
        roster, base, events = round_inputs

        result = analyze_round(roster, base, events)

        assert [s.username for s in result.ordered_stats()] == [p.username for p in roster]
