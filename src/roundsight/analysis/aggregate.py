"""
Multi-round aggregation of per-player round stats.

Turns analyzed rounds into a pandas DataFrame (one row per player per
round) and builds the summary tables shown next to the match list:
clutch summary, defuser summary and per-player totals.
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, fields

import pandas as pd

from roundsight.core.constants import CLUTCH_SCENARIOS
from roundsight.core.models import AdvancedStats, PlayerRoundStats, RoundAnalysis

logger = logging.getLogger(__name__)


BASE_COLUMNS = [
    "round_number",
    "username",
    "team_index",
    "kills",
    "died",
    "assists",
    "headshots",
    "headshot_percentage",
]
ADVANCED_COLUMNS = [f.name for f in fields(AdvancedStats) if f.name != "username"]
ROUND_STATS_COLUMNS = BASE_COLUMNS + ADVANCED_COLUMNS

CLUTCH_SUMMARY_COLUMNS = [
    "username",
    *(col for scenario in CLUTCH_SCENARIOS for col in (scenario, f"{scenario}_won")),
    "total_attempts",
    "total_wins",
    "clutch_rate",
]

DEFUSER_SUMMARY_COLUMNS = [
    "username",
    "plants",
    "defuses",
    "plant_denials",
    "plant_success_rate",
]

PLAYER_SUMMARY_COLUMNS = [
    "username",
    "rounds",
    "kills",
    "deaths",
    "assists",
    "headshots",
    "headshot_percentage",
    "kd",
    "kost_percentage",
    "entry_kills",
    "entry_deaths",
    "trade_kills",
    "trade_deaths",
    "double_kills",
    "triple_kills",
    "quad_kills",
    "aces",
    "clutch_attempts",
    "clutch_wins",
]


def _row(stats: PlayerRoundStats) -> dict:
    row = {
        "round_number": stats.round_number,
        "username": stats.username,
        "team_index": stats.team_index,
    }
    base = asdict(stats.base)
    base.pop("username")
    advanced = asdict(stats.advanced)
    advanced.pop("username")
    row.update(base)
    row.update(advanced)
    return row


def round_stats_frame(rounds: Iterable[RoundAnalysis | PlayerRoundStats]) -> pd.DataFrame:
    """
    Build a DataFrame with one row per player per round.

    Accepts analyzed rounds (only players with base stats are included) or
    already merged PlayerRoundStats.
    """
    rows = []
    for item in rounds:
        if isinstance(item, RoundAnalysis):
            rows.extend(_row(stats) for stats in item.merged_stats())
        else:
            rows.append(_row(item))

    if not rows:
        return pd.DataFrame(columns=ROUND_STATS_COLUMNS)

    return pd.DataFrame(rows, columns=ROUND_STATS_COLUMNS)


def _filter_team(frame: pd.DataFrame, team_index: int | None) -> pd.DataFrame:
    if team_index is None:
        return frame
    return frame[frame["team_index"] == team_index]


def clutch_summary(frame: pd.DataFrame, team_index: int | None = 0) -> pd.DataFrame:
    """
    Aggregate clutch statistics per player.

    For every 1vN scenario, counts the rounds where the flag was set and
    the rounds where it was set and the player survived. Only players with
    at least one clutch attempt are listed, most wins first.

    Args:
        frame: Output of round_stats_frame().
        team_index: Restrict to one team (the recording player's team is 0),
            or None for both teams.
    """
    df = _filter_team(frame, team_index)
    if df.empty:
        return pd.DataFrame(columns=CLUTCH_SUMMARY_COLUMNS)

    survived = df["survived"].astype(bool)
    per_round = pd.DataFrame({"username": df["username"]})
    for scenario in CLUTCH_SCENARIOS:
        flag = df[f"clutch_{scenario}"].astype(bool)
        per_round[scenario] = flag.astype(int)
        per_round[f"{scenario}_won"] = (flag & survived).astype(int)
    per_round["total_attempts"] = df["clutch_attempts"].astype(int)
    per_round["total_wins"] = df["clutch_wins"].astype(int)

    summary = per_round.groupby("username", as_index=False, sort=True).sum()
    summary = summary.loc[summary["total_attempts"] > 0].copy()
    summary["clutch_rate"] = summary["total_wins"] / summary["total_attempts"] * 100

    summary = summary.sort_values("total_wins", ascending=False, kind="stable")
    return summary.reset_index(drop=True)[CLUTCH_SUMMARY_COLUMNS]


def defuser_summary(frame: pd.DataFrame, team_index: int | None = 0) -> pd.DataFrame:
    """
    Aggregate defuser plants, defuses and plant denials per player.

    Players with no objective activity are left out. The plant success rate
    is plants / (plants + denials) as a percentage.
    """
    df = _filter_team(frame, team_index)
    if df.empty:
        return pd.DataFrame(columns=DEFUSER_SUMMARY_COLUMNS)

    summary = df.groupby("username", as_index=False, sort=True).agg(
        plants=("defuser_plants", "sum"),
        defuses=("defuser_defuses", "sum"),
        plant_denials=("plant_denials", "sum"),
    )
    active = (summary["plants"] > 0) | (summary["defuses"] > 0) | (summary["plant_denials"] > 0)
    summary = summary.loc[active].copy()

    attempts = summary["plants"] + summary["plant_denials"]
    summary["plant_success_rate"] = (
        (summary["plants"] / attempts.where(attempts > 0) * 100).fillna(0.0).astype(float)
    )

    summary = summary.sort_values("plants", ascending=False, kind="stable")
    return summary.reset_index(drop=True)[DEFUSER_SUMMARY_COLUMNS]


def player_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Per-player totals and rates across all rounds in the frame, most kills first."""
    if frame.empty:
        return pd.DataFrame(columns=PLAYER_SUMMARY_COLUMNS)

    df = frame.astype(
        {
            "died": bool,
            "entry_kill": bool,
            "entry_death": bool,
            "ace": bool,
            "kost": bool,
        }
    )
    summary = df.groupby("username", as_index=False, sort=True).agg(
        rounds=("round_number", "count"),
        kills=("kills", "sum"),
        deaths=("died", "sum"),
        assists=("assists", "sum"),
        headshots=("headshots", "sum"),
        kost_rounds=("kost", "sum"),
        entry_kills=("entry_kill", "sum"),
        entry_deaths=("entry_death", "sum"),
        trade_kills=("trade_kills", "sum"),
        trade_deaths=("trade_deaths", "sum"),
        double_kills=("double_kills", "sum"),
        triple_kills=("triple_kills", "sum"),
        quad_kills=("quad_kills", "sum"),
        aces=("ace", "sum"),
        clutch_attempts=("clutch_attempts", "sum"),
        clutch_wins=("clutch_wins", "sum"),
    )

    kills = summary["kills"].astype(float)
    deaths = summary["deaths"].astype(float)
    summary["headshot_percentage"] = (
        (summary["headshots"] / kills.where(kills > 0) * 100).fillna(0.0)
    )
    # No deaths: K/D is the raw kill count
    summary["kd"] = (kills / deaths.where(deaths > 0)).fillna(kills)
    summary["kost_percentage"] = summary["kost_rounds"] / summary["rounds"] * 100

    summary = summary.sort_values(["kills", "username"], ascending=[False, True], kind="stable")
    logger.debug(f"Player summary built for {len(summary)} players")
    return summary.reset_index(drop=True)[PLAYER_SUMMARY_COLUMNS]
