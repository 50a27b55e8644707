"""
Match-feedback adapter.

Turns the loosely typed records produced by the replay decoder into the
dataclasses the analytics engine consumes. Records are kept in the order
the decoder emitted them; nothing here re-sorts events.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from roundsight.core.config import AnalysisConfig
from roundsight.core.constants import (
    DEFUSE_EVENTS,
    PLANT_EVENTS,
    ROUND_CLOCK_SECONDS,
    TEAM_INDICES,
    EventType,
)
from roundsight.core.models import (
    BaseRoundStats,
    DefuseAction,
    Kill,
    Participant,
    PickupAction,
    PlantAction,
    RoundEvent,
)
from roundsight.core.schemas import RawMatchUpdate, RawPlayer, RawPlayerRoundStats
from roundsight.core.utils import (
    clock_to_seconds,
    safe_bool,
    safe_float,
    safe_int,
    safe_str,
)

logger = logging.getLogger(__name__)


def _get(raw: Mapping[str, object], *keys: str) -> Any:
    """Return the first present key; the decoder is not consistent about casing."""
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _event_time(raw: RawMatchUpdate, round_clock_seconds: float) -> float:
    """
    Elapsed seconds since the start of the round.

    ``timeInSeconds`` is already elapsed time. The ``time`` string is the
    remaining round clock, which counts down, so it is subtracted from the
    clock's starting value to keep times increasing through the feed.
    """
    seconds = _get(raw, "timeInSeconds", "time_in_seconds", "time_seconds")
    if seconds is not None:
        return safe_float(seconds)

    clock = safe_str(_get(raw, "time"))
    remaining = clock_to_seconds(clock) if clock else None
    if remaining is None:
        return 0.0
    return max(round_clock_seconds - remaining, 0.0)


def parse_event(
    raw: RawMatchUpdate,
    round_clock_seconds: float = ROUND_CLOCK_SECONDS,
) -> RoundEvent | None:
    """
    Convert one match-feedback record to a typed event.

    Returns None for feedback types the engine does not use and for kills
    that are missing a killer or a victim.
    """
    type_name = safe_str(_get(raw, "type", "eventType", "event_type"))
    try:
        event_type = EventType(type_name)
    except ValueError:
        logger.debug(f"Skipping feedback type {type_name!r}")
        return None

    username = safe_str(_get(raw, "username"))
    time_seconds = _event_time(raw, round_clock_seconds)

    if event_type is EventType.KILL:
        victim = safe_str(_get(raw, "target", "victim"))
        if not username or not victim:
            logger.warning(f"Dropping kill with missing killer/victim at {time_seconds}s")
            return None
        return Kill(
            killer=username,
            victim=victim,
            time_seconds=time_seconds,
            headshot=safe_bool(_get(raw, "headshot")),
        )

    if event_type in PLANT_EVENTS:
        return PlantAction(username, PLANT_EVENTS[event_type], time_seconds)
    if event_type in DEFUSE_EVENTS:
        return DefuseAction(username, DEFUSE_EVENTS[event_type], time_seconds)
    return PickupAction(username, time_seconds)


def parse_events(
    raws: Iterable[RawMatchUpdate],
    config: AnalysisConfig | None = None,
) -> list[RoundEvent]:
    """Convert match feedback to typed events, preserving source order."""
    round_clock_seconds = (config or AnalysisConfig()).round_clock_seconds
    events = []
    for raw in raws:
        event = parse_event(raw, round_clock_seconds)
        if event is not None:
            events.append(event)
    return events


def parse_roster(raws: Iterable[RawPlayer]) -> list[Participant]:
    """
    Convert header players to participants.

    Entries without a username or with a team index other than 0/1 are
    dropped.
    """
    roster = []
    for raw in raws:
        username = safe_str(_get(raw, "username", "name"))
        team_index = safe_int(_get(raw, "teamIndex", "team_index"), default=-1)
        if not username or team_index not in TEAM_INDICES:
            logger.warning(f"Dropping roster entry {username!r} (team {team_index})")
            continue
        roster.append(Participant(username=username, team_index=team_index))
    return roster


def parse_base_stats(raws: Iterable[RawPlayerRoundStats]) -> list[BaseRoundStats]:
    """Convert decoder player round stats to BaseRoundStats."""
    stats = []
    for raw in raws:
        username = safe_str(_get(raw, "username", "name"))
        if not username:
            logger.warning("Dropping base stats entry without a username")
            continue
        stats.append(
            BaseRoundStats(
                username=username,
                kills=safe_int(_get(raw, "kills")),
                died=safe_bool(_get(raw, "died")),
                assists=safe_int(_get(raw, "assists")),
                headshots=safe_int(_get(raw, "headshots")),
                headshot_percentage=safe_float(
                    _get(raw, "headshotPercentage", "headshot_percentage")
                ),
            )
        )
    return stats
