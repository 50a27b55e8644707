"""
RoundSight - Constants

Match-feedback event names, action phases and the timing windows used by
the round analytics engine.
"""

from enum import StrEnum


class EventType(StrEnum):
    """
    Match-feedback event types emitted by the replay decoder.

    Only these names carry meaning for the analytics engine; every other
    feedback type (operator swaps, locate events, ...) is ignored.
    """

    KILL = "Kill"
    DEFUSER_PLANT_START = "DefuserPlantStart"
    DEFUSER_PLANT_COMPLETE = "DefuserPlantComplete"
    DEFUSER_DISABLE_START = "DefuserDisableStart"
    DEFUSER_DISABLE_COMPLETE = "DefuserDisableComplete"
    DEFUSER_PICKED_UP = "DefuserPickedUp"


class ActionPhase(StrEnum):
    """Phase of a plant or defuse action."""

    START = "start"
    COMPLETE = "complete"


# Both teams in a round, indexed the way the decoder reports them
TEAM_INDICES = (0, 1)

# A kill avenges a teammate if it lands within this many seconds
TRADE_WINDOW_SECONDS = 3.0

# Maximum gap between two kills of the same streak
MULTI_KILL_WINDOW_SECONDS = 10.0

# Length of the action-phase clock; the feed clock counts down from here
ROUND_CLOCK_SECONDS = 180.0

# Kills needed for an ace
ACE_KILL_COUNT = 5

# Largest enemy count tracked as a clutch scenario
MAX_CLUTCH_ENEMIES = 5
CLUTCH_SCENARIOS = tuple(f"1v{n}" for n in range(1, MAX_CLUTCH_ENEMIES + 1))

PLANT_EVENTS = {
    EventType.DEFUSER_PLANT_START: ActionPhase.START,
    EventType.DEFUSER_PLANT_COMPLETE: ActionPhase.COMPLETE,
}
DEFUSE_EVENTS = {
    EventType.DEFUSER_DISABLE_START: ActionPhase.START,
    EventType.DEFUSER_DISABLE_COMPLETE: ActionPhase.COMPLETE,
}
