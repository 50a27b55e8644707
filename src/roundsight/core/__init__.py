"""
RoundSight Core - Foundation modules for round analysis.

This module contains the fundamental components:
- constants: Event names, action phases and timing windows
- config: Application configuration management
- models: Roster, events and per-player statistics
- feed: Conversion of decoder records into models
- schemas: Data contracts for module boundaries
- utils: General utility functions
"""

from roundsight.core.constants import (
    ACE_KILL_COUNT,
    CLUTCH_SCENARIOS,
    MULTI_KILL_WINDOW_SECONDS,
    TRADE_WINDOW_SECONDS,
    ActionPhase,
    EventType,
)
from roundsight.core.models import (
    AdvancedStats,
    BaseRoundStats,
    DefuseAction,
    Kill,
    Participant,
    PickupAction,
    PlantAction,
    PlayerRoundStats,
    RoundAnalysis,
    RoundEvent,
)
from roundsight.core.schemas import (
    AdvancedStatsDict,
    AnalysisWarning,
    RawMatchUpdate,
    RawPlayer,
    RawPlayerRoundStats,
)

__all__ = [
    # Enums
    "ActionPhase",
    "EventType",
    # Constants
    "ACE_KILL_COUNT",
    "CLUTCH_SCENARIOS",
    "MULTI_KILL_WINDOW_SECONDS",
    "TRADE_WINDOW_SECONDS",
    # Models
    "AdvancedStats",
    "BaseRoundStats",
    "DefuseAction",
    "Kill",
    "Participant",
    "PickupAction",
    "PlantAction",
    "PlayerRoundStats",
    "RoundAnalysis",
    "RoundEvent",
    # Schemas (data contracts)
    "AdvancedStatsDict",
    "AnalysisWarning",
    "RawMatchUpdate",
    "RawPlayer",
    "RawPlayerRoundStats",
]
