"""
Core Module - Shared domain models.

Components:
- models: Learning units, playlist entries, session snapshot, decisions
- mastery: Mastery bands and threshold checks

Design Principle:
Strategies, the session engine and the adapters import their types from
playlist_engine.core rather than defining their own.
"""

from playlist_engine.core.mastery import MasteryBand, all_nodes_mastered
from playlist_engine.core.models import (
    DEFAULT_ADAPTIVE_SETTINGS,
    DEFAULT_PRACTICE_QUESTION_COUNT,
    SKIP_MASTERY_THRESHOLD,
    UNLIMITED_RETRIES,
    AdaptiveMode,
    AdvanceDecision,
    CompleteDecision,
    CourseAdaptiveSettings,
    GateConfig,
    GateDisplayStatus,
    GateFailStrategy,
    GateResult,
    HoldDecision,
    InjectDecision,
    InjectedPracticeEntry,
    InjectedReviewEntry,
    LearnerModuleSession,
    LearningUnitAdaptive,
    NodeProgress,
    PlaylistContext,
    PlaylistDecision,
    PlaylistDisplayEntry,
    PlaylistEntry,
    RetryDecision,
    SkipDecision,
    StaticLearningUnit,
    StaticPlaylistEntry,
    parse_decision,
)

__all__ = [
    # Constants
    "DEFAULT_ADAPTIVE_SETTINGS",
    "DEFAULT_PRACTICE_QUESTION_COUNT",
    "SKIP_MASTERY_THRESHOLD",
    "UNLIMITED_RETRIES",
    # Enums
    "AdaptiveMode",
    "GateDisplayStatus",
    "GateFailStrategy",
    "MasteryBand",
    # Units
    "GateConfig",
    "LearningUnitAdaptive",
    "StaticLearningUnit",
    # Entries
    "PlaylistEntry",
    "StaticPlaylistEntry",
    "InjectedPracticeEntry",
    "InjectedReviewEntry",
    # State
    "CourseAdaptiveSettings",
    "GateResult",
    "LearnerModuleSession",
    "NodeProgress",
    "PlaylistContext",
    "PlaylistDisplayEntry",
    # Decisions
    "PlaylistDecision",
    "AdvanceDecision",
    "CompleteDecision",
    "HoldDecision",
    "InjectDecision",
    "RetryDecision",
    "SkipDecision",
    # Helpers
    "all_nodes_mastered",
    "parse_decision",
]
