"""
Playlist Domain Models.

Immutable value types shared by the strategies, the session engine and the
adapters. Everything here is plain data: snapshots serialize with
``model_dump(mode="json")`` and load back with ``model_validate``.

Design:
- StaticLearningUnit: one unit of course content plus optional adaptive profile
- PlaylistEntry: tagged variant of what occupies a playlist slot
- LearnerModuleSession: full learner state for one module (copy-on-write)
- PlaylistDecision: tagged variant, the sole output of a strategy
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

# Fixed engine constants
SKIP_MASTERY_THRESHOLD = 0.7
DEFAULT_PRACTICE_QUESTION_COUNT = 5
UNLIMITED_RETRIES = -1


class FrozenModel(BaseModel):
    """Base for all engine value types."""

    model_config = {"frozen": True}


# =============================================================================
# Adaptive Metadata
# =============================================================================


class GateFailStrategy(str, Enum):
    """What happens when a learner has failed a gate and used up retries."""

    ALLOW_CONTINUE = "allow-continue"
    HOLD = "hold"
    INJECT_PRACTICE = "inject-practice"
    PRESCRIBE_REVIEW = "prescribe-review"


class AdaptiveMode(str, Enum):
    """Course-level adaptive mode. Selects the sequencing strategy."""

    OFF = "off"  # Static passthrough
    GUIDED = "guided"  # Gates respected, no injection
    FULL = "full"  # Gates + skip + remediation injection


class GateConfig(FrozenModel):
    """Configuration for a gate checkpoint."""

    mastery_threshold: float = 0.8
    min_questions: int = 3
    max_retries: int = 2  # -1 = unlimited
    fail_strategy: GateFailStrategy = GateFailStrategy.HOLD

    @property
    def has_unlimited_retries(self) -> bool:
        return self.max_retries == UNLIMITED_RETRIES


class LearningUnitAdaptive(FrozenModel):
    """Adaptive profile attached to a learning unit."""

    teaches_nodes: tuple[str, ...] = ()
    assesses_nodes: tuple[str, ...] = ()
    is_gate: bool = False
    is_skippable: bool = False
    gate_config: Optional[GateConfig] = None


class StaticLearningUnit(FrozenModel):
    """
    Immutable description of one unit of content.

    ``adaptive`` is None when the course has no adaptive metadata for the unit.
    """

    id: str
    title: str
    type: str = "media"
    content_id: Optional[str] = None
    category: Optional[str] = None
    is_required: bool = True
    sequence: int = 0
    estimated_duration: Optional[float] = None  # minutes
    adaptive: Optional[LearningUnitAdaptive] = None

    @property
    def is_gate(self) -> bool:
        return bool(self.adaptive and self.adaptive.is_gate)

    @property
    def teaches_nodes(self) -> tuple[str, ...]:
        return self.adaptive.teaches_nodes if self.adaptive else ()


# =============================================================================
# Playlist Entries
# =============================================================================


class StaticPlaylistEntry(FrozenModel):
    """An entry mapped 1:1 from the static unit sequence."""

    kind: Literal["static"] = "static"
    entry_id: str
    title: str
    lu: StaticLearningUnit

    @classmethod
    def from_unit(cls, lu: StaticLearningUnit) -> StaticPlaylistEntry:
        return cls(entry_id=f"static-{lu.id}", title=lu.title, lu=lu)


class InjectedPracticeEntry(FrozenModel):
    """Synthetic practice set targeting weak knowledge nodes."""

    kind: Literal["injected-practice"] = "injected-practice"
    entry_id: str
    title: str
    target_node_ids: tuple[str, ...]
    question_count: int = DEFAULT_PRACTICE_QUESTION_COUNT


class InjectedReviewEntry(FrozenModel):
    """Synthetic review of an existing teaching unit."""

    kind: Literal["injected-review"] = "injected-review"
    entry_id: str
    title: str
    reference_lu_id: str
    target_node_ids: tuple[str, ...]


PlaylistEntry = Annotated[
    Union[StaticPlaylistEntry, InjectedPracticeEntry, InjectedReviewEntry],
    Field(discriminator="kind"),
]


# =============================================================================
# Learner State
# =============================================================================


class NodeProgress(FrozenModel):
    """Learner state for one knowledge node."""

    mastery: float = Field(default=0.0, ge=0.0, le=1.0)
    attempts: int = Field(default=0, ge=0)


class GateResult(FrozenModel):
    """One gate attempt. Appended to history, never edited."""

    lu_id: str
    passed: bool
    score: float = 0.0
    attempt_number: int = 1
    failed_nodes: tuple[str, ...] = ()


class CourseAdaptiveSettings(FrozenModel):
    """Course-level adaptive settings."""

    mode: AdaptiveMode = AdaptiveMode.OFF
    allow_learner_choice: bool = False
    pre_assessment_enabled: bool = False


DEFAULT_ADAPTIVE_SETTINGS = CourseAdaptiveSettings()


class LearnerModuleSession(FrozenModel):
    """
    Full session state for one (enrollment, module) pair.

    Engine operations return a new snapshot; a snapshot is never changed
    after it has been handed out.
    """

    enrollment_id: str
    module_id: str
    playlist: tuple[PlaylistEntry, ...] = ()
    current_index: int = 0
    is_complete: bool = False
    node_progress: dict[str, NodeProgress] = Field(default_factory=dict)
    gate_attempts: dict[str, tuple[GateResult, ...]] = Field(default_factory=dict)
    skipped_entries: tuple[str, ...] = ()


class PlaylistContext(FrozenModel):
    """Read-only view handed to a strategy."""

    static_sequence: tuple[StaticLearningUnit, ...] = ()
    playlist: tuple[PlaylistEntry, ...] = ()
    current_index: int = 0
    node_progress: dict[str, NodeProgress] = Field(default_factory=dict)
    gate_results: dict[str, tuple[GateResult, ...]] = Field(default_factory=dict)
    adaptive_config: CourseAdaptiveSettings = DEFAULT_ADAPTIVE_SETTINGS

    @property
    def current_entry(self) -> Optional[PlaylistEntry]:
        if 0 <= self.current_index < len(self.playlist):
            return self.playlist[self.current_index]
        return None

    @property
    def is_at_end(self) -> bool:
        """True for an empty playlist or when positioned on/after the last entry."""
        return self.current_index >= len(self.playlist) - 1


# =============================================================================
# Decisions
# =============================================================================


class AdvanceDecision(FrozenModel):
    action: Literal["advance"] = "advance"


class CompleteDecision(FrozenModel):
    action: Literal["complete"] = "complete"


class HoldDecision(FrozenModel):
    """Forward navigation is blocked until the learner resolves the gate."""

    action: Literal["hold"] = "hold"
    message: str


class RetryDecision(FrozenModel):
    action: Literal["retry"] = "retry"
    lu_id: str


class SkipDecision(FrozenModel):
    action: Literal["skip"] = "skip"
    reason: str


class InjectDecision(FrozenModel):
    """Insert remediation entries right after the current position."""

    action: Literal["inject"] = "inject"
    entries: tuple[PlaylistEntry, ...]


PlaylistDecision = Annotated[
    Union[
        AdvanceDecision,
        CompleteDecision,
        HoldDecision,
        RetryDecision,
        SkipDecision,
        InjectDecision,
    ],
    Field(discriminator="action"),
]

_decision_adapter: TypeAdapter[PlaylistDecision] = TypeAdapter(PlaylistDecision)


def parse_decision(data: Mapping[str, Any]) -> PlaylistDecision:
    """Load a decision from its plain-dict form, e.g. ``{"action": "advance"}``."""
    return _decision_adapter.validate_python(data)


# =============================================================================
# Display
# =============================================================================


class GateDisplayStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class PlaylistDisplayEntry(FrozenModel):
    """Sidebar-ready view of one playlist entry."""

    id: str
    title: str
    kind: str
    is_skipped: bool = False
    is_current: bool = False
    is_completed: bool = False
    is_gate: bool = False
    gate_status: Optional[GateDisplayStatus] = None
