"""
Playlist Engine.

Runtime engine that manages the adaptive playlist for one learner in one
module. Pure Python, no I/O.

Usage:
    engine = PlaylistEngine(config, learning_units, enrollment_id, module_id)
    session = engine.initialize_playlist()
    # ... learner progresses ...
    decision = engine.resolve_next()
    session = engine.apply_decision(decision)

Every mutating call returns a new LearnerModuleSession snapshot. Snapshots
handed out earlier are never modified.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from loguru import logger

from playlist_engine.adaptive.strategies import PlaylistStrategy, get_strategy
from playlist_engine.core.models import (
    DEFAULT_ADAPTIVE_SETTINGS,
    AdvanceDecision,
    CompleteDecision,
    CourseAdaptiveSettings,
    GateDisplayStatus,
    GateResult,
    HoldDecision,
    InjectDecision,
    LearnerModuleSession,
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


class PlaylistEngine:
    """
    Orchestrate one module session.

    Owns the current session snapshot and delegates every "what next"
    question to the strategy selected by the course adaptive mode.
    """

    def __init__(
        self,
        config: Optional[CourseAdaptiveSettings],
        static_sequence: Sequence[StaticLearningUnit],
        enrollment_id: str,
        module_id: str,
        initial_node_progress: Optional[Mapping[str, NodeProgress]] = None,
        strategy: Optional[PlaylistStrategy] = None,
    ):
        self.config = config or DEFAULT_ADAPTIVE_SETTINGS
        self.static_sequence: tuple[StaticLearningUnit, ...] = tuple(
            sorted(static_sequence, key=lambda lu: lu.sequence)
        )
        self.strategy = strategy or get_strategy(self.config.mode)

        # Empty session until initialize_playlist() or restore_session()
        self._session = LearnerModuleSession(
            enrollment_id=enrollment_id,
            module_id=module_id,
            node_progress=dict(initial_node_progress or {}),
        )

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    @property
    def session(self) -> LearnerModuleSession:
        """Current session snapshot (JSON-serializable)."""
        return self._session

    @property
    def is_complete(self) -> bool:
        return self._session.is_complete

    def initialize_playlist(self) -> LearnerModuleSession:
        """Build the initial playlist from the static unit sequence."""
        playlist = tuple(StaticPlaylistEntry.from_unit(lu) for lu in self.static_sequence)
        self._session = self._session.model_copy(update={
            "playlist": playlist,
            "current_index": 0,
            "is_complete": len(playlist) == 0,
            "skipped_entries": (),
        })
        logger.info(
            f"Playlist initialized for {self._session.enrollment_id}/{self._session.module_id}: "
            f"{len(playlist)} entries, mode={self.config.mode.value}"
        )
        return self._session

    def restore_session(self, session: LearnerModuleSession) -> LearnerModuleSession:
        """Resume from a previously saved snapshot."""
        if (session.enrollment_id, session.module_id) != (
            self._session.enrollment_id,
            self._session.module_id,
        ):
            logger.warning(
                f"Restoring session {session.enrollment_id}/{session.module_id} into engine "
                f"built for {self._session.enrollment_id}/{self._session.module_id}"
            )
        self._session = session
        return self._session

    # =========================================================================
    # Decisions
    # =========================================================================

    def resolve_next(self) -> PlaylistDecision:
        """Ask the strategy what to do next. Does not change the session."""
        decision = self.strategy.resolve_next(self._build_context())
        logger.debug(f"Resolved {decision.action} at index {self._session.current_index}")
        return decision

    def apply_decision(self, decision: PlaylistDecision | Mapping) -> LearnerModuleSession:
        """
        Apply a decision and return the resulting snapshot.

        advance/skip move forward one slot, inject splices entries after the
        current slot and moves into the first of them, complete marks the
        session done, hold and retry leave the position unchanged.

        Args:
            decision: A decision model, or its plain-dict form

        Returns:
            The new session snapshot
        """
        if isinstance(decision, Mapping):
            decision = parse_decision(decision)
        session = self._session

        if isinstance(decision, (AdvanceDecision, SkipDecision)):
            update = self._advance_update(session)
            if isinstance(decision, SkipDecision):
                current = self.get_current_entry()
                if current is not None:
                    update["skipped_entries"] = (*session.skipped_entries, current.entry_id)
                    logger.debug(f"Skipped {current.entry_id}: {decision.reason}")
            self._session = session.model_copy(update=update)

        elif isinstance(decision, InjectDecision):
            self._session = self._inject(session, decision.entries)

        elif isinstance(decision, CompleteDecision):
            self._session = session.model_copy(update={"is_complete": True})
            logger.info(f"Module {session.module_id} complete for {session.enrollment_id}")

        elif isinstance(decision, (HoldDecision, RetryDecision)):
            # Learner stays on the current slot
            pass

        return self._session

    def _advance_update(self, session: LearnerModuleSession) -> dict:
        length = len(session.playlist)
        next_index = min(session.current_index + 1, length)
        return {
            "current_index": next_index,
            "is_complete": session.is_complete or next_index >= length,
        }

    def _inject(
        self,
        session: LearnerModuleSession,
        entries: Sequence[PlaylistEntry],
    ) -> LearnerModuleSession:
        if not entries:
            return session

        used_ids = {entry.entry_id for entry in session.playlist}
        unique: list[PlaylistEntry] = []
        for entry in entries:
            entry_id = entry.entry_id
            suffix = 2
            while entry_id in used_ids:
                entry_id = f"{entry.entry_id}-{suffix}"
                suffix += 1
            used_ids.add(entry_id)
            if entry_id != entry.entry_id:
                entry = entry.model_copy(update={"entry_id": entry_id})
            unique.append(entry)

        split = min(session.current_index + 1, len(session.playlist))
        playlist = (*session.playlist[:split], *unique, *session.playlist[split:])
        logger.debug(f"Injected {[e.entry_id for e in unique]} after index {session.current_index}")

        return session.model_copy(update={
            "playlist": playlist,
            "current_index": split,
            "is_complete": False,
        })

    # =========================================================================
    # Recorders
    # =========================================================================

    def record_gate_result(self, result: GateResult) -> LearnerModuleSession:
        """Append a gate attempt to the unit's history."""
        if not any(lu.id == result.lu_id and lu.is_gate for lu in self.static_sequence):
            logger.debug(f"Gate result recorded for non-gate unit {result.lu_id}")

        existing = self._session.gate_attempts.get(result.lu_id, ())
        gate_attempts = {**self._session.gate_attempts, result.lu_id: (*existing, result)}
        self._session = self._session.model_copy(update={"gate_attempts": gate_attempts})
        return self._session

    def update_node_progress(self, node_id: str, progress: NodeProgress) -> LearnerModuleSession:
        """Insert or replace progress for one knowledge node."""
        node_progress = {**self._session.node_progress, node_id: progress}
        self._session = self._session.model_copy(update={"node_progress": node_progress})
        return self._session

    # =========================================================================
    # Navigation
    # =========================================================================

    def navigation_limit(self) -> int:
        """
        Highest playlist index reachable by direct navigation.

        That is the first index at which the strategy would hold or retry,
        or the last index when nothing blocks.
        """
        playlist = self._session.playlist
        for index in range(len(playlist)):
            decision = self.strategy.resolve_next(self._build_context(current_index=index))
            if isinstance(decision, (HoldDecision, RetryDecision)):
                return index
        return max(len(playlist) - 1, 0)

    def go_to_index(self, index: int, override: bool = False) -> LearnerModuleSession:
        """
        Jump to a playlist index (sidebar click).

        Moving backwards is always allowed. Moving past an unresolved gate
        is refused unless ``override`` is set (instructor/review mode).
        Out-of-range indices are ignored.
        """
        session = self._session
        if not 0 <= index < len(session.playlist):
            logger.debug(f"Ignoring navigation to out-of-range index {index}")
            return session

        if not override and index > session.current_index and index > self.navigation_limit():
            logger.debug(f"Navigation to index {index} blocked by unresolved gate")
            return session

        self._session = session.model_copy(update={"current_index": index, "is_complete": False})
        return self._session

    # =========================================================================
    # Read accessors
    # =========================================================================

    def get_current_entry(self) -> Optional[PlaylistEntry]:
        """Current playlist entry, or None if the session is complete."""
        session = self._session
        if session.is_complete or not 0 <= session.current_index < len(session.playlist):
            return None
        return session.playlist[session.current_index]

    def get_display_entries(self) -> list[PlaylistDisplayEntry]:
        """Build sidebar entries for the current snapshot."""
        session = self._session
        skipped = set(session.skipped_entries)
        display = []

        for index, entry in enumerate(session.playlist):
            is_gate = isinstance(entry, StaticPlaylistEntry) and entry.lu.is_gate
            gate_status = None
            if is_gate:
                results = session.gate_attempts.get(entry.lu.id, ())
                if not results:
                    gate_status = GateDisplayStatus.PENDING
                elif results[-1].passed:
                    gate_status = GateDisplayStatus.PASSED
                else:
                    gate_status = GateDisplayStatus.FAILED

            is_skipped = entry.entry_id in skipped
            passed = index < session.current_index or (
                session.is_complete and index == session.current_index
            )
            display.append(PlaylistDisplayEntry(
                id=entry.entry_id,
                title=entry.title,
                kind=entry.kind,
                is_skipped=is_skipped,
                is_current=index == session.current_index and not session.is_complete,
                is_completed=passed and not is_skipped,
                is_gate=is_gate,
                gate_status=gate_status,
            ))

        return display

    def _build_context(self, current_index: Optional[int] = None) -> PlaylistContext:
        session = self._session
        return PlaylistContext(
            static_sequence=self.static_sequence,
            playlist=session.playlist,
            current_index=session.current_index if current_index is None else current_index,
            node_progress=session.node_progress,
            gate_results=session.gate_attempts,
            adaptive_config=self.config,
        )
