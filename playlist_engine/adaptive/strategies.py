"""
Playlist Sequencing Strategies.

Three interchangeable policies that decide what the learner sees next:
- StaticStrategy: passthrough, adaptive metadata is ignored ("off")
- GuidedStrategy: gates are respected, failures never inject content
- FullStrategy: gates + mastery-based skip + remediation injection

Every strategy is a pure function of the PlaylistContext: no side effects,
no mutation, one decision for every context.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from playlist_engine.adaptive.remediation import RemediationRouter
from playlist_engine.core.mastery import all_nodes_mastered
from playlist_engine.core.models import (
    SKIP_MASTERY_THRESHOLD,
    AdaptiveMode,
    AdvanceDecision,
    CompleteDecision,
    GateConfig,
    GateFailStrategy,
    GateResult,
    HoldDecision,
    InjectDecision,
    PlaylistContext,
    PlaylistDecision,
    RetryDecision,
    SkipDecision,
    StaticLearningUnit,
    StaticPlaylistEntry,
)


@runtime_checkable
class PlaylistStrategy(Protocol):
    """Interface that all playlist strategies implement."""

    def resolve_next(self, context: PlaylistContext) -> PlaylistDecision:
        """Given the current context, decide what to do next."""
        ...


def _current_static_unit(context: PlaylistContext) -> Optional[StaticLearningUnit]:
    entry = context.current_entry
    if isinstance(entry, StaticPlaylistEntry):
        return entry.lu
    return None


def _gate_config(lu: StaticLearningUnit) -> Optional[GateConfig]:
    """Gate config for a unit that acts as a gate, else None."""
    if lu.adaptive is None or not lu.adaptive.is_gate:
        return None
    return lu.adaptive.gate_config


def _retries_remaining(config: GateConfig, attempts_used: int) -> bool:
    return config.has_unlimited_retries or attempts_used < config.max_retries


class StaticStrategy:
    """Walk the playlist in order. Completes at the last entry."""

    def resolve_next(self, context: PlaylistContext) -> PlaylistDecision:
        if context.is_at_end:
            return CompleteDecision()
        return AdvanceDecision()


class GuidedStrategy:
    """
    Respect gates without injecting content.

    A gate holds until attempted, advances once passed, retries while
    retries remain, and then applies its fail strategy. Anything other than
    ``allow-continue`` degrades to a hold here.
    """

    def resolve_next(self, context: PlaylistContext) -> PlaylistDecision:
        if context.is_at_end:
            return CompleteDecision()

        lu = _current_static_unit(context)
        if lu is None:
            return AdvanceDecision()

        config = _gate_config(lu)
        if config is None:
            return AdvanceDecision()

        return self.resolve_gate(context, lu, config)

    def resolve_gate(
        self,
        context: PlaylistContext,
        lu: StaticLearningUnit,
        config: GateConfig,
    ) -> PlaylistDecision:
        """
        Decide for a gate unit.

        Only the latest attempt counts for pass/fail; every attempt counts
        toward the retry limit.
        """
        results = context.gate_results.get(lu.id, ())
        if not results:
            return HoldDecision(message=f"Complete the gate challenge '{lu.title}' to continue.")

        latest = results[-1]
        if latest.passed:
            return AdvanceDecision()

        if _retries_remaining(config, len(results)):
            return RetryDecision(lu_id=lu.id)

        return self.on_retries_exhausted(context, lu, config, latest)

    def on_retries_exhausted(
        self,
        context: PlaylistContext,
        lu: StaticLearningUnit,
        config: GateConfig,
        latest: GateResult,
    ) -> PlaylistDecision:
        if config.fail_strategy == GateFailStrategy.ALLOW_CONTINUE:
            return AdvanceDecision()
        return HoldDecision(
            message=f"'{lu.title}' was not passed and no retries remain. Ask your instructor to continue."
        )


class FullStrategy(GuidedStrategy):
    """
    Guided gate logic plus skip and remediation injection.

    Skippable non-gate units are skipped when every node they teach is at or
    above the fixed 70% mastery threshold. Exhausted gates inject practice
    or review entries according to their fail strategy.
    """

    def __init__(self, router: Optional[RemediationRouter] = None):
        self.router = router or RemediationRouter()

    def resolve_next(self, context: PlaylistContext) -> PlaylistDecision:
        if context.is_at_end:
            return CompleteDecision()

        lu = _current_static_unit(context)
        if lu is None:
            return AdvanceDecision()

        if self._can_skip(lu, context):
            return SkipDecision(
                reason=f"All taught nodes are mastered at or above the "
                f"{SKIP_MASTERY_THRESHOLD:.0%} threshold"
            )

        config = _gate_config(lu)
        if config is None:
            return AdvanceDecision()

        return self.resolve_gate(context, lu, config)

    def on_retries_exhausted(
        self,
        context: PlaylistContext,
        lu: StaticLearningUnit,
        config: GateConfig,
        latest: GateResult,
    ) -> PlaylistDecision:
        if config.fail_strategy in (
            GateFailStrategy.INJECT_PRACTICE,
            GateFailStrategy.PRESCRIBE_REVIEW,
        ):
            entries = self.router.plan(
                lu, config.fail_strategy, latest.failed_nodes, context.static_sequence
            )
            if not entries:
                return AdvanceDecision()
            return InjectDecision(entries=tuple(entries))

        return super().on_retries_exhausted(context, lu, config, latest)

    @staticmethod
    def _can_skip(lu: StaticLearningUnit, context: PlaylistContext) -> bool:
        adaptive = lu.adaptive
        if adaptive is None or adaptive.is_gate or not adaptive.is_skippable:
            return False
        return all_nodes_mastered(adaptive.teaches_nodes, context.node_progress)


def get_strategy(mode: AdaptiveMode | str | None) -> PlaylistStrategy:
    """
    Get the strategy for a course adaptive mode.

    Unknown or missing modes fall back to the static strategy.
    """
    strategies = {
        AdaptiveMode.OFF: StaticStrategy,
        AdaptiveMode.GUIDED: GuidedStrategy,
        AdaptiveMode.FULL: FullStrategy,
    }
    try:
        key = AdaptiveMode(mode) if mode is not None else AdaptiveMode.OFF
    except ValueError:
        key = AdaptiveMode.OFF
    return strategies[key]()
