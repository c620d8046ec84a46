"""
Core Mastery Module.

Helpers for reading per-node mastery. The engine never computes mastery
itself; scores arrive from the caller as NodeProgress values.

Design:
- MasteryBand: where a node sits relative to the skip threshold (CLI display)
- all_nodes_mastered: fail-closed threshold check used by the skip rule
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum

from playlist_engine.core.models import SKIP_MASTERY_THRESHOLD, NodeProgress


class MasteryBand(str, Enum):
    """Position of a node's mastery relative to the skip threshold."""

    UNSEEN = "unseen"  # No attempts recorded
    BELOW_SKIP = "below_skip"  # Skippable units teaching it are still shown
    SKIPPABLE = "skippable"  # At or above the threshold

    @classmethod
    def for_progress(
        cls,
        progress: NodeProgress,
        threshold: float = SKIP_MASTERY_THRESHOLD,
    ) -> MasteryBand:
        if progress.attempts == 0 and progress.mastery == 0:
            return cls.UNSEEN
        if progress.mastery >= threshold:
            return cls.SKIPPABLE
        return cls.BELOW_SKIP

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryBand.UNSEEN: "dim",
            MasteryBand.BELOW_SKIP: "yellow",
            MasteryBand.SKIPPABLE: "green",
        }[self]


def all_nodes_mastered(
    node_ids: Iterable[str],
    node_progress: Mapping[str, NodeProgress],
    threshold: float = SKIP_MASTERY_THRESHOLD,
) -> bool:
    """
    Check that every node is at or above the mastery threshold.

    An empty node list, or any node without recorded progress, is never
    considered mastered.

    Args:
        node_ids: Knowledge nodes to check
        node_progress: Learner progress keyed by node id
        threshold: Minimum mastery (inclusive)

    Returns:
        True only if there is at least one node and all of them qualify
    """
    nodes = list(node_ids)
    if not nodes:
        return False

    for node_id in nodes:
        progress = node_progress.get(node_id)
        if progress is None or progress.mastery < threshold:
            return False
    return True
