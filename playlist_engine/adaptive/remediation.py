"""
Remediation Router.

Builds the remediation entries injected into a playlist after a learner
exhausts the retries on a gate.

Two remediation styles:
1. Practice - a synthetic question set on the failed knowledge nodes
2. Review   - revisit existing teaching units that cover the failed nodes

Entry ids are derived from the entry content, so the same remediation for
the same gate always gets the same id.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from typing import Optional

from loguru import logger

from playlist_engine.core.models import (
    DEFAULT_PRACTICE_QUESTION_COUNT,
    GateFailStrategy,
    InjectedPracticeEntry,
    InjectedReviewEntry,
    PlaylistEntry,
    StaticLearningUnit,
)


def injected_entry_id(
    kind: str,
    gate_lu_id: str,
    target_node_ids: Sequence[str],
    reference_lu_id: Optional[str] = None,
) -> str:
    """
    Derive a stable id for an injected entry.

    Args:
        kind: "practice" or "review"
        gate_lu_id: Gate that triggered the remediation
        target_node_ids: Nodes the entry covers
        reference_lu_id: Reviewed unit (review entries only)

    Returns:
        Id like ``practice-gate-1-3f2a9c1b``
    """
    key = "|".join([kind, gate_lu_id, ",".join(target_node_ids), reference_lu_id or ""])
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:8]
    return f"{kind}-{gate_lu_id}-{digest}"


class RemediationRouter:
    """
    Route a failed gate to remediation content.

    Stateless; safe to share between strategy instances.
    """

    def __init__(self, question_count: int = DEFAULT_PRACTICE_QUESTION_COUNT):
        self.question_count = question_count

    def practice_for(
        self,
        gate: StaticLearningUnit,
        failed_nodes: Sequence[str],
    ) -> InjectedPracticeEntry:
        """Build one practice entry targeting exactly the failed nodes."""
        targets = tuple(failed_nodes)
        return InjectedPracticeEntry(
            entry_id=injected_entry_id("practice", gate.id, targets),
            title=f"Practice: {', '.join(targets)}",
            target_node_ids=targets,
            question_count=self.question_count,
        )

    def reviews_for(
        self,
        gate: StaticLearningUnit,
        failed_nodes: Sequence[str],
        static_sequence: Sequence[StaticLearningUnit],
    ) -> tuple[list[InjectedReviewEntry], list[str]]:
        """
        Find teaching units that re-cover the failed nodes.

        Scans the static sequence in order. Each unit that teaches at least
        one still-uncovered node yields one review entry for that overlap.
        Scanning stops once every failed node is covered.

        Args:
            gate: The failed gate (never prescribed as its own review)
            failed_nodes: Nodes below threshold on the latest attempt
            static_sequence: The module's units in sequence order

        Returns:
            Tuple of (review entries, nodes left uncovered)
        """
        uncovered = list(dict.fromkeys(failed_nodes))
        reviews: list[InjectedReviewEntry] = []

        for lu in static_sequence:
            if not uncovered:
                break
            if lu.id == gate.id:
                continue

            taught = set(lu.teaches_nodes)
            overlap = [node for node in uncovered if node in taught]
            if not overlap:
                continue

            reviews.append(InjectedReviewEntry(
                entry_id=injected_entry_id("review", gate.id, overlap, lu.id),
                title=f"Review: {lu.title}",
                reference_lu_id=lu.id,
                target_node_ids=tuple(overlap),
            ))
            uncovered = [node for node in uncovered if node not in taught]

        return reviews, uncovered

    def plan(
        self,
        gate: StaticLearningUnit,
        fail_strategy: GateFailStrategy,
        failed_nodes: Sequence[str],
        static_sequence: Sequence[StaticLearningUnit],
    ) -> list[PlaylistEntry]:
        """
        Build the entries to inject for an exhausted gate.

        An empty list means there is nothing to remediate.
        """
        if not failed_nodes:
            return []

        if fail_strategy == GateFailStrategy.INJECT_PRACTICE:
            return [self.practice_for(gate, failed_nodes)]

        if fail_strategy == GateFailStrategy.PRESCRIBE_REVIEW:
            reviews, uncovered = self.reviews_for(gate, failed_nodes, static_sequence)
            if not reviews:
                logger.debug(f"No teaching unit covers {list(failed_nodes)}; falling back to practice")
                return [self.practice_for(gate, failed_nodes)]

            entries: list[PlaylistEntry] = list(reviews)
            if uncovered:
                entries.append(self.practice_for(gate, uncovered))
            return entries

        return []
