"""
Unit tests for mastery helpers.
"""

import pytest
from pydantic import ValidationError

from playlist_engine.core.mastery import MasteryBand, all_nodes_mastered
from playlist_engine.core.models import NodeProgress


class TestMasteryBand:
    @pytest.mark.parametrize("mastery, attempts, band", [
        (0.0, 0, MasteryBand.UNSEEN),
        (0.0, 2, MasteryBand.BELOW_SKIP),
        (0.5, 3, MasteryBand.BELOW_SKIP),
        (0.69, 4, MasteryBand.BELOW_SKIP),
        (0.7, 4, MasteryBand.SKIPPABLE),
        (1.0, 9, MasteryBand.SKIPPABLE),
    ])
    def test_for_progress(self, mastery, attempts, band):
        assert MasteryBand.for_progress(NodeProgress(mastery=mastery, attempts=attempts)) == band

    def test_custom_threshold(self):
        progress = NodeProgress(mastery=0.8, attempts=2)
        assert MasteryBand.for_progress(progress, threshold=0.9) == MasteryBand.BELOW_SKIP

    def test_every_band_has_a_color(self):
        assert all(band.color for band in MasteryBand)


class TestNodeProgressBounds:
    @pytest.mark.parametrize("mastery", [0.0, 0.5, 1.0])
    def test_accepts_unit_interval(self, mastery):
        assert NodeProgress(mastery=mastery).mastery == mastery

    @pytest.mark.parametrize("mastery", [85, 1.01, -0.1])
    def test_rejects_mastery_outside_unit_interval(self, mastery):
        with pytest.raises(ValidationError):
            NodeProgress(mastery=mastery)

    def test_rejects_negative_attempts(self):
        with pytest.raises(ValidationError):
            NodeProgress(mastery=0.5, attempts=-1)


class TestAllNodesMastered:
    def test_all_at_threshold(self):
        progress = {"a": NodeProgress(mastery=0.7), "b": NodeProgress(mastery=0.95)}
        assert all_nodes_mastered(["a", "b"], progress) is True

    def test_one_below_threshold(self):
        progress = {"a": NodeProgress(mastery=0.69), "b": NodeProgress(mastery=0.95)}
        assert all_nodes_mastered(["a", "b"], progress) is False

    def test_missing_node_fails_closed(self):
        assert all_nodes_mastered(["a", "b"], {"a": NodeProgress(mastery=1.0)}) is False

    def test_empty_node_list_fails_closed(self):
        assert all_nodes_mastered([], {"a": NodeProgress(mastery=1.0)}) is False

    def test_custom_threshold(self):
        assert all_nodes_mastered(["a"], {"a": NodeProgress(mastery=0.85)}, threshold=0.9) is False
