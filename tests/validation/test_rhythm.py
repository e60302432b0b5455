"""
Tests for edit rhythm.
"""

from contentengine.core.models import IntentCategory, Shot
from contentengine.validation.rhythm import check_edit_rhythm, required_interrupts


def _shots(count, interrupts=None):
    interrupts = interrupts or {}
    return [
        Shot(shotId=f"s{i}", timeStart=i * 2, timeEnd=i * 2 + 2, interrupt=interrupts.get(i))
        for i in range(count)
    ]


class TestRequiredInterrupts:
    def test_rounds_up(self):
        assert required_interrupts(IntentCategory.GROWTH, 10) == 3

    def test_no_float_overshoot(self):
        # 15 * 0.2 is 3.0000000000000004 in floating point
        assert required_interrupts(IntentCategory.LEAD_GEN, 15) == 3
        assert required_interrupts(IntentCategory.AUTHORITY, 20) == 4


class TestCheckEditRhythm:
    def test_cuts_count_as_interrupts(self):
        report = check_edit_rhythm(IntentCategory.GROWTH, _shots(5), 10)
        assert report.passed is True
        assert report.interrupt_count == 4

    def test_not_enough_cuts(self):
        report = check_edit_rhythm(IntentCategory.GROWTH, _shots(3), 16)
        assert report.passed is False
        assert report.required == 4
        assert report.issue == "Need 4 interrupts, have 2"

    def test_explicit_markers_replace_cut_count(self):
        shots = _shots(5, {0: "scene_change"})
        report = check_edit_rhythm(IntentCategory.GROWTH, shots, 10)
        assert report.interrupt_count == 1
        assert report.passed is False

    def test_single_shot_has_no_interrupts(self):
        report = check_edit_rhythm(IntentCategory.GROWTH, _shots(1), 2)
        assert report.interrupt_count == 0
        assert report.passed is False
