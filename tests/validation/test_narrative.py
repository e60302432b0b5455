"""
Tests for the combined narrative check and the constraint description.
"""

import pytest

from contentengine.core.models import Blueprint, IntentCategory
from contentengine.validation.narrative import (
    check_narrative,
    describe_narrative_constraints,
    resolve_cta_mode,
)

GROWTH_BEATS = ["hook", "pain", "solution", "payoff", "cta"]


def _blueprint(beats=GROWTH_BEATS, shot_seconds=2.0):
    shots = [
        {"shotId": f"s{i + 1}", "timeStart": i * shot_seconds,
         "timeEnd": (i + 1) * shot_seconds, "beat": beat}
        for i, beat in enumerate(beats)
    ]
    return Blueprint(format="reel_kit", durationSeconds=len(beats) * shot_seconds, shots=shots)


class TestCheckNarrative:
    def test_well_formed_growth_blueprint_passes(self):
        report = check_narrative(IntentCategory.GROWTH, _blueprint())
        assert report.passed is True
        assert report.summary() == ""

    def test_missing_payoff_fails(self):
        report = check_narrative(IntentCategory.GROWTH, _blueprint(["hook", "pain", "solution", "cta"]))
        assert report.passed is False
        assert "missing beats: payoff" in report.summary()

    def test_pacing_failure_fails_overall(self):
        report = check_narrative(IntentCategory.GROWTH, _blueprint(shot_seconds=3.5))
        assert report.beats.passed is True
        assert report.pacing.passed is False
        assert report.passed is False

    def test_rhythm_failure_fails_overall(self):
        blueprint = _blueprint()
        blueprint.shots[0].interrupt = "scene_change"
        report = check_narrative(IntentCategory.GROWTH, blueprint)
        assert report.rhythm.passed is False
        assert report.passed is False

    def test_to_dict(self):
        data = check_narrative("growth", _blueprint()).to_dict()
        assert data["intent"] == "growth"
        assert data["passed"] is True
        assert set(data) == {"intent", "passed", "beats", "pacing", "rhythm"}


class TestDescribeConstraints:
    def test_lists_beats_pacing_and_cta(self):
        text = describe_narrative_constraints(IntentCategory.LEAD_GEN)
        assert text.startswith("INTENT: lead_gen")
        assert "- mechanism: How the solution works" in text
        assert "PACING: max 6 shots, 1.6-3s per shot, max 20s total" in text
        assert "CTA MODE: dm" in text

    def test_optional_beats_shown(self):
        assert "OPTIONAL BEATS: proof" in describe_narrative_constraints(IntentCategory.GROWTH)


class TestResolveCtaMode:
    @pytest.mark.parametrize("intent,mode", [
        ("growth", "engage"), ("lead_gen", "dm"), ("authority", "soft"),
        ("education", "follow"), ("conversion", "book"),
    ])
    def test_defaults(self, intent, mode):
        assert resolve_cta_mode(intent) == mode

    def test_explicit_wins(self):
        assert resolve_cta_mode("growth", "link") == "link"

    def test_unknown_intent_is_soft(self):
        assert resolve_cta_mode("viral") == "soft"
