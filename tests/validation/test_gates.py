"""
Tests for Gate A, Gate B, the probe check, the shot contract and timeline checks.
"""

import pytest

from contentengine.core.models import Shot
from contentengine.services.ffmpeg_service import VideoProbe
from contentengine.validation.gates import (
    ShotContract,
    check_before_generation,
    check_generated_asset,
    check_probe,
    check_shot_contract,
    check_timeline,
)
from contentengine.validation.rules import DEFAULT_MANDATORY_RULES, IMAGE_OUTPUT_RULES, MandatoryRules


def _shot(shot_id="s1", start=0.0, end=2.0, text="Hello", **kwargs):
    data = {
        "shotId": shot_id,
        "timeStart": start,
        "timeEnd": end,
        "sceneDescription": kwargs.pop("scene", "Bright living room"),
        "visualSource": kwargs.pop("source", "generated"),
    }
    if text is not None:
        data["onScreenText"] = {"text": text}
    data.update(kwargs)
    return Shot(**data)


class TestGateA:
    """check_before_generation"""

    def test_passes_valid_shot(self):
        result = check_before_generation(_shot(), DEFAULT_MANDATORY_RULES)
        assert result.passed is True

    def test_missing_text_is_not_retryable(self):
        result = check_before_generation(_shot(text=None), DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is False
        assert result.reason == "Shot s1 missing required onScreenText"

    def test_whitespace_text_counts_as_missing(self):
        result = check_before_generation(_shot(text="   "), DEFAULT_MANDATORY_RULES)
        assert result.passed is False

    def test_solid_bg_with_real_video_rule_is_retryable(self):
        result = check_before_generation(_shot(source="solid_bg"), DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is True
        assert result.reason == "Shot s1 uses solid_bg but rules require real video"

    def test_missing_text_checked_first(self):
        result = check_before_generation(_shot(text=None, source="solid_bg"), DEFAULT_MANDATORY_RULES)
        assert result.can_retry is False

    def test_relaxed_rules_pass_solid_bg(self):
        rules = MandatoryRules(must_have_video_url=False)
        assert check_before_generation(_shot(source="solid_bg"), rules).passed is True


class TestGateB:
    """check_generated_asset"""

    def test_passes_video(self):
        result = check_generated_asset(_shot(), "https://x/clip.mp4", "video/mp4", DEFAULT_MANDATORY_RULES)
        assert result.passed is True

    def test_missing_url(self):
        result = check_generated_asset(_shot(), None, None, DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is True
        assert result.reason == "Shot s1 missing video URL"

    def test_image_content_type_rejected(self):
        result = check_generated_asset(_shot(), "https://x/a.png", "image/png", DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is True
        assert "returned image instead of video" in result.reason

    def test_image_rules_accept_image(self):
        result = check_generated_asset(_shot(text=None), "https://x/a.png", "image/png", IMAGE_OUTPUT_RULES)
        assert result.passed is True

    def test_missing_text_after_generation(self):
        result = check_generated_asset(_shot(text=None), "https://x/a.mp4", "video/mp4", DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is False


class TestCheckProbe:
    def test_good_clip_passes(self):
        probe = VideoProbe(has_video_stream=True, has_frames=True, duration=2.0)
        assert check_probe(_shot(), probe, DEFAULT_MANDATORY_RULES).passed is True

    def test_no_stream(self):
        probe = VideoProbe(has_video_stream=False, has_frames=False, duration=0.0)
        result = check_probe(_shot(), probe, DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert result.can_retry is True

    def test_no_frames(self):
        probe = VideoProbe(has_video_stream=True, has_frames=False, duration=2.0)
        result = check_probe(_shot(), probe, DEFAULT_MANDATORY_RULES)
        assert "no frames" in result.reason

    def test_too_short(self):
        probe = VideoProbe(has_video_stream=True, has_frames=True, duration=0.5)
        result = check_probe(_shot(end=2.0), probe, DEFAULT_MANDATORY_RULES)
        assert result.passed is False
        assert "0.5s < expected 1s" in result.reason

    def test_skipped_when_blank_frames_allowed(self):
        probe = VideoProbe(has_video_stream=False, has_frames=False, duration=0.0)
        rules = MandatoryRules(reject_blank_frames=False)
        assert check_probe(_shot(), probe, rules).passed is True


class TestShotContract:
    def test_complete_shot_has_no_violations(self):
        assert check_shot_contract([_shot()]) == []

    def test_collects_every_violation(self):
        shot = _shot(text=None, scene="Hi", videoPrompt="short")
        fields = [v.field for v in check_shot_contract([shot])]
        assert fields == ["videoPrompt", "onScreenText", "sceneDescription"]

    def test_required_prompt(self):
        contract = ShotContract(require_video_prompt=True)
        violations = check_shot_contract([_shot()], contract)
        assert [v.field for v in violations] == ["videoPrompt"]

    def test_long_prompt_accepted(self):
        contract = ShotContract(require_video_prompt=True)
        shot = _shot(videoPrompt="slow dolly across a sunlit room")
        assert check_shot_contract([shot], contract) == []

    @pytest.mark.parametrize("start,end", [(0, 0), (0, 61)])
    def test_duration_bounds(self, start, end):
        violations = check_shot_contract([_shot(start=start, end=end)])
        assert [v.field for v in violations] == ["duration"]

    def test_text_requirement_can_be_lifted(self):
        contract = ShotContract(require_on_screen_text=False)
        assert check_shot_contract([_shot(text=None)], contract) == []


class TestTimeline:
    def test_ordered_shots_pass(self):
        shots = [_shot("a", 0, 2), _shot("b", 2, 4), _shot("c", 5, 7)]
        assert check_timeline(shots) == []

    def test_overlap(self):
        violations = check_timeline([_shot("a", 0, 3), _shot("b", 2, 4)])
        assert len(violations) == 1
        assert violations[0].shot_id == "b"
        assert "overlaps shot a" in violations[0].reason

    def test_out_of_order(self):
        violations = check_timeline([_shot("a", 2, 4), _shot("b", 0, 1)])
        assert "starts before previous shot a" in violations[0].reason

    def test_zero_length(self):
        violations = check_timeline([_shot("a", 1, 1)])
        assert violations[0].field == "timeEnd"
