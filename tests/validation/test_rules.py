"""
Tests for mandatory rule parsing.
"""

from contentengine.core.models import CompactCreativeBrief
from contentengine.validation.rules import (
    DEFAULT_MANDATORY_RULES,
    IMAGE_OUTPUT_RULES,
    MandatoryRules,
    parse_rule_flags,
    rules_from_brief,
)


class TestParseRuleFlags:
    def test_keywords_map_to_flags(self):
        flags = parse_rule_flags([
            "Every shot must have real video",
            "No blank frames please",
            "Put text every shot",
            "Video only, no image stills",
        ])
        assert flags == {
            "must_have_video_url": True,
            "reject_blank_frames": True,
            "require_on_screen_text": True,
            "reject_image_outputs": True,
        }

    def test_matching_is_case_insensitive(self):
        assert parse_rule_flags(["REAL VIDEO"]) == {"must_have_video_url": True}

    def test_unrelated_rules_match_nothing(self):
        assert parse_rule_flags(["Keep it warm", "Use the brand palette"]) == {}

    def test_no_solid_color_counts_as_blank_rule(self):
        assert parse_rule_flags(["no solid color cards"]) == {"reject_blank_frames": True}


class TestRulesFromBrief:
    def test_no_brief_returns_baseline(self):
        assert rules_from_brief(None) is DEFAULT_MANDATORY_RULES

    def test_defaults_are_all_on(self):
        rules = rules_from_brief(CompactCreativeBrief(rules=[]))
        assert rules == MandatoryRules(True, True, True, True)

    def test_brief_can_only_turn_flags_on(self):
        rules = rules_from_brief(CompactCreativeBrief(rules=["require text"]), baseline=IMAGE_OUTPUT_RULES)
        assert rules.require_on_screen_text is True
        assert rules.must_have_video_url is False
        assert rules.reject_image_outputs is False
