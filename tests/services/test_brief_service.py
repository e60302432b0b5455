"""
Tests for brief presets, defaults and the brief cache key.
"""

from unittest.mock import MagicMock

import pytest

from contentengine.core.models import CompactCreativeBrief
from contentengine.services.brief_service import (
    BRIEF_PRESETS,
    DEFAULT_PRESET,
    MANDATORY_BRIEF_RULES,
    BriefService,
    apply_brief_defaults,
    compute_brief_key,
    get_preset,
    list_presets,
)


class TestPresets:
    def test_known_preset(self):
        brief = get_preset("energetic_promo_v1")
        assert brief.concept == "High-energy product promotion"
        assert "fast pacing" in brief.rules

    def test_unknown_preset_falls_back_to_default(self):
        assert get_preset("nope") == get_preset(DEFAULT_PRESET)
        assert get_preset(None).concept == "Premium brand showcase"

    def test_list_presets(self):
        ids = [p["id"] for p in list_presets()]
        assert ids == list(BRIEF_PRESETS)
        assert len(ids) == 5


class TestApplyBriefDefaults:
    def test_mandatory_rules_first_without_duplicates(self):
        brief = CompactCreativeBrief(rules=["show faces", "text every shot"])
        result = apply_brief_defaults(brief)
        assert result.rules == MANDATORY_BRIEF_RULES + ["show faces"]

    def test_original_untouched(self):
        brief = CompactCreativeBrief(rules=["show faces"])
        apply_brief_defaults(brief)
        assert brief.rules == ["show faces"]


class TestComputeBriefKey:
    def test_known_values(self):
        assert compute_brief_key("nablinds", "awareness", "motorized shades") == "5f80013ae4689dc7"
        assert compute_brief_key("acme") == "235eba365c23212d"

    def test_none_fields_omitted(self):
        assert compute_brief_key("acme", None, None) == compute_brief_key("acme")

    def test_length_and_stability(self):
        key = compute_brief_key("acme", "growth", "windows", "homeowners", "calm")
        assert len(key) == 16
        assert key == compute_brief_key("acme", "growth", "windows", "homeowners", "calm")
        assert key != compute_brief_key("acme", "growth", "windows", "homeowners", "loud")


class TestBriefService:
    @pytest.mark.asyncio
    async def test_cache_round_trip_calls(self):
        supabase = MagicMock()
        service = BriefService(supabase=supabase)
        brief = get_preset(DEFAULT_PRESET)

        await service.cache("abc", brief)
        row = supabase.table.return_value.upsert.call_args[0][0]
        assert row["brief_key"] == "abc"
        assert row["brief"]["intentCategory"] == "growth"
        assert supabase.table.return_value.upsert.call_args[1] == {"on_conflict": "brief_key"}

        supabase.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"brief": row["brief"]}]
        )
        assert await service.get_cached("abc") == brief

    @pytest.mark.asyncio
    async def test_cache_miss(self):
        supabase = MagicMock()
        supabase.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(data=[])
        assert await BriefService(supabase=supabase).get_cached("abc") is None

    @pytest.mark.asyncio
    async def test_unreadable_cached_brief_is_a_miss(self):
        supabase = MagicMock()
        supabase.table.return_value.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"brief": {"intentCategory": "virality"}}]
        )
        assert await BriefService(supabase=supabase).get_cached("abc") is None
