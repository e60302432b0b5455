"""
Brief Service - creative brief presets, defaults and caching.

Presets stand in for the upstream brief generator in testing mode. Cached
briefs are keyed by a short SHA1 of the inputs that produced them.
"""

import asyncio
import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from supabase import Client

from ..core.database import get_supabase_client
from ..core.models import CompactCreativeBrief

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "default_premium_reel_v1"

MANDATORY_BRIEF_RULES = ["must have real video", "no blank backgrounds", "text every shot"]

BRIEF_PRESETS: Dict[str, Dict[str, Any]] = {
    "default_premium_reel_v1": {
        "concept": "Premium brand showcase",
        "tone": "confident calm",
        "look": "cinematic real footage shallow DOF",
        "camera": "slow push-in dolly",
        "light": "soft key high contrast",
        "music": "modern cinematic build",
        "vo": "warm confident authority",
        "text": "minimal bold sans center",
        "rules": ["must have real video", "no blank backgrounds", "text every shot"],
    },
    "luxury_crm_v1": {
        "concept": "Luxury CRM infrastructure for professionals",
        "tone": "confident authority",
        "look": "cinematic real footage shallow DOF",
        "camera": "slow push-ins lateral dolly",
        "light": "moody warm highlights cool shadows",
        "music": "modern cinematic corporate build",
        "vo": "calm confident authority",
        "text": "minimal bold sans lower-third",
        "rules": ["must have real video", "no blank backgrounds", "text every shot", "match brand font"],
    },
    "energetic_promo_v1": {
        "concept": "High-energy product promotion",
        "tone": "exciting bold",
        "look": "vibrant saturated dynamic motion",
        "camera": "fast cuts tracking handheld",
        "light": "bright punchy dramatic",
        "music": "upbeat electronic drive",
        "vo": "energetic enthusiastic",
        "text": "bold impact large center",
        "rules": ["must have real video", "no blank backgrounds", "text every shot", "fast pacing"],
    },
    "minimal_elegant_v1": {
        "concept": "Minimalist elegant brand story",
        "tone": "refined subtle",
        "look": "clean minimal white space",
        "camera": "static slow pan",
        "light": "soft even natural",
        "music": "ambient atmospheric gentle",
        "vo": "soft warm intimate",
        "text": "thin elegant serif subtle",
        "rules": ["must have real video", "no blank backgrounds", "text every shot", "preserve white space"],
    },
    "testimonial_trust_v1": {
        "concept": "Customer testimonial trust builder",
        "tone": "authentic warm",
        "look": "natural documentary realistic",
        "camera": "steady medium close-up",
        "light": "natural window soft fill",
        "music": "gentle acoustic inspiring",
        "vo": "conversational genuine",
        "text": "clean readable lower-third",
        "rules": ["must have real video", "no blank backgrounds", "text every shot", "show faces"],
    },
}


def get_preset(preset_id: Optional[str]) -> CompactCreativeBrief:
    """Preset brief by id; unknown ids get the default premium reel preset."""
    data = BRIEF_PRESETS.get(preset_id or "")
    if data is None:
        if preset_id:
            logger.warning(f"Unknown brief preset '{preset_id}', using {DEFAULT_PRESET}")
        data = BRIEF_PRESETS[DEFAULT_PRESET]
    return CompactCreativeBrief(**data)


def list_presets() -> List[Dict[str, str]]:
    return [{"id": key, "concept": value["concept"]} for key, value in BRIEF_PRESETS.items()]


def apply_brief_defaults(brief: CompactCreativeBrief) -> CompactCreativeBrief:
    """Mandatory rules first, then the brief's own rules without duplicates."""
    rules = list(MANDATORY_BRIEF_RULES)
    for rule in brief.rules:
        if rule not in rules:
            rules.append(rule)
    return brief.model_copy(update={"rules": rules})


def compute_brief_key(
    brand_id: Optional[str],
    goal: Optional[str] = None,
    topic: Optional[str] = None,
    audience: Optional[str] = None,
    style: Optional[str] = None,
) -> str:
    """
    16-hex-char SHA1 of the brief inputs.

    Absent inputs are left out of the hashed JSON, and the JSON is compact,
    so keys match those written by other services sharing the cache table.
    """
    fields = {
        "brandId": brand_id,
        "goal": goal,
        "topic": topic,
        "audience": audience,
        "style": style,
    }
    encoded = json.dumps(
        {k: v for k, v in fields.items() if v is not None},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha1(encoded.encode("utf-8")).hexdigest()[:16]


class BriefService:
    """Creative brief cache backed by the creative_briefs table."""

    TABLE = "creative_briefs"

    def __init__(self, supabase: Optional[Client] = None):
        self.supabase = supabase or get_supabase_client()

    async def get_cached(self, brief_key: str) -> Optional[CompactCreativeBrief]:
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.TABLE)
            .select("brief")
            .eq("brief_key", brief_key)
            .execute()
        )
        if not result.data:
            return None
        try:
            return CompactCreativeBrief(**result.data[0]["brief"])
        except (TypeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable cached brief {brief_key}: {e}")
            return None

    async def cache(self, brief_key: str, brief: CompactCreativeBrief) -> None:
        row = {
            "brief_key": brief_key,
            "brief": brief.model_dump(mode="json", by_alias=True),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        await asyncio.to_thread(
            lambda: self.supabase.table(self.TABLE).upsert(row, on_conflict="brief_key").execute()
        )
        logger.info(f"Cached creative brief {brief_key}")
