"""
Mandatory content rules derived from a creative brief.

Rules start from an all-on baseline; the brief's free-text rules are
keyword-matched onto the four flags. Matching only ever turns a flag on.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple

from ..core.models import CompactCreativeBrief


@dataclass(frozen=True)
class MandatoryRules:
    must_have_video_url: bool = True
    reject_image_outputs: bool = True
    reject_blank_frames: bool = True
    require_on_screen_text: bool = True


DEFAULT_MANDATORY_RULES = MandatoryRules()

# Still images: no clip, text or blank-frame requirements apply
IMAGE_OUTPUT_RULES = MandatoryRules(
    must_have_video_url=False,
    reject_image_outputs=False,
    reject_blank_frames=False,
    require_on_screen_text=False,
)

# Single generated clip (no blueprint, so no per-shot text)
SINGLE_CLIP_RULES = MandatoryRules(
    must_have_video_url=True,
    reject_image_outputs=True,
    reject_blank_frames=False,
    require_on_screen_text=False,
)

RULE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "must_have_video_url": ("real video", "must have video"),
    "reject_blank_frames": ("no blank", "no solid color"),
    "require_on_screen_text": ("text every shot", "require text"),
    "reject_image_outputs": ("no image", "video only"),
}


def parse_rule_flags(rules: Iterable[str]) -> Dict[str, bool]:
    """Flags switched on by keyword matches in free-text rules."""
    parsed: Dict[str, bool] = {}
    for rule in rules:
        lower = rule.lower()
        for flag, keywords in RULE_KEYWORDS.items():
            if any(keyword in lower for keyword in keywords):
                parsed[flag] = True
    return parsed


def rules_from_brief(brief: Optional[CompactCreativeBrief],
                     baseline: MandatoryRules = DEFAULT_MANDATORY_RULES) -> MandatoryRules:
    if brief is None:
        return baseline
    return replace(baseline, **parse_rule_flags(brief.rules))
