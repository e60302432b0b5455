"""
Edit rhythm: minimum pattern-interrupt density per intent category.

Explicit per-shot interrupt markers are counted when present; otherwise
every cut counts as one interrupt.
"""

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from ..core.models import IntentCategory, Shot

PATTERN_INTERRUPTS = ("scene_change", "camera_change", "text_shift", "sound_hit", "speed_ramp")


@dataclass(frozen=True)
class RhythmConstraints:
    min_interrupts_per_second: float
    allowed: tuple


RHYTHM_BY_INTENT: Dict[IntentCategory, RhythmConstraints] = {
    IntentCategory.GROWTH: RhythmConstraints(0.25, PATTERN_INTERRUPTS),
    IntentCategory.LEAD_GEN: RhythmConstraints(
        0.2, ("scene_change", "camera_change", "text_shift", "sound_hit")),
    IntentCategory.AUTHORITY: RhythmConstraints(
        0.16, ("scene_change", "camera_change", "text_shift")),
    IntentCategory.EDUCATION: RhythmConstraints(
        0.2, ("scene_change", "text_shift", "sound_hit")),
    IntentCategory.CONVERSION: RhythmConstraints(0.25, PATTERN_INTERRUPTS),
}


@dataclass
class RhythmReport:
    passed: bool
    interrupt_count: int
    required: int
    issue: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def required_interrupts(intent: IntentCategory, total_seconds: float) -> int:
    rate = RHYTHM_BY_INTENT[IntentCategory(intent)].min_interrupts_per_second
    # round first so 15 * 0.2 (3.0000000000000004) stays 3
    return math.ceil(round(total_seconds * rate, 6))


def check_edit_rhythm(intent: IntentCategory, shots: List[Shot],
                      total_seconds: float) -> RhythmReport:
    required = required_interrupts(intent, total_seconds)
    explicit = sum(1 for shot in shots if shot.interrupt)
    count = explicit or max(len(shots) - 1, 0)

    if count < required:
        return RhythmReport(
            passed=False,
            interrupt_count=count,
            required=required,
            issue=f"Need {required} interrupts, have {count}",
        )
    return RhythmReport(passed=True, interrupt_count=count, required=required)
