"""
Narrative-structure checks over a full blueprint: beat coverage, pacing and
edit rhythm. All three must pass.

Also renders the same constraints as text for the upstream blueprint
producer, together with the call-to-action mode for the intent.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.models import Blueprint, IntentCategory
from .beats import BEAT_DESCRIPTIONS, OPTIONAL_BEATS, REQUIRED_BEATS, BeatCoverage, check_beat_coverage
from .pacing import PACING_BY_INTENT, PacingReport, check_pacing, fmt_seconds
from .rhythm import RHYTHM_BY_INTENT, RhythmReport, check_edit_rhythm

DEFAULT_CTA_MODE_BY_INTENT: Dict[IntentCategory, str] = {
    IntentCategory.GROWTH: "engage",
    IntentCategory.LEAD_GEN: "dm",
    IntentCategory.AUTHORITY: "soft",
    IntentCategory.EDUCATION: "follow",
    IntentCategory.CONVERSION: "book",
}

CTA_EXAMPLES: Dict[str, List[str]] = {
    "engage": ["Save this", "Share with someone", "Comment below", "Double tap"],
    "dm": ["DM 'START'", "DM me for access", "Send me a message"],
    "link": ["Link in bio", "Tap to shop", "Get yours now"],
    "follow": ["Follow for more", "Follow for part 2", "Don't miss the next one"],
    "soft": ["Learn more in bio", "We build systems like this", "This is what we do"],
    "book": ["Book a call", "Schedule your demo", "Grab your slot"],
}


def resolve_cta_mode(intent: Any, explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit
    try:
        return DEFAULT_CTA_MODE_BY_INTENT[IntentCategory(intent)]
    except ValueError:
        return "soft"


@dataclass
class NarrativeReport:
    intent: IntentCategory
    beats: BeatCoverage
    pacing: PacingReport
    rhythm: RhythmReport

    @property
    def passed(self) -> bool:
        return self.beats.passed and self.pacing.passed and self.rhythm.passed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent.value,
            "passed": self.passed,
            "beats": self.beats.to_dict(),
            "pacing": self.pacing.to_dict(),
            "rhythm": self.rhythm.to_dict(),
        }

    def summary(self) -> str:
        parts = []
        if not self.beats.passed:
            parts.append(f"missing beats: {', '.join(self.beats.missing)}")
        parts.extend(self.pacing.messages)
        if self.rhythm.issue:
            parts.append(self.rhythm.issue)
        return "; ".join(parts)


def check_narrative(intent: IntentCategory, blueprint: Blueprint) -> NarrativeReport:
    intent = IntentCategory(intent)
    shots = blueprint.ordered_shots()
    return NarrativeReport(
        intent=intent,
        beats=check_beat_coverage(intent, shots),
        pacing=check_pacing(intent, shots),
        rhythm=check_edit_rhythm(intent, shots, blueprint.duration_seconds),
    )


def describe_narrative_constraints(intent: IntentCategory) -> str:
    """Constraint text handed to whoever writes the blueprint."""
    intent = IntentCategory(intent)
    pacing = PACING_BY_INTENT[intent]
    rhythm = RHYTHM_BY_INTENT[intent]
    required = REQUIRED_BEATS[intent]
    optional = OPTIONAL_BEATS.get(intent, [])
    cta_mode = resolve_cta_mode(intent)

    lines = [f"INTENT: {intent.value}", "REQUIRED BEATS:"]
    lines.extend(f"- {beat}: {BEAT_DESCRIPTIONS.get(beat, '')}" for beat in required)
    if optional:
        lines.append(f"OPTIONAL BEATS: {', '.join(optional)}")
    lines.extend([
        f"PACING: max {pacing.max_shots} shots, "
        f"{fmt_seconds(pacing.min_shot_sec)}-{fmt_seconds(pacing.max_shot_sec)}s per shot, "
        f"max {fmt_seconds(pacing.max_total_sec)}s total",
        f"RHYTHM: at least {rhythm.min_interrupts_per_second:g} pattern interrupts per second "
        f"({', '.join(rhythm.allowed)})",
        f"CTA MODE: {cta_mode} (e.g. {CTA_EXAMPLES[cta_mode][0]})",
    ])
    return "\n".join(lines)
