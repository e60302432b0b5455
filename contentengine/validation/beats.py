"""
Beat coverage per intent category.

Beats can be reordered or combined across shots; only coverage counts.
"payoff" is required for every category.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List

from ..core.models import IntentCategory, Shot

REQUIRED_BEATS: Dict[IntentCategory, List[str]] = {
    IntentCategory.GROWTH: ["hook", "pain", "solution", "payoff", "cta"],
    IntentCategory.LEAD_GEN: ["hook", "problem", "mechanism", "payoff", "cta"],
    IntentCategory.AUTHORITY: ["hook", "pov", "proof", "payoff", "cta"],
    IntentCategory.EDUCATION: ["hook", "breakdown", "example", "payoff", "cta"],
    IntentCategory.CONVERSION: ["hook", "agitate", "solution", "proof", "payoff", "cta"],
}

OPTIONAL_BEATS: Dict[IntentCategory, List[str]] = {
    IntentCategory.GROWTH: ["proof"],
    IntentCategory.AUTHORITY: ["proof"],
    IntentCategory.EDUCATION: ["proof"],
}

BEAT_DESCRIPTIONS: Dict[str, str] = {
    "hook": "Pattern interrupt, attention grab",
    "pain": "Relatable problem or frustration",
    "problem": "Specific problem identification",
    "mechanism": "How the solution works",
    "solution": "The answer or fix",
    "proof": "Evidence, testimonial, result",
    "payoff": "Visual outcome (not explanation)",
    "cta": "Call to action",
    "pov": "Strong opinion or stance",
    "breakdown": "Step-by-step explanation",
    "example": "Concrete demonstration",
    "agitate": "Amplify the pain",
    "result": "End state or transformation",
}

GLOBAL_REQUIRED_BEAT = "payoff"


@dataclass
class BeatCoverage:
    passed: bool
    missing: List[str] = field(default_factory=list)
    present: List[str] = field(default_factory=list)
    has_payoff: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def check_beat_coverage(intent: IntentCategory, shots: Iterable[Shot]) -> BeatCoverage:
    intent = IntentCategory(intent)
    present: List[str] = []
    for shot in shots:
        if shot.beat and shot.beat not in present:
            present.append(shot.beat)

    must_have = list(REQUIRED_BEATS[intent])
    if GLOBAL_REQUIRED_BEAT not in must_have:
        must_have.append(GLOBAL_REQUIRED_BEAT)

    optional = set(OPTIONAL_BEATS.get(intent, []))
    missing = [b for b in must_have if b not in present and b not in optional]

    return BeatCoverage(
        passed=not missing,
        missing=missing,
        present=present,
        has_payoff=GLOBAL_REQUIRED_BEAT in present,
    )
