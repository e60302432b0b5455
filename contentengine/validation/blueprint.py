"""
Full blueprint validation (all-or-nothing).

Combines timeline structure, the shot contract, Gate A for every shot and
the narrative checks. A single failing shot blocks the whole blueprint.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.models import Blueprint, CompactCreativeBrief, IntentCategory
from .gates import (
    ContractViolation,
    GateResult,
    ShotContract,
    check_before_generation,
    check_shot_contract,
    check_timeline,
)
from .narrative import NarrativeReport, check_narrative
from .rules import MandatoryRules, rules_from_brief


@dataclass
class BlueprintValidation:
    intent: IntentCategory
    rules: MandatoryRules
    timeline: List[ContractViolation] = field(default_factory=list)
    contract: List[ContractViolation] = field(default_factory=list)
    gate_failures: List[GateResult] = field(default_factory=list)
    narrative: Optional[NarrativeReport] = None

    @property
    def passed(self) -> bool:
        narrative_ok = self.narrative is None or self.narrative.passed
        return not (self.timeline or self.contract or self.gate_failures) and narrative_ok

    @property
    def fatal(self) -> bool:
        """True when a failure cannot be fixed by regenerating shots."""
        if self.timeline or self.contract:
            return True
        if self.narrative is not None and not self.narrative.passed:
            return True
        return any(not failure.can_retry for failure in self.gate_failures)

    @property
    def retryable_shot_ids(self) -> List[str]:
        return [f.shot_id for f in self.gate_failures if f.can_retry and f.shot_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "intent": self.intent.value,
            "timeline": [v.to_dict() for v in self.timeline],
            "contract": [v.to_dict() for v in self.contract],
            "gate_failures": [g.to_dict() for g in self.gate_failures],
            "narrative": self.narrative.to_dict() if self.narrative else None,
        }


def validate_blueprint(
    blueprint: Blueprint,
    brief: Optional[CompactCreativeBrief] = None,
    rules: Optional[MandatoryRules] = None,
    contract: Optional[ShotContract] = None,
    check_story: bool = True,
) -> BlueprintValidation:
    """
    Validate a blueprint before any provider cost is spent.

    Args:
        blueprint: Shot plan to validate
        brief: Creative brief (intent category and free-text rules)
        rules: Explicit rules; derived from the brief when omitted
        contract: Shot contract requirements
        check_story: Run beat/pacing/rhythm checks

    Returns:
        BlueprintValidation with every violation found
    """
    rules = rules or rules_from_brief(brief)
    intent = brief.intent_category if brief else IntentCategory.GROWTH
    contract = contract or ShotContract(require_on_screen_text=rules.require_on_screen_text)
    shots = blueprint.ordered_shots()

    result = BlueprintValidation(intent=intent, rules=rules)
    result.timeline = check_timeline(blueprint.shots)
    result.contract = check_shot_contract(shots, contract)

    for shot in shots:
        gate = check_before_generation(shot, rules)
        if not gate.passed:
            result.gate_failures.append(gate)

    if check_story:
        result.narrative = check_narrative(intent, blueprint)

    return result
