"""
Validation gates and narrative-structure checks
"""

from .rules import MandatoryRules, DEFAULT_MANDATORY_RULES, rules_from_brief
from .gates import GateResult, check_before_generation, check_generated_asset
from .blueprint import BlueprintValidation, validate_blueprint
from .narrative import NarrativeReport, check_narrative

__all__ = [
    'MandatoryRules',
    'DEFAULT_MANDATORY_RULES',
    'rules_from_brief',
    'GateResult',
    'check_before_generation',
    'check_generated_asset',
    'BlueprintValidation',
    'validate_blueprint',
    'NarrativeReport',
    'check_narrative',
]
