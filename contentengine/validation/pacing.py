"""
Pacing constraints per intent category: shot count, per-shot duration
bounds and total runtime (end of the last shot).
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from ..core.models import IntentCategory, Shot


@dataclass(frozen=True)
class PacingConstraints:
    max_shots: int
    min_shot_sec: float
    max_shot_sec: float
    max_total_sec: float


PACING_BY_INTENT: Dict[IntentCategory, PacingConstraints] = {
    IntentCategory.GROWTH: PacingConstraints(6, 1.5, 2.8, 20),
    IntentCategory.LEAD_GEN: PacingConstraints(6, 1.6, 3.0, 20),
    IntentCategory.AUTHORITY: PacingConstraints(6, 1.8, 3.0, 20),
    IntentCategory.EDUCATION: PacingConstraints(6, 1.6, 3.0, 22),
    IntentCategory.CONVERSION: PacingConstraints(6, 1.4, 2.6, 18),
}


def fmt_seconds(value: float) -> str:
    """Render a measurement without float noise (2.6 - 1.2 -> '1.4')."""
    return f"{round(value, 3):g}"


@dataclass
class PacingIssue:
    message: str
    shot_id: Optional[str] = None
    measured: Optional[float] = None
    limit: Optional[float] = None


@dataclass
class PacingReport:
    passed: bool
    issues: List[PacingIssue] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def check_pacing(intent: IntentCategory, shots: List[Shot]) -> PacingReport:
    rules = PACING_BY_INTENT[IntentCategory(intent)]
    issues: List[PacingIssue] = []

    if not shots:
        return PacingReport(passed=False, issues=[PacingIssue("No shots")])

    if len(shots) > rules.max_shots:
        issues.append(PacingIssue(
            f"{len(shots)} shots > {rules.max_shots} max",
            measured=len(shots), limit=rules.max_shots,
        ))

    total = shots[-1].time_end
    if total > rules.max_total_sec:
        issues.append(PacingIssue(
            f"{fmt_seconds(total)}s > {fmt_seconds(rules.max_total_sec)}s max",
            measured=total, limit=rules.max_total_sec,
        ))

    for shot in shots:
        duration = round(shot.duration, 3)
        if duration < rules.min_shot_sec:
            issues.append(PacingIssue(
                f"{shot.shot_id}: {fmt_seconds(duration)}s < {fmt_seconds(rules.min_shot_sec)}s min",
                shot_id=shot.shot_id, measured=duration, limit=rules.min_shot_sec,
            ))
        if duration > rules.max_shot_sec:
            issues.append(PacingIssue(
                f"{shot.shot_id}: {fmt_seconds(duration)}s > {fmt_seconds(rules.max_shot_sec)}s max",
                shot_id=shot.shot_id, measured=duration, limit=rules.max_shot_sec,
            ))

    return PacingReport(passed=not issues, issues=issues)
