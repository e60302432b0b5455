"""
Validation gates for shots and generated assets.

Gate A runs before any provider cost is spent; Gate B runs on what the
provider returned. Every check is a pure function. can_retry is advisory:
it recommends regenerating the shot, the worker decides whether to.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional

from ..core.models import Shot
from .rules import MandatoryRules


@dataclass
class GateResult:
    passed: bool
    reason: Optional[str] = None
    can_retry: bool = False
    shot_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


PASS = GateResult(passed=True)


def _missing_text(shot: Shot) -> GateResult:
    return GateResult(
        passed=False,
        reason=f"Shot {shot.shot_id} missing required onScreenText",
        can_retry=False,
        shot_id=shot.shot_id,
    )


def check_before_generation(shot: Shot, rules: MandatoryRules) -> GateResult:
    """Gate A: structural checks on the shot plan."""
    if rules.require_on_screen_text and not shot.text:
        return _missing_text(shot)

    if rules.must_have_video_url and shot.visual_source == "solid_bg":
        return GateResult(
            passed=False,
            reason=f"Shot {shot.shot_id} uses solid_bg but rules require real video",
            can_retry=True,
            shot_id=shot.shot_id,
        )

    return PASS


def check_generated_asset(
    shot: Shot,
    asset_url: Optional[str],
    content_type: Optional[str],
    rules: MandatoryRules,
) -> GateResult:
    """Gate B: checks on the provider's returned asset."""
    if rules.must_have_video_url and not asset_url:
        return GateResult(
            passed=False,
            reason=f"Shot {shot.shot_id} missing video URL",
            can_retry=True,
            shot_id=shot.shot_id,
        )

    if rules.reject_image_outputs and content_type and content_type.startswith("image/"):
        return GateResult(
            passed=False,
            reason=f"Shot {shot.shot_id} returned image instead of video",
            can_retry=True,
            shot_id=shot.shot_id,
        )

    if rules.require_on_screen_text and not shot.text:
        return _missing_text(shot)

    return PASS


def check_probe(shot: Shot, probe: Any, rules: MandatoryRules) -> GateResult:
    """
    Gate B media check on a downloaded clip (ffprobe result).

    A clip with no video stream, no frames, or under half the shot window
    counts as blank output.
    """
    if not rules.reject_blank_frames:
        return PASS

    reason = None
    if not probe.has_video_stream:
        reason = probe.error or "no video stream in asset"
    elif not probe.has_frames:
        reason = "video has no frames (blank/corrupted)"
    elif probe.duration < shot.duration * 0.5:
        reason = f"video duration {probe.duration:g}s < expected {shot.duration * 0.5:g}s"

    if reason is None:
        return PASS
    return GateResult(
        passed=False,
        reason=f"Shot {shot.shot_id} {reason}",
        can_retry=True,
        shot_id=shot.shot_id,
    )


# ============================================================================
# Shot contract (pre-cost structural completeness)
# ============================================================================

@dataclass(frozen=True)
class ShotContract:
    require_video_prompt: bool = False
    require_duration: bool = True
    require_on_screen_text: bool = True
    require_scene_description: bool = True


@dataclass
class ContractViolation:
    shot_id: str
    field: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def check_shot_contract(shots: Iterable[Shot],
                        contract: ShotContract = ShotContract()) -> List[ContractViolation]:
    violations: List[ContractViolation] = []

    for shot in shots:
        if contract.require_video_prompt:
            if not shot.video_prompt or len(shot.video_prompt.strip()) < 10:
                violations.append(ContractViolation(
                    shot.shot_id, "videoPrompt",
                    f"Shot {shot.shot_id}: videoPrompt missing or too short (min 10 chars)",
                ))
        # A prompt supplied without being required still has to be usable
        elif shot.video_prompt is not None and len(shot.video_prompt.strip()) < 10:
            violations.append(ContractViolation(
                shot.shot_id, "videoPrompt",
                f"Shot {shot.shot_id}: videoPrompt too short (min 10 chars)",
            ))

        if contract.require_duration:
            duration = shot.duration
            if duration <= 0 or duration > 60:
                violations.append(ContractViolation(
                    shot.shot_id, "duration",
                    f"Shot {shot.shot_id}: invalid duration ({duration:g}s), must be 0-60s",
                ))

        if contract.require_on_screen_text and not shot.text:
            violations.append(ContractViolation(
                shot.shot_id, "onScreenText",
                f"Shot {shot.shot_id}: onScreenText.text missing",
            ))

        if contract.require_scene_description:
            if len(shot.scene_description.strip()) < 5:
                violations.append(ContractViolation(
                    shot.shot_id, "sceneDescription",
                    f"Shot {shot.shot_id}: sceneDescription missing or too short",
                ))

    return violations


def check_timeline(shots: List[Shot]) -> List[ContractViolation]:
    """Shots must have positive length, be in time order and not overlap."""
    violations: List[ContractViolation] = []
    previous: Optional[Shot] = None

    for shot in shots:
        if shot.time_end <= shot.time_start:
            violations.append(ContractViolation(
                shot.shot_id, "timeEnd",
                f"Shot {shot.shot_id}: timeEnd {shot.time_end:g} <= timeStart {shot.time_start:g}",
            ))
        if previous is not None:
            if shot.time_start < previous.time_start:
                violations.append(ContractViolation(
                    shot.shot_id, "timeStart",
                    f"Shot {shot.shot_id}: starts before previous shot {previous.shot_id}",
                ))
            elif shot.time_start < previous.time_end:
                violations.append(ContractViolation(
                    shot.shot_id, "timeStart",
                    f"Shot {shot.shot_id}: overlaps shot {previous.shot_id} "
                    f"({shot.time_start:g}s < {previous.time_end:g}s)",
                ))
        previous = shot

    return violations
