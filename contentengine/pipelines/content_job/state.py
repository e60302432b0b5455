"""
Content Job Pipeline State - dataclass passed through all pipeline nodes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...brands import BrandKit
from ...core.models import Asset, Blueprint, CompactCreativeBrief, JobInput
from ...services.compositor_service import FrameCheck, ShotMedia
from ...services.model_selector import ModelConfig
from ...validation.rules import MandatoryRules


@dataclass
class JobOutcome:
    """Result returned by the final node."""
    job_id: str
    asset: Asset
    cost: Optional[float]
    model_key: Optional[str]
    template_key: Optional[str]
    storage_path: str
    frame_checks: List[FrameCheck] = field(default_factory=list)


@dataclass
class ContentJobState:
    """
    State passed through all content job pipeline nodes.

    Lifecycle:
        1. Worker creates it with the job id and validated payload
        2. Each node reads what it needs and writes its outputs
        3. PersistOutputNode returns a JobOutcome via End()
    """

    # === REQUIRED INPUT ===
    job_id: str
    payload: JobInput

    # === CONFIGURATION ===
    attempt: int = 1
    work_dir: Optional[str] = None

    # === POPULATED BY NODES ===
    variables: Dict[str, Any] = field(default_factory=dict)
    generation: Optional[Dict[str, Any]] = None
    brand: Optional[BrandKit] = None
    brief: Optional[CompactCreativeBrief] = None
    blueprint: Optional[Blueprint] = None
    rules: Optional[MandatoryRules] = None

    prompt: Optional[str] = None
    template_tier: Optional[str] = None
    template_key: Optional[str] = None
    model: Optional[ModelConfig] = None

    validation: Optional[Dict[str, Any]] = None
    shots_to_generate: List[str] = field(default_factory=list)
    shot_media: Dict[str, ShotMedia] = field(default_factory=dict)

    output: Optional[bytes] = None
    content_type: Optional[str] = None
    output_duration: Optional[float] = None
    frame_checks: List[FrameCheck] = field(default_factory=list)
    cost: Optional[float] = None

    storage_path: Optional[str] = None
    public_url: Optional[str] = None
    asset: Optional[Asset] = None

    # === TRACKING ===
    current_step: str = "pending"
    steps_completed: List[str] = field(default_factory=list)

    @property
    def uses_blueprint(self) -> bool:
        return self.blueprint is not None

    def add_cost(self, amount: Optional[float]) -> None:
        """Accumulate provider cost; unknown costs leave the total unchanged."""
        if amount is None:
            return
        self.cost = round((self.cost or 0.0) + amount, 6)

    def mark_step_complete(self, step_name: str) -> None:
        """Mark a step as complete and update current_step."""
        self.steps_completed.append(step_name)
        self.current_step = f"{step_name}_complete"
