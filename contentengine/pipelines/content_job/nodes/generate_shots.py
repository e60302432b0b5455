"""
GenerateShotsNode - Produce one validated clip per blueprint shot.

Shots run sequentially. A shot with a pre-generated sceneVideoUrl uses that
clip when it passes Gate B; otherwise the provider is called. A clip that
fails Gate B or the probe with can_retry is regenerated up to
MAX_SHOT_REGENERATIONS times before the job is handed back to the queue.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from .generate_asset import aspect_ratio_for, invoke_model
from ....core.config import Config
from ....core.exceptions import (
    ConfigurationError,
    NonRetryableValidationError,
    RetryableGenerationError,
)
from ....core.models import Shot
from ....dependencies import EngineDependencies
from ....services.compositor_service import ShotMedia
from ....services.generation_service import GenerationOptions
from ....validation.gates import GateResult, check_generated_asset, check_probe
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


def shot_prompt(base_prompt: str, shot: Shot) -> str:
    """Provider prompt for one shot: its own videoPrompt, else the job prompt plus scene direction."""
    if shot.video_prompt:
        return shot.video_prompt.strip()
    parts = [f"SHOT {shot.shot_id}:"]
    direction = " ".join(p for p in (shot.shot_type, shot.camera_movement) if p)
    if direction:
        parts.append(f"{direction}.")
    parts.append(shot.scene_description.strip())
    return f"{base_prompt}\n\n{' '.join(p for p in parts if p)}"


@dataclass
class GenerateShotsNode(BaseNode[ContentJobState]):
    """
    Step 5: Generate, download and check a clip for every shot that needs one.

    Reads: blueprint, shots_to_generate, prompt, model, rules, work_dir
    Writes: shot_media, cost
    Services: GenerationService.invoke(), .fetch_output(), FFmpegService.probe()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["blueprint", "shots_to_generate", "prompt", "model", "rules", "work_dir"],
        outputs=["shot_media", "cost"],
        services=["generation.invoke", "generation.fetch_output", "ffmpeg.probe"],
        provider_cost=True,
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> "CompositeNode":
        from .composite import CompositeNode

        logger.info(f"Step 5: Generating clips for {len(ctx.state.shots_to_generate)} shot(s)...")
        ctx.state.current_step = "generate_shots"

        if not ctx.deps.ffmpeg.available:
            raise ConfigurationError("ffmpeg is required for blueprint compositing")

        pending = set(ctx.state.shots_to_generate)
        for shot in ctx.state.blueprint.ordered_shots():
            if shot.shot_id not in pending:
                continue
            clip_path = await self._produce_clip(ctx, shot)
            media = ctx.state.shot_media.setdefault(shot.shot_id, ShotMedia())
            media.clip_path = clip_path

        ctx.state.mark_step_complete("generate_shots")
        return CompositeNode()

    async def _produce_clip(self, ctx: GraphRunContext[ContentJobState, EngineDependencies],
                            shot: Shot) -> Path:
        gate: Optional[GateResult] = None

        if shot.scene_video_url:
            path, gate = await self._fetch_and_check(ctx, shot, shot.scene_video_url)
            if gate.passed:
                logger.info(f"Shot {shot.shot_id}: using pre-generated clip")
                return path
            logger.warning(f"Pre-generated clip rejected ({gate.reason}), generating a new one")

        attempts = 1 + Config.MAX_SHOT_REGENERATIONS
        options = GenerationOptions(
            aspect_ratio=aspect_ratio_for(ctx.state),
            duration_seconds=math.ceil(shot.duration),
        )
        prompt = shot_prompt(ctx.state.prompt or "", shot)

        for attempt in range(1, attempts + 1):
            result = await invoke_model(ctx.deps, ctx.state.model, prompt, options)
            ctx.state.add_cost(result.cost)
            path, gate = await self._fetch_and_check(ctx, shot, result.url)
            if gate.passed:
                logger.info(f"Shot {shot.shot_id}: clip accepted (attempt {attempt}/{attempts})")
                return path
            logger.warning(f"{gate.reason} (attempt {attempt}/{attempts})")

        raise RetryableGenerationError(gate.reason if gate else f"Shot {shot.shot_id} produced no clip")

    async def _fetch_and_check(self, ctx: GraphRunContext[ContentJobState, EngineDependencies],
                               shot: Shot, url: str):
        """Download a clip and run Gate B plus the probe. Non-retryable failures raise."""
        fetched = await ctx.deps.generation.fetch_output(url)
        gate = check_generated_asset(shot, url, fetched.content_type, ctx.state.rules)

        path = Path(ctx.state.work_dir) / f"shot_{shot.shot_id}.mp4"
        if gate.passed:
            path.write_bytes(fetched.content)
            probe = await asyncio.to_thread(ctx.deps.ffmpeg.probe, path)
            gate = check_probe(shot, probe, ctx.state.rules)

        if not gate.passed and not gate.can_retry:
            raise NonRetryableValidationError(gate.reason, violations=[gate.to_dict()])
        return path, gate
