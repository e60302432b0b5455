"""
GenerateAssetNode - Single-asset generation (image or one video clip).
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....core.exceptions import NonRetryableValidationError, RetryableGenerationError
from ....core.models import Shot
from ....dependencies import EngineDependencies
from ....services.generation_service import GenerationOptions, GenerationResult
from ....services.model_selector import ModelConfig, ModelInput
from ....validation.gates import check_generated_asset
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)

ASPECT_BY_FORMAT = {
    "reel": "9:16",
    "story": "9:16",
    "reel_kit": "9:16",
    "post": "4:5",
    "image_kit": "4:5",
    "image": "1:1",
    "wide_video_kit": "16:9",
}


def aspect_ratio_for(state: ContentJobState) -> Optional[str]:
    return state.payload.aspect_ratio or ASPECT_BY_FORMAT.get(state.payload.format.value)


async def invoke_model(
    deps: EngineDependencies,
    model: ModelConfig,
    prompt: str,
    options: GenerationOptions,
) -> GenerationResult:
    """Invoke a model; image-input models go through the two-stage still-then-animate path."""
    if model.input_kind == ModelInput.IMAGE and not options.image_url:
        image_model = deps.models.default_image_model()
        logger.info(f"{model.key} animates a still, generating one with {image_model.key} first")
        return await deps.generation.invoke_image_to_video(image_model, model, prompt, options)
    return await deps.generation.invoke(model, prompt, options)


@dataclass
class GenerateAssetNode(BaseNode[ContentJobState]):
    """
    Step 4: Generate one asset with the selected model and run Gate B on it.

    Reads: prompt, model, rules, payload
    Writes: output, content_type, output_duration, cost
    Services: GenerationService.invoke(), .fetch_output()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["prompt", "model", "rules", "payload"],
        outputs=["output", "content_type", "output_duration", "cost"],
        services=["generation.invoke", "generation.fetch_output"],
        provider_cost=True,
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> "PersistOutputNode":
        from .persist_output import PersistOutputNode

        logger.info("Step 4: Generating asset...")
        ctx.state.current_step = "generate_asset"
        payload = ctx.state.payload

        options = GenerationOptions(
            aspect_ratio=aspect_ratio_for(ctx.state),
            duration_seconds=payload.length_seconds if payload.is_video else None,
        )
        result = await invoke_model(ctx.deps, ctx.state.model, ctx.state.prompt, options)
        ctx.state.add_cost(result.cost)

        fetched = await ctx.deps.generation.fetch_output(result.url)

        output_shot = Shot(shotId="output", timeStart=0, timeEnd=float(payload.length_seconds or 1))
        gate = check_generated_asset(output_shot, result.url, fetched.content_type, ctx.state.rules)
        if not gate.passed:
            logger.warning(f"Generated asset rejected: {gate.reason}")
            if gate.can_retry:
                raise RetryableGenerationError(gate.reason)
            raise NonRetryableValidationError(gate.reason, violations=[gate.to_dict()])

        ctx.state.output = fetched.content
        ctx.state.content_type = fetched.content_type
        ctx.state.output_duration = float(payload.length_seconds) if payload.is_video and payload.length_seconds else None

        logger.info(f"Generated {len(fetched.content)} bytes ({fetched.content_type}) with {result.model_key}")
        ctx.state.mark_step_complete("generate_asset")
        return PersistOutputNode()
