"""
ValidateBlueprintNode - All-or-nothing blueprint validation before any provider cost.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....core.exceptions import NarrativeValidationError, NonRetryableValidationError
from ....dependencies import EngineDependencies
from ....validation.blueprint import validate_blueprint
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class ValidateBlueprintNode(BaseNode[ContentJobState]):
    """
    Step 4: Validate the blueprint (timeline, shot contract, Gate A, narrative).

    Structural defects and narrative failures fail the job. A shot that
    only fails because it uses a placeholder background while real video
    is required is scheduled for generation instead.

    Reads: blueprint, brief, rules, payload.preview
    Writes: validation, shots_to_generate
    Services: (none - pure validation)
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["blueprint", "brief", "rules", "payload"],
        outputs=["validation", "shots_to_generate"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> Union["GenerateShotsNode", "CompositeNode"]:
        from .generate_shots import GenerateShotsNode
        from .composite import CompositeNode

        logger.info("Step 4: Validating blueprint...")
        ctx.state.current_step = "validate_blueprint"
        blueprint = ctx.state.blueprint
        rules = ctx.state.rules

        result = validate_blueprint(blueprint, brief=ctx.state.brief, rules=rules)
        ctx.state.validation = result.to_dict()

        structural = [v.to_dict() for v in result.timeline + result.contract]
        structural += [g.to_dict() for g in result.gate_failures if not g.can_retry]
        if structural:
            reasons = [item["reason"] for item in structural]
            logger.warning(f"Blueprint rejected: {len(structural)} structural violation(s)")
            raise NonRetryableValidationError(
                f"Blueprint failed validation: {reasons[0]}", violations=structural
            )

        if result.narrative is not None and not result.narrative.passed:
            logger.warning(f"Blueprint rejected on narrative checks: {result.narrative.summary()}")
            raise NarrativeValidationError(
                f"Blueprint failed narrative checks: {result.narrative.summary()}",
                report=result.narrative.to_dict(),
            )

        for shot_id in result.retryable_shot_ids:
            logger.info(f"Shot {shot_id} uses a placeholder background, will generate a real clip")

        if ctx.state.payload.preview:
            ctx.state.shots_to_generate = []
            ctx.state.mark_step_complete("validate_blueprint")
            logger.info("Preview mode: skipping shot generation")
            return CompositeNode()

        ctx.state.shots_to_generate = [
            shot.shot_id
            for shot in blueprint.ordered_shots()
            if shot.visual_source != "solid_bg" or rules.must_have_video_url
        ]
        logger.info(
            f"Blueprint valid ({len(blueprint.shots)} shots, intent {result.intent.value}); "
            f"{len(ctx.state.shots_to_generate)} shot(s) need clips"
        )
        ctx.state.mark_step_complete("validate_blueprint")
        return GenerateShotsNode()
