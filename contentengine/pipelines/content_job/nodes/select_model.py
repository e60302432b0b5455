"""
SelectModelNode - Pick the generation model and route the job.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....dependencies import EngineDependencies
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class SelectModelNode(BaseNode[ContentJobState]):
    """
    Step 3: Select the model, then branch.

    Blueprint jobs continue to validation and compositing; everything else
    goes straight to single-asset generation.

    Reads: payload, blueprint
    Writes: model
    Services: ModelRegistry.select()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["payload", "blueprint"],
        outputs=["model"],
        services=["models.select"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> Union["ValidateBlueprintNode", "GenerateAssetNode"]:
        from .validate_blueprint import ValidateBlueprintNode
        from .generate_asset import GenerateAssetNode

        logger.info("Step 3: Selecting generation model...")
        ctx.state.current_step = "select_model"
        payload = ctx.state.payload

        model = ctx.deps.models.select(payload.format, payload.quality, payload.model_key)
        ctx.state.model = model
        logger.info(f"Selected model {model.key} for {payload.format.value}")
        ctx.state.mark_step_complete("select_model")

        if ctx.state.uses_blueprint:
            return ValidateBlueprintNode()
        return GenerateAssetNode()
