"""
ResolveTemplateNode - Resolve the prompt template and build the prompt.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....core.models import ContentFormat
from ....dependencies import EngineDependencies
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class ResolveTemplateNode(BaseNode[ContentJobState]):
    """
    Step 2: Resolve (brand, format, hook) to a template and build the prompt.

    Resolution falls back brand hook -> brand default -> generic, so this
    only fails for an unsupported format or an empty prompt. collection and
    project_type come from the merged variables, then the payload fields.

    Reads: payload, variables
    Writes: prompt, template_tier, template_key
    Services: TemplateRegistry.resolve()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["payload", "variables"],
        outputs=["prompt", "template_tier", "template_key"],
        services=["templates.resolve"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> "SelectModelNode":
        from .select_model import SelectModelNode

        logger.info("Step 2: Resolving prompt template...")
        ctx.state.current_step = "resolve_template"
        payload = ctx.state.payload
        variables = ctx.state.variables

        project_type = variables.get("project_type") or payload.project_type
        if not project_type and payload.format == ContentFormat.WIDE_VIDEO_KIT:
            project_type = "single-family"

        resolved = ctx.deps.templates.resolve(payload.brand, payload.format, payload.hook_type)
        options = {
            "collection_key": variables.get("collection") or payload.collection,
            "project_type": project_type,
            "objective": payload.objective,
            "length_seconds": payload.length_seconds,
            "aspect_ratio": payload.aspect_ratio,
        }
        ctx.state.prompt = resolved.build(variables, options)
        ctx.state.template_tier = resolved.tier.value
        ctx.state.template_key = resolved.key

        logger.info(f"Template {resolved.key} ({resolved.tier.value}), prompt {len(ctx.state.prompt)} chars")
        ctx.state.mark_step_complete("resolve_template")
        return SelectModelNode()
