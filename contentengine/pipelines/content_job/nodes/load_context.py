"""
LoadContextNode - Gather brand, generation record, brief and blueprint.

First node in the content job pipeline.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, ClassVar, Dict, Optional

from pydantic import ValidationError
from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....core.exceptions import NonRetryableValidationError
from ....core.models import BLUEPRINT_FORMATS, Blueprint, CompactCreativeBrief
from ....dependencies import EngineDependencies
from ....services.brief_service import apply_brief_defaults, get_preset
from ....validation.rules import IMAGE_OUTPUT_RULES, SINGLE_CLIP_RULES, rules_from_brief
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


def merge_generation_variables(variables: Dict[str, Any],
                               generation: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay marketing copy and scene descriptions from a generation record."""
    merged = dict(variables)

    marketing = generation.get("marketing_output") or {}
    for key in ("headline", "primaryText", "cta"):
        if marketing.get(key):
            merged[key] = marketing[key]

    blueprint = generation.get("reel_blueprint") or {}
    for i, shot in enumerate(blueprint.get("shots") or [], start=1):
        scene = (shot or {}).get("sceneDescription")
        if scene:
            merged[f"scene{i}"] = scene

    return merged


def _parse_brief(data: Any, source: str) -> CompactCreativeBrief:
    if isinstance(data, CompactCreativeBrief):
        return data
    try:
        return CompactCreativeBrief(**data)
    except (TypeError, ValidationError) as e:
        raise NonRetryableValidationError(f"Invalid creative brief in {source}: {e}") from e


def _parse_blueprint(data: Any, source: str) -> Blueprint:
    if isinstance(data, Blueprint):
        return data
    try:
        return Blueprint(**data)
    except ValidationError as e:
        raise NonRetryableValidationError(
            f"Invalid blueprint in {source}", violations=e.errors(include_url=False)
        ) from e
    except TypeError as e:
        raise NonRetryableValidationError(f"Invalid blueprint in {source}: {e}") from e


@dataclass
class LoadContextNode(BaseNode[ContentJobState]):
    """
    Step 1: Load the context the later stages need.

    Reads: payload
    Writes: variables, generation, brand, brief, blueprint, rules
    Services: JobRepository.get_generation(), BriefService.get_cached(), BrandRegistry.load()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["payload"],
        outputs=["variables", "generation", "brand", "brief", "blueprint", "rules"],
        services=["jobs.get_generation", "briefs.get_cached", "brands.load"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> "ResolveTemplateNode":
        from .resolve_template import ResolveTemplateNode

        logger.info(f"Step 1: Loading context for job {ctx.state.job_id}...")
        ctx.state.current_step = "load_context"
        payload = ctx.state.payload

        variables = dict(payload.variables)
        generation: Optional[Dict[str, Any]] = None
        if payload.generation_id:
            generation = await ctx.deps.jobs.get_generation(payload.generation_id)
            if generation:
                variables = merge_generation_variables(variables, generation)
                logger.info(f"Merged generation {payload.generation_id} into job variables")
        ctx.state.generation = generation
        ctx.state.variables = variables

        ctx.state.brand = ctx.deps.brands.load(payload.brand)

        brief = payload.brief
        if brief is None and payload.brief_key:
            brief = await ctx.deps.briefs.get_cached(payload.brief_key)
            if brief is None:
                logger.warning(f"Cached brief {payload.brief_key} not found, falling back")
        if brief is None and generation and generation.get("creative_brief"):
            brief = _parse_brief(generation["creative_brief"], "generation record")
        if brief is None and payload.brief_preset:
            brief = get_preset(payload.brief_preset)
        ctx.state.brief = apply_brief_defaults(brief) if brief else None

        blueprint = None
        if payload.format in BLUEPRINT_FORMATS:
            if payload.blueprint is not None:
                blueprint = payload.blueprint
            elif generation and generation.get("reel_blueprint"):
                blueprint = _parse_blueprint(generation["reel_blueprint"], "generation record")
        ctx.state.blueprint = blueprint

        if blueprint is not None:
            rules = rules_from_brief(ctx.state.brief)
            if payload.preview:
                rules = replace(rules, must_have_video_url=False)
        elif payload.is_video:
            rules = SINGLE_CLIP_RULES
        else:
            rules = IMAGE_OUTPUT_RULES
        ctx.state.rules = rules

        if payload.preview and blueprint is None:
            logger.warning(f"Job {ctx.state.job_id}: preview requested without a blueprint, ignoring")

        logger.info(
            f"Context loaded: brand={ctx.state.brand.brand_key}, format={payload.format.value}, "
            f"blueprint={'yes' if blueprint else 'no'}, brief={'yes' if ctx.state.brief else 'no'}"
        )
        ctx.state.mark_step_complete("load_context")
        return ResolveTemplateNode()
