"""
CompositeNode - Render the blueprint into one MP4.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from pydantic_graph import BaseNode, GraphRunContext

from ..state import ContentJobState
from ....dependencies import EngineDependencies
from ....services.compositor_service import ShotMedia, resolve_end_frame
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class CompositeNode(BaseNode[ContentJobState]):
    """
    Step 6: Fetch voiceovers and music, then composite the blueprint.

    Reads: blueprint, shot_media, brand, variables, payload, work_dir
    Writes: output, content_type, output_duration, frame_checks
    Services: GenerationService.fetch_output(), CompositorService.render()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["blueprint", "shot_media", "brand", "variables", "payload", "work_dir"],
        outputs=["output", "content_type", "output_duration", "frame_checks"],
        services=["generation.fetch_output", "compositor.render"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> "PersistOutputNode":
        from .persist_output import PersistOutputNode

        logger.info("Step 6: Compositing blueprint...")
        ctx.state.current_step = "composite"
        blueprint = ctx.state.blueprint
        brand = ctx.state.brand
        work_dir = Path(ctx.state.work_dir)

        for shot in blueprint.ordered_shots():
            if not shot.voiceover_url:
                continue
            path = await self._download(ctx, shot.voiceover_url, work_dir / f"vo_{shot.shot_id}.audio")
            ctx.state.shot_media.setdefault(shot.shot_id, ShotMedia()).voiceover_path = path

        music_path: Optional[Path] = None
        if ctx.state.payload.music_url:
            music_path = await self._download(ctx, ctx.state.payload.music_url, work_dir / "music.audio")

        end_frame = resolve_end_frame(
            blueprint,
            headline=str(ctx.state.variables.get("headline") or brand.positioning),
            cta=str(ctx.state.variables.get("cta") or brand.primary_cta),
            brand_name=brand.display_name,
        )

        result = await ctx.deps.compositor.render(
            blueprint,
            ctx.state.shot_media,
            work_dir / "composite.mp4",
            end_frame=end_frame,
            music_path=music_path,
            preview=ctx.state.payload.preview,
        )

        ctx.state.output = result.path.read_bytes()
        ctx.state.content_type = "video/mp4"
        ctx.state.output_duration = result.duration_seconds
        ctx.state.frame_checks = result.frame_checks

        blank = [c.shot_id for c in result.frame_checks if c.possibly_blank]
        if blank:
            logger.warning(f"Possibly blank frames in shots: {', '.join(blank)}")

        logger.info(f"Composited {result.duration_seconds:.2f}s video ({len(ctx.state.output)} bytes)")
        ctx.state.mark_step_complete("composite")
        return PersistOutputNode()

    @staticmethod
    async def _download(ctx: GraphRunContext[ContentJobState, EngineDependencies],
                        url: str, path: Path) -> Path:
        fetched = await ctx.deps.generation.fetch_output(url)
        path.write_bytes(fetched.content)
        return path
