"""
PersistOutputNode - Upload the output and record the Asset.

Final node in the content job pipeline. The job row itself is moved to
completed by the worker once the graph returns.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, End, GraphRunContext

from ..state import ContentJobState, JobOutcome
from ....core.exceptions import RetryableGenerationError
from ....core.models import Asset
from ....dependencies import EngineDependencies
from ....services.storage_service import OUTPUT_EXTENSIONS, build_storage_path, extension_for
from ...metadata import NodeMetadata

logger = logging.getLogger(__name__)


@dataclass
class PersistOutputNode(BaseNode[ContentJobState]):
    """
    Step 7: Upload output bytes and insert one Asset row.

    Reads: output, content_type, payload, output_duration, cost, model
    Writes: storage_path, public_url, asset
    Services: StorageService.upload(), JobRepository.insert_asset()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        inputs=["output", "content_type", "payload", "output_duration", "cost", "model"],
        outputs=["storage_path", "public_url", "asset"],
        services=["storage.upload", "jobs.insert_asset"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ContentJobState, EngineDependencies]
    ) -> End[JobOutcome]:
        logger.info("Step 7: Persisting output...")
        ctx.state.current_step = "persist_output"
        payload = ctx.state.payload

        if not ctx.state.output:
            raise RetryableGenerationError("No output generated")

        # Store under the type the provider actually returned
        content_type = (ctx.state.content_type or "").lower()
        if content_type not in OUTPUT_EXTENSIONS:
            content_type = payload.content_type
        storage_path = build_storage_path(
            payload.brand, payload.format.value, ctx.state.job_id,
            extension_for(content_type, payload.extension),
        )
        public_url = await ctx.deps.storage.upload(storage_path, ctx.state.output, content_type)
        ctx.state.storage_path = storage_path
        ctx.state.public_url = public_url

        asset = await ctx.deps.jobs.insert_asset(Asset(
            job_id=ctx.state.job_id,
            type=payload.asset_type,
            url=public_url,
            duration_seconds=ctx.state.output_duration,
        ))
        ctx.state.asset = asset

        ctx.state.mark_step_complete("persist_output")
        logger.info(f"Job {ctx.state.job_id} output stored at {storage_path}")

        return End(JobOutcome(
            job_id=ctx.state.job_id,
            asset=asset,
            cost=ctx.state.cost,
            model_key=ctx.state.model.key if ctx.state.model else None,
            template_key=ctx.state.template_key,
            storage_path=storage_path,
            frame_checks=ctx.state.frame_checks,
        ))
