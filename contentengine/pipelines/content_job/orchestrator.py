"""
Content Job Pipeline Orchestrator - Graph definition and entry point.

Defines the pydantic-graph pipeline for one content job and provides
run_content_job() as the entry point used by the worker and the CLI.
"""

import logging
import shutil
import tempfile
from typing import Any, Dict, List, Optional

import logfire
from pydantic_graph import Graph

from .state import ContentJobState, JobOutcome
from .nodes.load_context import LoadContextNode
from .nodes.resolve_template import ResolveTemplateNode
from .nodes.select_model import SelectModelNode
from .nodes.validate_blueprint import ValidateBlueprintNode
from .nodes.generate_shots import GenerateShotsNode
from .nodes.composite import CompositeNode
from .nodes.generate_asset import GenerateAssetNode
from .nodes.persist_output import PersistOutputNode
from ...core.models import JobInput
from ...dependencies import EngineDependencies

logger = logging.getLogger(__name__)

# ============================================================================
# Graph Definition
# ============================================================================

PIPELINE_NODES = (
    LoadContextNode,
    ResolveTemplateNode,
    SelectModelNode,
    ValidateBlueprintNode,
    GenerateShotsNode,
    CompositeNode,
    GenerateAssetNode,
    PersistOutputNode,
)

content_job_graph = Graph(
    nodes=PIPELINE_NODES,
    name="content_job_pipeline"
)


def describe_pipeline() -> List[Dict[str, Any]]:
    """Each node with the state fields and services it declares, in graph order."""
    return [
        {"node": node.__name__, **node.metadata.to_dict()}
        for node in PIPELINE_NODES
    ]


# ============================================================================
# Convenience Function
# ============================================================================

async def run_content_job(
    job_id: str,
    payload: JobInput,
    *,
    attempt: int = 1,
    deps: Optional[EngineDependencies] = None,
) -> JobOutcome:
    """
    Run the content pipeline for one job.

    The job row's status is not touched here; the worker owns transitions.
    Errors propagate unchanged so the worker can classify them.

    Args:
        job_id: Job UUID
        payload: Validated job input
        attempt: 1-based delivery attempt (for logging)
        deps: EngineDependencies (created from configuration if omitted)

    Returns:
        JobOutcome with the stored Asset and accumulated cost
    """
    if deps is None:
        deps = EngineDependencies.create()

    work_dir = tempfile.mkdtemp(prefix=f"content-job-{job_id}-")
    state = ContentJobState(job_id=job_id, payload=payload, attempt=attempt, work_dir=work_dir)

    logger.info(
        f"=== STARTING CONTENT JOB {job_id} (attempt {attempt}): "
        f"{payload.brand}/{payload.format.value} ==="
    )
    try:
        with logfire.span(
            "content_job",
            job_id=job_id,
            brand=payload.brand,
            format=payload.format.value,
            attempt=attempt,
        ):
            result = await content_job_graph.run(
                LoadContextNode(),
                state=state,
                deps=deps,
            )
        logger.info(f"=== CONTENT JOB {job_id} DONE: steps {', '.join(state.steps_completed)} ===")
        return result.output
    except Exception as e:
        logger.error(f"Content job {job_id} failed at step {state.current_step}: {e}")
        raise
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)
