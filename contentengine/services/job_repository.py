"""
JobRepository - job, asset and generation records in Supabase.

Status changes are conditional updates keyed on the current status, so two
workers racing on the same job cannot both move it forward.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client

from ..core.database import get_supabase_client
from ..core.models import Asset, Job, JobInput, JobStatus
from ..worker.state_machine import assert_transition

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobRepository:
    """Service for job lifecycle persistence."""

    JOBS_TABLE = "jobs"
    ASSETS_TABLE = "assets"
    GENERATIONS_TABLE = "generations"

    def __init__(self, supabase: Optional[Client] = None):
        self.supabase = supabase or get_supabase_client()
        logger.info("JobRepository initialized")

    async def create_job(self, job_input: JobInput, job_id: Optional[str] = None) -> Job:
        """Insert a pending job row for a payload."""
        row: Dict[str, Any] = {
            "status": JobStatus.PENDING.value,
            "brand": job_input.brand,
            "format": job_input.format.value,
            "objective": job_input.objective,
            "hook_type": job_input.hook_type,
            "model": job_input.model_key,
            "payload": job_input.model_dump(mode="json", exclude_none=True),
        }
        if job_id:
            row["id"] = job_id

        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.JOBS_TABLE).insert(row).execute()
        )
        job = Job(**result.data[0])
        logger.info(f"Created job {job.id} ({job.brand}/{job.format})")
        return job

    async def get_job(self, job_id: str) -> Optional[Job]:
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.JOBS_TABLE).select("*").eq("id", job_id).execute()
        )
        if not result.data:
            return None
        return Job(**result.data[0])

    async def transition(
        self,
        job_id: str,
        from_status: JobStatus,
        to_status: JobStatus,
        **fields: Any,
    ) -> bool:
        """
        Move a job from one status to another.

        Args:
            job_id: Job UUID
            from_status: Status the job is expected to be in
            to_status: Target status (must be a legal transition)
            **fields: Extra columns to write (cost, model, error_message)

        Returns:
            True if this call performed the transition, False if the job
            was no longer in from_status

        Raises:
            IllegalTransitionError: if the transition is not allowed
        """
        assert_transition(from_status, to_status)

        update = {"status": to_status.value, "updated_at": _now_iso(), **fields}
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.JOBS_TABLE)
            .update(update)
            .eq("id", job_id)
            .eq("status", from_status.value)
            .execute()
        )
        moved = bool(result.data)
        if moved:
            logger.info(f"Job {job_id}: {from_status.value} -> {to_status.value}")
        else:
            logger.warning(
                f"Job {job_id}: {from_status.value} -> {to_status.value} skipped, "
                f"status changed concurrently"
            )
        return moved

    async def insert_asset(self, asset: Asset) -> Asset:
        row = asset.model_dump(mode="json", exclude_none=True)
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.ASSETS_TABLE).insert(row).execute()
        )
        saved = Asset(**result.data[0]) if result.data else asset
        logger.info(f"Saved {saved.type.value} asset for job {saved.job_id}")
        return saved

    async def list_assets(self, job_id: str) -> list:
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.ASSETS_TABLE).select("*").eq("job_id", job_id).execute()
        )
        return [Asset(**row) for row in result.data or []]

    async def get_generation(self, generation_id: str) -> Optional[Dict[str, Any]]:
        """Upstream generation record (copy, scenes, brief, blueprint)."""
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.GENERATIONS_TABLE)
            .select("*")
            .eq("id", generation_id)
            .execute()
        )
        if not result.data:
            logger.warning(f"Generation {generation_id} not found")
            return None
        return result.data[0]
