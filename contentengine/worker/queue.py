"""
JobQueue - durable at-least-once job queue on a Supabase table.

Rows in content_job_queue move queued -> claimed -> done | dead. A claim is
an optimistic conditional update, so only one worker wins each row. Claimed
rows whose worker stops heartbeating are put back to queued; the job itself
stays in processing and is resumed by whoever claims it next.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError
from supabase import Client

from ..core.config import Config
from ..core.database import get_supabase_client
from ..core.exceptions import NonRetryableValidationError
from ..core.models import JobInput, QueueMessage

logger = logging.getLogger(__name__)

QUEUED = "queued"
CLAIMED = "claimed"
DONE = "done"
DEAD = "dead"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InvalidQueueMessageError(NonRetryableValidationError):
    """Claimed queue row whose payload is not a valid JobInput."""

    def __init__(self, job_id: str, error: ValidationError):
        super().__init__(f"Invalid job payload for {job_id}", violations=error.errors())
        self.job_id = job_id


class JobQueue:
    """Service for the content job queue."""

    def __init__(
        self,
        supabase: Optional[Client] = None,
        table: str = "content_job_queue",
        backoff_seconds: Optional[float] = None,
    ):
        self.supabase = supabase or get_supabase_client()
        self.table = table
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else Config.RETRY_BACKOFF_SECONDS
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before delivery attempt+1: base * 2^(attempt-1)."""
        return self.backoff_seconds * (2 ** max(attempt - 1, 0))

    async def enqueue(self, job_id: str, payload: JobInput) -> None:
        """Queue a job. Enqueueing a job that is already queued is a no-op."""
        row = {
            "job_id": job_id,
            "payload": payload.model_dump(mode="json", exclude_none=True),
            "status": QUEUED,
            "attempts": 0,
            "available_at": _now().isoformat(),
        }
        await asyncio.to_thread(
            lambda: self.supabase.table(self.table)
            .upsert(row, on_conflict="job_id", ignore_duplicates=True)
            .execute()
        )
        logger.info(f"Enqueued job {job_id}")

    async def claim(self, worker_id: str, batch_size: int = 5) -> Optional[QueueMessage]:
        """
        Claim the next available message.

        Returns:
            QueueMessage with its 1-based attempt number, or None when the
            queue is empty or every candidate was claimed by another worker

        Raises:
            InvalidQueueMessageError: the claimed row's payload is invalid
                (the row is dead-lettered first)
        """
        now = _now().isoformat()
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.table)
            .select("*")
            .eq("status", QUEUED)
            .lte("available_at", now)
            .order("available_at")
            .limit(batch_size)
            .execute()
        )

        for row in result.data or []:
            attempts = int(row.get("attempts") or 0)
            claimed = await asyncio.to_thread(
                lambda: self.supabase.table(self.table)
                .update({
                    "status": CLAIMED,
                    "claimed_by": worker_id,
                    "claimed_at": now,
                    "attempts": attempts + 1,
                })
                .eq("job_id", row["job_id"])
                .eq("status", QUEUED)
                .eq("attempts", attempts)
                .execute()
            )
            if not claimed.data:
                continue

            try:
                payload = JobInput(**(row.get("payload") or {}))
            except ValidationError as e:
                await self.dead(row["job_id"], f"Invalid job payload: {e}")
                raise InvalidQueueMessageError(row["job_id"], e) from e

            logger.info(f"{worker_id} claimed job {row['job_id']} (attempt {attempts + 1})")
            return QueueMessage(job_id=row["job_id"], payload=payload, attempt=attempts + 1)

        return None

    async def _set(self, job_id: str, values: Dict[str, Any]) -> None:
        await asyncio.to_thread(
            lambda: self.supabase.table(self.table).update(values).eq("job_id", job_id).execute()
        )

    async def ack(self, job_id: str) -> None:
        await self._set(job_id, {"status": DONE})

    async def retry(self, job_id: str, attempt: int, error: str) -> float:
        """Put a message back with exponential backoff. Returns the delay."""
        delay = self.backoff_delay(attempt)
        await self._set(job_id, {
            "status": QUEUED,
            "claimed_by": None,
            "claimed_at": None,
            "last_error": error,
            "available_at": (_now() + timedelta(seconds=delay)).isoformat(),
        })
        logger.info(f"Job {job_id} re-queued after attempt {attempt}, retry in {delay:g}s")
        return delay

    async def dead(self, job_id: str, error: str) -> None:
        await self._set(job_id, {"status": DEAD, "last_error": error})
        logger.warning(f"Job {job_id} moved to dead letter: {error}")

    async def heartbeat(self, job_id: str) -> None:
        """Refresh claimed_at for an in-flight message."""
        await asyncio.to_thread(
            lambda: self.supabase.table(self.table)
            .update({"claimed_at": _now().isoformat()})
            .eq("job_id", job_id)
            .eq("status", CLAIMED)
            .execute()
        )

    async def requeue_stalled(self, timeout_seconds: Optional[float] = None) -> int:
        """Return claimed messages with no heartbeat for timeout_seconds to the queue."""
        if timeout_seconds is None:
            timeout_seconds = Config.STALLED_JOB_TIMEOUT_SECONDS
        cutoff = (_now() - timedelta(seconds=timeout_seconds)).isoformat()
        result = await asyncio.to_thread(
            lambda: self.supabase.table(self.table)
            .select("job_id, claimed_at")
            .eq("status", CLAIMED)
            .lt("claimed_at", cutoff)
            .execute()
        )

        requeued = 0
        for row in result.data or []:
            moved = await asyncio.to_thread(
                lambda: self.supabase.table(self.table)
                .update({
                    "status": QUEUED,
                    "claimed_by": None,
                    "claimed_at": None,
                    "available_at": _now().isoformat(),
                })
                .eq("job_id", row["job_id"])
                .eq("status", CLAIMED)
                .eq("claimed_at", row["claimed_at"])
                .execute()
            )
            if moved.data:
                requeued += 1
                logger.warning(f"Re-queued stalled job {row['job_id']}")
        return requeued
