"""
Content Worker - Background process that drains the content job queue.

This worker:
1. Runs a bounded pool of consumers (WORKER_CONCURRENCY, default 3), each
   claiming one queue message at a time
2. Moves the job pending -> processing and runs the content pipeline
3. Marks the job completed (with cost) or applies the retry policy:
   - non-retryable validation / configuration / provider-output errors
     fail the job immediately
   - retryable and unexpected errors re-queue the job (processing -> pending)
     with exponential backoff until MAX_JOB_ATTEMPTS, then fail it with
     the last error
4. Heartbeats in-flight messages and re-queues stalled ones

Run with: python -m contentengine.worker.content_worker
"""

import asyncio
import logging
import signal
import socket
import sys
import uuid
from typing import Optional, Set

from ..core.config import Config
from ..core.exceptions import ContentEngineError, IllegalTransitionError
from ..core.models import JobStatus, QueueMessage
from ..pipelines.content_job.orchestrator import run_content_job
from .queue import InvalidQueueMessageError

logger = logging.getLogger(__name__)

# Graceful shutdown flag
shutdown_requested = False


def handle_shutdown(signum, frame):
    """Handle shutdown signals gracefully."""
    global shutdown_requested
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested = True


def install_signal_handlers():
    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)


def describe_error(error: Exception) -> str:
    """Message persisted to jobs.error_message."""
    if isinstance(error, ContentEngineError):
        return error.to_error_message()
    return str(error) or type(error).__name__


def is_retryable(error: Exception) -> bool:
    """Pipeline errors carry their own policy; anything unexpected is retried."""
    if isinstance(error, ContentEngineError):
        return error.retryable
    return True


class ContentWorker:
    """Bounded pool of queue consumers sharing one EngineDependencies."""

    def __init__(
        self,
        deps,
        concurrency: Optional[int] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        heartbeat_interval: Optional[float] = None,
        worker_id: Optional[str] = None,
    ):
        self.deps = deps
        self.concurrency = concurrency or Config.WORKER_CONCURRENCY
        self.poll_interval = poll_interval if poll_interval is not None else Config.QUEUE_POLL_INTERVAL_SECONDS
        self.max_attempts = max_attempts or Config.MAX_JOB_ATTEMPTS
        self.heartbeat_interval = heartbeat_interval or Config.HEARTBEAT_INTERVAL_SECONDS
        self.worker_id = worker_id or f"{socket.gethostname()}-{uuid.uuid4().hex[:6]}"
        self.in_flight: Set[str] = set()
        self.processed = 0
        self.failed = 0
        self._stop = False

    @property
    def stopping(self) -> bool:
        return self._stop or shutdown_requested

    def stop(self) -> None:
        self._stop = True

    async def _sleep(self, seconds: float) -> None:
        """Sleep in one-second ticks so shutdown is noticed promptly."""
        remaining = seconds
        while remaining > 0 and not self.stopping:
            await asyncio.sleep(min(1.0, remaining))
            remaining -= 1.0

    # ========================================================================
    # Main loops
    # ========================================================================

    async def run(self) -> None:
        logger.info(f"Content worker {self.worker_id} started")
        logger.info(f"Concurrency: {self.concurrency}, poll interval: {self.poll_interval:g}s, "
                    f"max attempts: {self.max_attempts}")

        tasks = [
            asyncio.create_task(self._consume(f"{self.worker_id}-{slot}"))
            for slot in range(self.concurrency)
        ]
        tasks.append(asyncio.create_task(self._maintenance()))
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()

        logger.info(f"Content worker {self.worker_id} stopped "
                    f"(processed {self.processed}, failed {self.failed})")

    async def _consume(self, consumer_id: str) -> None:
        while not self.stopping:
            try:
                message = await self.deps.queue.claim(consumer_id)
            except InvalidQueueMessageError as e:
                await self.fail_unprocessable(e.job_id, e.to_error_message())
                continue
            except Exception as e:
                logger.error(f"{consumer_id}: error claiming from queue: {e}")
                await self._sleep(10)
                continue

            if message is None:
                await self._sleep(self.poll_interval)
                continue

            self.in_flight.add(message.job_id)
            try:
                await self.process_message(message)
            except IllegalTransitionError:
                raise
            except Exception as e:
                # Persistence itself failed; the claim expires and the message is re-delivered
                logger.error(f"{consumer_id}: error processing job {message.job_id}: {e}")
            finally:
                self.in_flight.discard(message.job_id)

    async def _maintenance(self) -> None:
        """Heartbeat every interval and re-queue stalled messages."""
        while not self.stopping:
            await self._sleep(self.heartbeat_interval)
            if self.stopping:
                break
            logger.info(f"Heartbeat: {len(self.in_flight)} in flight, "
                        f"{self.processed} processed, {self.failed} failed")
            try:
                for job_id in list(self.in_flight):
                    await self.deps.queue.heartbeat(job_id)
                requeued = await self.deps.queue.requeue_stalled()
                if requeued:
                    logger.warning(f"Re-queued {requeued} stalled job(s)")
            except Exception as e:
                logger.error(f"Queue maintenance failed: {e}")

    # ========================================================================
    # Job processing
    # ========================================================================

    async def process_message(self, message: QueueMessage) -> Optional[JobStatus]:
        """
        Run one claimed message to a terminal state or back to the queue.

        Returns:
            Status the job was left in, or None if the message was discarded
            or left unacknowledged for stall recovery
        """
        job_id = message.job_id
        job = await self.deps.jobs.get_job(job_id)
        if job is None:
            await self.deps.queue.dead(job_id, "Job record not found")
            return None

        if job.status.is_terminal:
            logger.info(f"Job {job_id} already {job.status.value}, acknowledging duplicate delivery")
            await self.deps.queue.ack(job_id)
            return job.status

        if job.status == JobStatus.PENDING:
            moved = await self.deps.jobs.transition(job_id, JobStatus.PENDING, JobStatus.PROCESSING)
            if not moved:
                logger.warning(f"Job {job_id} changed status while claiming, skipping")
                await self.deps.queue.ack(job_id)
                return None
        else:
            logger.info(f"Resuming job {job_id} left in processing")

        logger.info(f"Processing job {job_id} (attempt {message.attempt}/{self.max_attempts})")
        try:
            outcome = await run_content_job(
                job_id, message.payload, attempt=message.attempt, deps=self.deps
            )
        except IllegalTransitionError:
            raise
        except Exception as e:
            return await self.handle_failure(message, e)

        completed = await self.deps.jobs.transition(
            job_id, JobStatus.PROCESSING, JobStatus.COMPLETED,
            cost=outcome.cost,
            model=outcome.model_key,
            error_message=None,
        )
        if not completed:
            # Message stays claimed; requeue_stalled re-delivers it once the heartbeat lapses
            logger.warning(f"Job {job_id} left processing before completion was recorded, not acknowledging")
            return None

        await self.deps.queue.ack(job_id)
        self.processed += 1
        logger.info(f"Job {job_id} completed (cost: {outcome.cost})")
        return JobStatus.COMPLETED

    async def handle_failure(self, message: QueueMessage, error: Exception) -> JobStatus:
        """Apply the retry policy to a failed attempt."""
        job_id = message.job_id
        error_message = describe_error(error)

        if is_retryable(error) and message.attempt < self.max_attempts:
            logger.warning(f"Job {job_id} attempt {message.attempt} failed, will retry: {error_message}")
            await self.deps.jobs.transition(
                job_id, JobStatus.PROCESSING, JobStatus.PENDING, error_message=error_message
            )
            await self.deps.queue.retry(job_id, message.attempt, error_message)
            return JobStatus.PENDING

        if is_retryable(error):
            logger.error(f"Job {job_id} failed after {message.attempt} attempt(s): {error_message}")
        else:
            logger.error(f"Job {job_id} failed ({type(error).__name__}): {error_message}")

        await self.deps.jobs.transition(
            job_id, JobStatus.PROCESSING, JobStatus.FAILED, error_message=error_message
        )
        await self.deps.queue.dead(job_id, error_message)
        self.failed += 1
        return JobStatus.FAILED

    async def fail_unprocessable(self, job_id: str, error_message: str) -> None:
        """Fail a job whose queue payload could not be parsed."""
        job = await self.deps.jobs.get_job(job_id)
        if job is None or job.status.is_terminal:
            return
        if job.status == JobStatus.PENDING:
            await self.deps.jobs.transition(job_id, JobStatus.PENDING, JobStatus.PROCESSING)
        await self.deps.jobs.transition(
            job_id, JobStatus.PROCESSING, JobStatus.FAILED, error_message=error_message
        )
        self.failed += 1


# ============================================================================
# Entry point
# ============================================================================

async def run_worker(concurrency: Optional[int] = None) -> None:
    from ..dependencies import EngineDependencies

    Config.validate()
    deps = EngineDependencies.create()
    await ContentWorker(deps, concurrency=concurrency).run()


def main(concurrency: Optional[int] = None):
    """Entry point for the content worker."""
    from ..core.observability import setup_logfire

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    install_signal_handlers()
    setup_logfire()

    logger.info("=" * 60)
    logger.info("Content Job Worker")
    logger.info("=" * 60)

    try:
        asyncio.run(run_worker(concurrency))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Worker shutdown complete")


if __name__ == "__main__":
    main()
