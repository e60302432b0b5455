"""
Job queue, status state machine and the content worker.

The worker itself lives in contentengine.worker.content_worker and is
imported from there, since it pulls in the whole pipeline.
"""

from .state_machine import LEGAL_TRANSITIONS, JobLifecycle, assert_transition, can_transition
from .queue import JobQueue, InvalidQueueMessageError

__all__ = [
    'LEGAL_TRANSITIONS',
    'JobLifecycle',
    'assert_transition',
    'can_transition',
    'JobQueue',
    'InvalidQueueMessageError',
]
