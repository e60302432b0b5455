"""
Job status state machine.

    pending ──> processing ──> completed
                   │  └──────> failed
                   └─────────> pending   (retry re-queue only)

completed and failed are terminal.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple, Union

from ..core.exceptions import IllegalTransitionError
from ..core.models import JobStatus

LEGAL_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.PENDING}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def _status(value: Union[JobStatus, str]) -> JobStatus:
    return value if isinstance(value, JobStatus) else JobStatus(value)


def can_transition(current: Union[JobStatus, str], target: Union[JobStatus, str]) -> bool:
    return _status(target) in LEGAL_TRANSITIONS[_status(current)]


def assert_transition(current: Union[JobStatus, str], target: Union[JobStatus, str]) -> None:
    """Raise IllegalTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise IllegalTransitionError(_status(current).value, _status(target).value)


@dataclass
class JobLifecycle:
    """In-memory status tracker that enforces the transition table."""
    status: JobStatus = JobStatus.PENDING
    history: List[Tuple[JobStatus, JobStatus]] = field(default_factory=list)

    def advance(self, target: Union[JobStatus, str]) -> JobStatus:
        target = _status(target)
        assert_transition(self.status, target)
        self.history.append((self.status, target))
        self.status = target
        return target

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
