"""
Content Job Pipeline - pydantic-graph workflow for one queued job.

load context -> resolve template -> select model -> (blueprint jobs)
validate blueprint -> generate shots -> composite, or (single asset)
generate asset -> persist output.
"""

from .state import ContentJobState, JobOutcome

__all__ = [
    "ContentJobState",
    "JobOutcome",
]
