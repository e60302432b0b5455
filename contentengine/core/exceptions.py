"""
Error classes for the content pipeline.

The worker decides what happens to a job from the class of the error:

- NonRetryableValidationError: fail the job immediately.
- RetryableGenerationError: re-queue with backoff until attempts run out.
- ConfigurationError: fail the job immediately; left for monitoring.
- ProviderOutputError: provider answered with a shape we cannot read;
  fails the invocation and the job.

IllegalTransitionError is a programming error and is never handled.
"""

import json
from typing import Any, Dict, List, Optional


class ContentEngineError(Exception):
    """Base class for pipeline errors."""

    retryable: bool = False

    def to_error_message(self) -> str:
        """Human-readable message persisted to jobs.error_message."""
        return str(self)


class NonRetryableValidationError(ContentEngineError):
    """Content or structure defect that regeneration cannot fix."""

    def __init__(self, message: str, violations: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.violations = violations or []

    def to_error_message(self) -> str:
        if not self.violations:
            return str(self)
        return f"{self}: {json.dumps(self.violations, default=str)}"


class NarrativeValidationError(NonRetryableValidationError):
    """Blueprint failed beat, pacing or rhythm checks."""

    def __init__(self, message: str, report: Dict[str, Any]):
        super().__init__(message, violations=[report])
        self.report = report

    def to_error_message(self) -> str:
        return f"{self}: {json.dumps(self.report, default=str)}"


class RetryableGenerationError(ContentEngineError):
    """Provider timeout, non-2xx response, wrong content type, or blank output."""

    retryable = True


class ConfigurationError(ContentEngineError):
    """No model for a format, or no template able to build a prompt."""


class ProviderOutputError(ContentEngineError):
    """Provider response could not be normalized to an output URL."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class IllegalTransitionError(Exception):
    """Attempted a job status transition the state machine does not allow."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Illegal job status transition: {current} -> {target}")
        self.current = current
        self.target = target
