"""
Logfire observability configuration for ContentEngine.

Provides tracing for:
- Content job runs (one span per job, tagged with format and brand)
- Provider invocations and compositor renders
- Pydantic model validation

Usage:
    # At worker startup
    from contentengine.core.observability import setup_logfire
    setup_logfire()

    # In services
    import logfire

    with logfire.span("render_blueprint", job_id=job_id):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Your Logfire write token (required to ship data)
    LOGFIRE_PROJECT_NAME: Project name in Logfire dashboard
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

_logfire_configured = False


def setup_logfire(
    project_name: Optional[str] = None,
    environment: Optional[str] = None,
    service_name: str = "contentengine"
) -> bool:
    """
    Configure Logfire for observability.

    Without LOGFIRE_TOKEN, Logfire is still configured so spans are valid,
    but nothing is sent.

    Args:
        project_name: Logfire project name (or LOGFIRE_PROJECT_NAME env var)
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing

    Returns:
        True if data will be shipped to Logfire, False if running local-only
    """
    global _logfire_configured

    token = os.environ.get("LOGFIRE_TOKEN")

    if _logfire_configured:
        logger.debug("Logfire already configured")
        return bool(token)

    project = project_name or os.environ.get("LOGFIRE_PROJECT_NAME", "contentengine")
    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    logfire.configure(
        token=token or None,
        service_name=service_name,
        environment=env,
        send_to_logfire="if-token-present",
        console=False,
    )
    logfire.instrument_pydantic()
    _logfire_configured = True

    if token:
        logger.info(f"Logfire configured: project={project}, environment={env}")
    else:
        logger.info("LOGFIRE_TOKEN not set, Logfire running without export")
    return bool(token)


def is_logfire_configured() -> bool:
    """Return whether setup_logfire() has run in this process."""
    return _logfire_configured
