"""
Pydantic Graph pipelines for the content engine.

- content_job: one queued content job from prompt to stored asset
"""

from .metadata import NodeMetadata

__all__ = ["NodeMetadata"]
