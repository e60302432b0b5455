"""
ContentEngine - Brand content generation pipeline

Turns structured content requests (brand, format, hook, variables) into
generated images and videos: template resolution, model selection,
provider invocation, validation gates and blueprint compositing, driven
by a durable job queue.
"""

__version__ = "0.1.0"
__author__ = "ContentEngine Team"
