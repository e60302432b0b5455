"""
Services layer for the content engine.

Data access (JobRepository, StorageService, BriefService), provider calls
(GenerationService), model selection and media processing (FFmpegService,
CompositorService).
"""

from .model_selector import ModelConfig, ModelRegistry, DEFAULT_MODELS
from .generation_service import GenerationService, GenerationOptions, GenerationResult
from .ffmpeg_service import FFmpegService, VideoProbe
from .compositor_service import CompositorService, ShotMedia, build_timeline
from .storage_service import StorageService, build_storage_path
from .job_repository import JobRepository
from .brief_service import BriefService, get_preset, apply_brief_defaults, compute_brief_key

__all__ = [
    'ModelConfig',
    'ModelRegistry',
    'DEFAULT_MODELS',
    'GenerationService',
    'GenerationOptions',
    'GenerationResult',
    'FFmpegService',
    'VideoProbe',
    'CompositorService',
    'ShotMedia',
    'build_timeline',
    'StorageService',
    'build_storage_path',
    'JobRepository',
    'BriefService',
    'get_preset',
    'apply_brief_defaults',
    'compute_brief_key',
]
