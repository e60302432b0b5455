"""
Dependency container for the content pipeline and worker.

EngineDependencies bundles every service a pipeline node or the worker
touches, so tests can swap any of them for a mock.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from .brands import BrandRegistry
from .core.config import Config
from .services.brief_service import BriefService
from .services.compositor_service import CompositorService
from .services.ffmpeg_service import FFmpegService
from .services.generation_service import GenerationService
from .services.job_repository import JobRepository
from .services.model_selector import ModelRegistry
from .services.storage_service import StorageService
from .templates import TemplateRegistry
from .worker.queue import JobQueue

logger = logging.getLogger(__name__)


class EngineDependencies(BaseModel):
    """
    Services shared by the pipeline nodes and the worker.

    Attributes:
        jobs: Job, asset and generation records
        queue: Durable job queue
        storage: Output uploads
        brands: Brand kit lookup
        templates: Prompt template resolver
        models: Model registry and selection
        generation: Provider client
        ffmpeg: Probing and frame extraction
        compositor: Blueprint rendering
        briefs: Creative brief cache
    """

    jobs: JobRepository
    queue: JobQueue
    storage: StorageService
    brands: BrandRegistry
    templates: TemplateRegistry
    models: ModelRegistry
    generation: GenerationService
    ffmpeg: FFmpegService
    compositor: CompositorService
    briefs: BriefService

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def create(
        cls,
        brands_dir: Optional[str] = None,
        template_manifest: Optional[str] = None,
        replicate_api_token: Optional[str] = None,
        storage_bucket: Optional[str] = None,
    ) -> "EngineDependencies":
        """
        Build dependencies from configuration.

        Args:
            brands_dir: Brand data directory (defaults to Config.BRANDS_DIR)
            template_manifest: Template manifest YAML (defaults to Config.TEMPLATE_MANIFEST)
            replicate_api_token: Provider token (defaults to Config.REPLICATE_API_TOKEN)
            storage_bucket: Output bucket (defaults to Config.STORAGE_BUCKET)

        Returns:
            EngineDependencies with every service initialized
        """
        from .core.database import get_supabase_client

        supabase = get_supabase_client()
        brands = BrandRegistry(brands_dir or Config.BRANDS_DIR)
        templates = TemplateRegistry.from_manifest(brands, template_manifest)
        ffmpeg = FFmpegService()

        deps = cls(
            jobs=JobRepository(supabase),
            queue=JobQueue(supabase),
            storage=StorageService(supabase, bucket=storage_bucket),
            brands=brands,
            templates=templates,
            models=ModelRegistry(),
            generation=GenerationService(api_token=replicate_api_token),
            ffmpeg=ffmpeg,
            compositor=CompositorService(ffmpeg),
            briefs=BriefService(supabase),
        )
        logger.info(f"EngineDependencies created: {deps}")
        return deps

    def __str__(self) -> str:
        return (
            f"EngineDependencies(bucket='{self.storage.bucket}', "
            f"brands={self.brands.list_brand_keys()}, ffmpeg={self.ffmpeg.available})"
        )
