"""
Model Selector - maps (format, quality, override) to a generation model.

Selection order:
1. Override key, if registered and it supports the format
2. Model flagged default for the format
3. First registered model that supports the format

A format with no supporting model is a configuration error.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ModelInput(str, Enum):
    """What the model consumes"""
    TEXT = "text"
    IMAGE = "image"


class ModelConfig(BaseModel):
    """A registered generation model"""
    model_config = ConfigDict(protected_namespaces=())

    key: str
    provider_model_id: str = Field(..., description="owner/name on the provider")
    formats_supported: List[str]
    default_for_format: Dict[str, bool] = Field(default_factory=dict)
    input_kind: ModelInput = ModelInput.TEXT
    cost_tier: str = ""
    cost_usd: float = Field(default=0.0, ge=0, description="Estimated cost per run")
    short_description: str = ""
    page_url: str = ""

    def supports(self, content_format: str) -> bool:
        return content_format in self.formats_supported

    def is_default_for(self, content_format: str) -> bool:
        return self.supports(content_format) and bool(self.default_for_format.get(content_format))


_VIDEO_FORMATS = ["reel", "story", "post", "reel_kit", "wide_video_kit"]
_IMAGE_FORMATS = ["image", "image_kit"]

DEFAULT_MODELS: List[ModelConfig] = [
    ModelConfig(
        key="minimax-video-01",
        provider_model_id="minimax/video-01",
        formats_supported=_VIDEO_FORMATS,
        default_for_format={"reel": True, "reel_kit": True, "wide_video_kit": True},
        cost_tier="~$0.20/video",
        cost_usd=0.20,
        short_description="High-quality text-to-video, 720p, up to 6s",
        page_url="https://replicate.com/minimax/video-01",
    ),
    ModelConfig(
        key="stable-video-diffusion",
        provider_model_id="stability-ai/stable-video-diffusion",
        formats_supported=_VIDEO_FORMATS,
        input_kind=ModelInput.IMAGE,
        cost_tier="~$0.10/video",
        cost_usd=0.10,
        short_description="Image-to-video animation from stills",
        page_url="https://replicate.com/stability-ai/stable-video-diffusion",
    ),
    ModelConfig(
        key="flux-schnell",
        provider_model_id="black-forest-labs/flux-schnell",
        formats_supported=_IMAGE_FORMATS,
        default_for_format={"image": True, "image_kit": True},
        cost_tier="~$0.003/image",
        cost_usd=0.003,
        short_description="Fast text-to-image, 1-4 steps, Apache 2.0",
        page_url="https://replicate.com/black-forest-labs/flux-schnell",
    ),
    ModelConfig(
        key="flux-dev",
        provider_model_id="black-forest-labs/flux-dev",
        formats_supported=_IMAGE_FORMATS,
        cost_tier="~$0.03/image",
        cost_usd=0.03,
        short_description="High-quality open-weight, strong prompt adherence",
        page_url="https://replicate.com/black-forest-labs/flux-dev",
    ),
    ModelConfig(
        key="sdxl",
        provider_model_id="stability-ai/sdxl",
        formats_supported=_IMAGE_FORMATS,
        cost_tier="~$0.02/image",
        cost_usd=0.02,
        short_description="Stable Diffusion XL, versatile and widely used",
        page_url="https://replicate.com/stability-ai/sdxl",
    ),
]


def _format_key(content_format: Any) -> str:
    return content_format.value if isinstance(content_format, Enum) else str(content_format)


class ModelRegistry:
    """Ordered registry of generation models."""

    def __init__(self, models: Optional[List[ModelConfig]] = None):
        self._models: Dict[str, ModelConfig] = {}
        for model in (DEFAULT_MODELS if models is None else models):
            self.register(model)

    def register(self, model: ModelConfig) -> None:
        self._models[model.key] = model

    def get(self, key: str) -> Optional[ModelConfig]:
        return self._models.get(key)

    def select(
        self,
        content_format: Any,
        quality: Any = None,
        override_key: Optional[str] = None,
    ) -> ModelConfig:
        """
        Select a model for a format.

        Args:
            content_format: Output format (enum or string)
            quality: Requested quality; accepted but not used for selection yet
            override_key: Optional model key requested by the job

        Returns:
            ModelConfig to invoke

        Raises:
            ConfigurationError: if no registered model supports the format
        """
        fmt = _format_key(content_format)

        if override_key:
            model = self._models.get(override_key)
            if model and model.supports(fmt):
                return model
            logger.warning(f"Model override '{override_key}' does not support {fmt}, ignoring")

        for model in self._models.values():
            if model.is_default_for(fmt):
                return model

        for model in self._models.values():
            if model.supports(fmt):
                return model

        raise ConfigurationError(f"No model configured for format: {fmt}")

    def default_image_model(self) -> ModelConfig:
        """Text-to-image model used for the first stage of image-to-video."""
        return self.select("image")

    def list_models(self) -> List[Dict[str, Any]]:
        """Model metadata for the API/UI layer."""
        return [model.model_dump(mode="json") for model in self._models.values()]
