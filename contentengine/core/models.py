"""
Pydantic models for jobs, assets, queue messages, blueprints and briefs
"""

from typing import Optional, List, Dict, Any, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


# ============================================================================
# Enums
# ============================================================================

class JobStatus(str, Enum):
    """Lifecycle status of a content job"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class AssetType(str, Enum):
    """Generated media type"""
    IMAGE = "image"
    VIDEO = "video"


class ContentFormat(str, Enum):
    """Output formats accepted by the pipeline"""
    REEL = "reel"
    STORY = "story"
    POST = "post"
    IMAGE = "image"
    IMAGE_KIT = "image_kit"
    REEL_KIT = "reel_kit"
    WIDE_VIDEO_KIT = "wide_video_kit"


class Quality(str, Enum):
    """Requested output quality (selection is not quality-aware yet)"""
    DRAFT = "draft"
    FINAL = "final"


class IntentCategory(str, Enum):
    """Campaign goal; parameterizes beats, pacing and rhythm"""
    GROWTH = "growth"
    LEAD_GEN = "lead_gen"
    AUTHORITY = "authority"
    EDUCATION = "education"
    CONVERSION = "conversion"


IMAGE_FORMATS = (ContentFormat.IMAGE, ContentFormat.IMAGE_KIT)

# Formats that can be composited from a shot blueprint
BLUEPRINT_FORMATS = (ContentFormat.REEL_KIT, ContentFormat.WIDE_VIDEO_KIT)

VariableValue = Union[str, int, float, bool]


# ============================================================================
# Creative brief
# ============================================================================

class CompactCreativeBrief(BaseModel):
    """Short creative-direction contract produced upstream (LLM or preset)"""
    model_config = ConfigDict(populate_by_name=True)

    v: int = 1
    intent_category: IntentCategory = Field(
        default=IntentCategory.GROWTH, alias="intentCategory",
        description="Campaign goal classification"
    )
    concept: str = ""
    tone: str = ""
    look: str = ""
    camera: str = ""
    light: str = ""
    music: str = ""
    vo: str = Field(default="", description="Voiceover style")
    text: str = Field(default="", description="On-screen text style")
    rules: List[str] = Field(default_factory=list, description="Free-text mandatory rules")


# ============================================================================
# Blueprint
# ============================================================================

class OnScreenText(BaseModel):
    """Text overlay for a single shot"""
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    position: Optional[str] = None
    animation_rules: Optional[str] = Field(default=None, alias="animationRules")


class Shot(BaseModel):
    """One time-bounded segment of a blueprint"""
    model_config = ConfigDict(populate_by_name=True)

    shot_id: str = Field(..., alias="shotId")
    time_start: float = Field(..., alias="timeStart")
    time_end: float = Field(..., alias="timeEnd")
    shot_type: str = Field(default="", alias="shotType")
    camera_movement: str = Field(default="", alias="cameraMovement")
    scene_description: str = Field(default="", alias="sceneDescription")
    on_screen_text: Optional[OnScreenText] = Field(default=None, alias="onScreenText")
    visual_source: Optional[str] = Field(
        default=None, alias="visualSource",
        description="Visual source tag, e.g. 'generated' or 'solid_bg'"
    )
    video_prompt: Optional[str] = Field(default=None, alias="videoPrompt")
    scene_video_url: Optional[str] = Field(
        default=None, alias="sceneVideoUrl",
        description="Pre-generated clip for this shot, used instead of a provider call"
    )
    voiceover_url: Optional[str] = Field(default=None, alias="voiceoverUrl")
    beat: Optional[str] = Field(default=None, description="Narrative beat covered by this shot")
    interrupt: Optional[str] = Field(default=None, description="Pattern interrupt marker")

    @property
    def duration(self) -> float:
        return self.time_end - self.time_start

    @property
    def text(self) -> str:
        """Stripped on-screen text, empty string when absent."""
        if self.on_screen_text is None or not self.on_screen_text.text:
            return ""
        return self.on_screen_text.text.strip()


class EndFrame(BaseModel):
    """Trailing headline and call-to-action card"""
    model_config = ConfigDict(populate_by_name=True)

    headline: Optional[str] = None
    cta: Optional[str] = None
    brand_name: Optional[str] = Field(default=None, alias="brandName")


class Blueprint(BaseModel):
    """Timed, shot-by-shot plan for a multi-shot video"""
    model_config = ConfigDict(populate_by_name=True)

    format: str
    duration_seconds: float = Field(..., alias="durationSeconds", gt=0)
    fps: int = Field(default=24, gt=0)
    music: Optional[str] = None
    voiceover_script: Optional[str] = Field(default=None, alias="voiceoverScript")
    end_frame: Optional[EndFrame] = Field(default=None, alias="endFrame")
    shots: List[Shot] = Field(default_factory=list)

    def ordered_shots(self) -> List[Shot]:
        return sorted(self.shots, key=lambda s: (s.time_start, s.time_end))


# ============================================================================
# Jobs, assets and queue messages
# ============================================================================

class JobInput(BaseModel):
    """Generation parameters carried in the queue message"""
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    brand: str = Field(..., min_length=1, alias="brand_key")
    format: ContentFormat
    objective: str = "awareness"
    hook_type: Optional[str] = None
    model_key: Optional[str] = Field(default=None, description="Model override")
    quality: Quality = Quality.DRAFT
    length_seconds: Optional[int] = Field(default=None, gt=0, le=60)
    aspect_ratio: Optional[str] = None
    collection: Optional[str] = None
    project_type: Optional[str] = None
    generation_id: Optional[str] = Field(
        default=None, description="Upstream generation record to merge"
    )
    brief: Optional[CompactCreativeBrief] = None
    brief_key: Optional[str] = Field(default=None, description="Cached creative brief (creative_briefs.brief_key)")
    brief_preset: Optional[str] = None
    blueprint: Optional[Blueprint] = None
    music_url: Optional[str] = None
    preview: bool = Field(default=False, description="Composite placeholders, no provider calls")
    variables: Dict[str, VariableValue] = Field(default_factory=dict)

    @property
    def is_video(self) -> bool:
        return self.format not in IMAGE_FORMATS

    @property
    def asset_type(self) -> AssetType:
        return AssetType.VIDEO if self.is_video else AssetType.IMAGE

    @property
    def extension(self) -> str:
        return "mp4" if self.is_video else "png"

    @property
    def content_type(self) -> str:
        return "video/mp4" if self.is_video else "image/png"


class QueueMessage(BaseModel):
    """Message claimed from the content job queue"""
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    payload: JobInput
    attempt: int = Field(default=1, ge=1, description="1-based delivery attempt")


class Job(BaseModel):
    """Job record"""
    id: str
    status: JobStatus = JobStatus.PENDING
    brand: str
    format: str
    objective: Optional[str] = None
    hook_type: Optional[str] = None
    model: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    cost: Optional[float] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Asset(BaseModel):
    """Generated artifact attached to a completed job"""
    id: Optional[str] = None
    job_id: str
    type: AssetType
    url: str
    duration_seconds: Optional[float] = None
    created_at: Optional[datetime] = None
