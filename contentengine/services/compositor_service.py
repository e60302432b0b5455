"""
Compositor Service - deterministic blueprint rendering with ffmpeg.

Walks the shot timeline in time order and renders one MP4:
- each shot's window shows its pre-generated clip (or a placeholder color
  in preview mode / when no clip exists), scaled to the format's size
- on-screen text fades in and out over a fixed number of frames
- gaps between shots are black
- an end frame (brand, headline, call-to-action) follows the last shot
- music and per-shot voiceovers are mixed underneath

All timing is in frames (seconds * fps, floored) so the same blueprint
always produces the same cut points. Debug mode extracts the midpoint frame
of every shot and flags suspiciously small frames as possibly blank.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..core.config import Config
from ..core.exceptions import ConfigurationError, RetryableGenerationError
from ..core.models import Blueprint, EndFrame, Shot
from ..validation.gates import check_timeline
from .ffmpeg_service import FFmpegService

logger = logging.getLogger(__name__)

TEXT_FADE_FRAMES = 12
PLACEHOLDER_COLORS = ["#2c2c2c", "#1f2937", "#292524", "#1e293b", "#27272a"]
GAP_COLOR = "#000000"
END_FRAME_COLOR = "#0d0d0d"

FORMAT_DIMENSIONS: Dict[str, Tuple[int, int]] = {
    "reel": (1080, 1920),
    "story": (1080, 1920),
    "reel_kit": (1080, 1920),
    "post": (1080, 1350),
    "image_kit": (1080, 1350),
    "image": (1080, 1080),
    "wide_video_kit": (1920, 1080),
}

ASPECT_DIMENSIONS: Dict[str, Tuple[int, int]] = {
    "9:16": (1080, 1920),
    "4:5": (1080, 1350),
    "1:1": (1080, 1080),
    "16:9": (1920, 1080),
}

DEFAULT_DIMENSIONS = (1080, 1920)


def dimensions_for(content_format: str) -> Tuple[int, int]:
    """Output size for a blueprint format (format name or aspect ratio)."""
    return (
        FORMAT_DIMENSIONS.get(content_format)
        or ASPECT_DIMENSIONS.get(content_format)
        or DEFAULT_DIMENSIONS
    )


def _to_frame(seconds: float, fps: int) -> int:
    return math.floor(round(seconds * fps, 6))


class SegmentKind(str, Enum):
    SHOT = "shot"
    GAP = "gap"
    END_FRAME = "end_frame"


@dataclass
class TimelineSegment:
    kind: SegmentKind
    start_frame: int
    end_frame: int
    shot: Optional[Shot] = None
    shot_index: int = 0

    @property
    def frames(self) -> int:
        return self.end_frame - self.start_frame


def build_timeline(blueprint: Blueprint) -> List[TimelineSegment]:
    """
    Lay shots, gaps and the end frame onto the frame grid.

    Raises:
        ValueError: if shots overlap or have non-positive length
    """
    fps = blueprint.fps
    total_frames = math.ceil(round(blueprint.duration_seconds * fps, 6))
    shots = blueprint.ordered_shots()

    violations = check_timeline(shots)
    if violations:
        raise ValueError("; ".join(v.reason for v in violations))

    segments: List[TimelineSegment] = []
    cursor = 0
    for index, shot in enumerate(shots):
        start = _to_frame(shot.time_start, fps)
        end = min(_to_frame(shot.time_end, fps), total_frames)
        if start >= total_frames:
            logger.warning(f"Shot {shot.shot_id} starts after the blueprint ends, skipping")
            continue
        if start > cursor:
            segments.append(TimelineSegment(SegmentKind.GAP, cursor, start))
        if end > start:
            segments.append(TimelineSegment(SegmentKind.SHOT, start, end, shot, index))
        cursor = max(cursor, end)

    if cursor < total_frames:
        segments.append(TimelineSegment(SegmentKind.END_FRAME, cursor, total_frames))
    else:
        logger.warning("Blueprint leaves no time after the last shot, end frame omitted")

    return segments


def resolve_end_frame(blueprint: Blueprint, headline: str, cta: str, brand_name: str) -> EndFrame:
    """End frame content: blueprint values first, then the given brand defaults."""
    declared = blueprint.end_frame or EndFrame()
    return EndFrame(
        headline=declared.headline or headline,
        cta=declared.cta or cta,
        brand_name=declared.brand_name or brand_name,
    )


@dataclass
class ShotMedia:
    """Pre-generated media for one shot"""
    clip_path: Optional[Path] = None
    voiceover_path: Optional[Path] = None


@dataclass
class RenderPlan:
    args: List[str]
    text_files: Dict[Path, str]
    segments: List[TimelineSegment]
    width: int
    height: int
    fps: int
    total_frames: int

    @property
    def duration_seconds(self) -> float:
        return self.total_frames / self.fps


@dataclass
class FrameCheck:
    shot_id: str
    at_seconds: float
    byte_size: int
    possibly_blank: bool


@dataclass
class CompositeResult:
    path: Path
    duration_seconds: float
    frame_checks: List[FrameCheck] = field(default_factory=list)


def _seconds(frames: int, fps: int) -> str:
    return f"{frames / fps:.3f}"


def _filter_path(path: Path) -> str:
    return str(path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")


def _color(hex_color: str) -> str:
    return "0x" + hex_color.lstrip("#")


def build_render_plan(
    blueprint: Blueprint,
    media: Dict[str, ShotMedia],
    output_path: Path,
    work_dir: Path,
    end_frame: EndFrame,
    music_path: Optional[Path] = None,
    preview: bool = False,
    font_file: Optional[str] = None,
) -> RenderPlan:
    """Build the ffmpeg command for a blueprint without running it."""
    width, height = dimensions_for(blueprint.format)
    fps = blueprint.fps
    segments = build_timeline(blueprint)
    total_frames = segments[-1].end_frame if segments else 0
    if total_frames <= 0:
        raise ValueError("Blueprint has nothing to render")

    fade = TEXT_FADE_FRAMES / fps
    font = f"fontfile='{_filter_path(Path(font_file))}':" if font_file else ""

    def drawtext(text_file: Path, size: int, y: str, duration: float, fade_out: bool = True) -> str:
        if fade_out:
            alpha = (f"if(lt(t,{fade:.3f}),t/{fade:.3f},"
                     f"if(gt(t,{duration - fade:.3f}),max(({duration:.3f}-t)/{fade:.3f},0),1))")
        else:
            alpha = f"if(lt(t,{fade:.3f}),t/{fade:.3f},1)"
        return (
            f"drawtext={font}textfile='{_filter_path(text_file)}':fontcolor=white:"
            f"fontsize={size}:x=(w-text_w)/2:y={y}:alpha='{alpha}'"
        )

    inputs: List[str] = []
    filters: List[str] = []
    text_files: Dict[Path, str] = {}
    input_count = 0

    for i, seg in enumerate(segments):
        duration = seg.frames / fps
        clip = None
        if seg.kind is SegmentKind.SHOT and not preview:
            clip = (media.get(seg.shot.shot_id) or ShotMedia()).clip_path

        if clip is not None:
            inputs += ["-stream_loop", "-1", "-i", str(clip)]
            chain = (
                f"[{input_count}:v]trim=duration={duration:.3f},setpts=PTS-STARTPTS,"
                f"scale={width}:{height}:force_original_aspect_ratio=increase,"
                f"crop={width}:{height},fps={fps},setsar=1,format=yuv420p"
            )
        else:
            if seg.kind is SegmentKind.SHOT:
                color = PLACEHOLDER_COLORS[seg.shot_index % len(PLACEHOLDER_COLORS)]
            elif seg.kind is SegmentKind.END_FRAME:
                color = END_FRAME_COLOR
            else:
                color = GAP_COLOR
            inputs += ["-f", "lavfi", "-i",
                       f"color=c={_color(color)}:s={width}x{height}:r={fps}:d={duration:.3f}"]
            chain = f"[{input_count}:v]setsar=1,format=yuv420p"
        input_count += 1

        if seg.kind is SegmentKind.SHOT and seg.shot.text:
            text_file = work_dir / f"shot_{i}.txt"
            text_files[text_file] = seg.shot.text
            chain += "," + drawtext(text_file, height // 24, "h*0.72", duration)
        elif seg.kind is SegmentKind.END_FRAME:
            lines = [
                (end_frame.brand_name, height // 40, "h*0.38"),
                (end_frame.headline, height // 18, "(h-text_h)/2"),
                (end_frame.cta, height // 36, "h*0.6"),
            ]
            for n, (text, size, y) in enumerate(lines):
                if not text:
                    continue
                text_file = work_dir / f"end_frame_{n}.txt"
                text_files[text_file] = text
                chain += "," + drawtext(text_file, size, y, duration, fade_out=False)

        filters.append(f"{chain}[v{i}]")

    video_labels = "".join(f"[v{i}]" for i in range(len(segments)))
    filters.append(f"{video_labels}concat=n={len(segments)}:v=1:a=0[outv]")

    total_seconds = _seconds(total_frames, fps)
    audio_labels: List[str] = []
    if music_path is not None:
        inputs += ["-stream_loop", "-1", "-i", str(music_path)]
        filters.append(f"[{input_count}:a]atrim=duration={total_seconds},"
                       f"asetpts=PTS-STARTPTS,volume=0.35[a_music]")
        audio_labels.append("[a_music]")
        input_count += 1

    for seg in segments:
        if seg.kind is not SegmentKind.SHOT:
            continue
        shot_media = media.get(seg.shot.shot_id)
        if shot_media is None or shot_media.voiceover_path is None:
            continue
        delay_ms = int(round(seg.start_frame / fps * 1000))
        label = f"[a_vo{len(audio_labels)}]"
        inputs += ["-i", str(shot_media.voiceover_path)]
        filters.append(f"[{input_count}:a]adelay={delay_ms}|{delay_ms}{label}")
        audio_labels.append(label)
        input_count += 1

    if audio_labels:
        filters.append(
            f"{''.join(audio_labels)}amix=inputs={len(audio_labels)}:duration=longest:"
            f"normalize=0,atrim=duration={total_seconds}[outa]"
        )

    args = ["-y", *inputs, "-filter_complex", ";".join(filters), "-map", "[outv]"]
    if audio_labels:
        args += ["-map", "[outa]", "-c:a", "aac"]
    else:
        args += ["-an"]
    args += [
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-r", str(fps),
        "-t", total_seconds,
        "-movflags", "+faststart",
        str(output_path),
    ]

    return RenderPlan(
        args=args,
        text_files=text_files,
        segments=segments,
        width=width,
        height=height,
        fps=fps,
        total_frames=total_frames,
    )


class CompositorService:
    """Renders blueprints to MP4 through FFmpegService."""

    def __init__(
        self,
        ffmpeg: FFmpegService,
        blank_frame_min_bytes: Optional[int] = None,
        debug: Optional[bool] = None,
        font_file: Optional[str] = None,
    ):
        self.ffmpeg = ffmpeg
        self.blank_frame_min_bytes = (
            blank_frame_min_bytes if blank_frame_min_bytes is not None else Config.BLANK_FRAME_MIN_BYTES
        )
        self.debug = Config.COMPOSITOR_DEBUG if debug is None else debug
        self.font_file = font_file

    async def render(
        self,
        blueprint: Blueprint,
        media: Dict[str, ShotMedia],
        output_path: Path,
        *,
        end_frame: EndFrame,
        music_path: Optional[Path] = None,
        preview: bool = False,
        debug: Optional[bool] = None,
    ) -> CompositeResult:
        """
        Render a blueprint to output_path.

        Args:
            blueprint: Validated blueprint
            media: Per-shot clips and voiceovers keyed by shot id
            output_path: Destination MP4
            end_frame: Resolved end-frame content
            music_path: Optional music bed
            preview: Use placeholder colors instead of clips
            debug: Override the service's debug setting

        Returns:
            CompositeResult with output path and frame checks (debug only)
        """
        if not self.ffmpeg.available:
            raise ConfigurationError("ffmpeg is required for blueprint compositing")

        work_dir = output_path.parent / f"{output_path.stem}_work"
        work_dir.mkdir(parents=True, exist_ok=True)

        plan = build_render_plan(
            blueprint, media, output_path, work_dir, end_frame,
            music_path=music_path, preview=preview, font_file=self.font_file,
        )
        for text_file, text in plan.text_files.items():
            text_file.write_text(text, encoding="utf-8")

        logger.info(
            f"Rendering {len(plan.segments)} segments, {plan.width}x{plan.height} "
            f"@ {plan.fps}fps, {plan.duration_seconds:.2f}s (preview={preview})"
        )
        ok = await asyncio.to_thread(self.ffmpeg.run, plan.args)
        if not ok or not output_path.exists():
            raise RetryableGenerationError("Compositor render failed")

        result = CompositeResult(path=output_path, duration_seconds=plan.duration_seconds)
        if self.debug if debug is None else debug:
            result.frame_checks = await asyncio.to_thread(
                self.check_frames, output_path, plan, work_dir
            )
        return result

    def check_frames(self, video_path: Path, plan: RenderPlan, work_dir: Path) -> List[FrameCheck]:
        """Extract each shot's midpoint frame and flag tiny encodes."""
        checks: List[FrameCheck] = []
        for seg in plan.segments:
            if seg.kind is not SegmentKind.SHOT:
                continue
            at_seconds = (seg.start_frame + seg.end_frame) / 2 / plan.fps
            frame_path = work_dir / f"frame_{seg.shot.shot_id}.png"
            ok = self.ffmpeg.extract_frame(video_path, at_seconds, frame_path)
            size = frame_path.stat().st_size if ok and frame_path.exists() else 0
            blank = size < self.blank_frame_min_bytes
            if blank:
                logger.warning(
                    f"Shot {seg.shot.shot_id} frame at {at_seconds:.2f}s is {size} bytes, possibly blank"
                )
            checks.append(FrameCheck(seg.shot.shot_id, round(at_seconds, 3), size, blank))
        return checks
