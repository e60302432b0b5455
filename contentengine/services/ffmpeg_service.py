"""
FFmpeg Service

Media processing via FFmpeg/FFprobe for:
- Probing generated clips (video stream, frames, duration)
- Extracting still frames for blank-frame diagnostics
- Running compositor render commands

All sync subprocess calls should be wrapped with asyncio.to_thread()
when called from async code.
"""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class VideoProbe:
    """ffprobe summary of a media file"""
    has_video_stream: bool
    has_frames: bool
    duration: float = 0.0
    width: int = 0
    height: int = 0
    codec: str = ""
    error: Optional[str] = None


class FFmpegService:
    """Service for video processing via FFmpeg"""

    def __init__(self):
        """Initialize FFmpeg service and locate executables."""
        self._ffmpeg_path = self._find("ffmpeg")
        self._ffprobe_path = self._find("ffprobe")
        logger.info(f"FFmpegService initialized (ffmpeg: {self._ffmpeg_path})")

    @staticmethod
    def _find(name: str) -> Optional[str]:
        path = shutil.which(name)
        if not path:
            logger.warning(f"{name} not found. Video processing will be unavailable.")
        return path

    @property
    def available(self) -> bool:
        """Check if FFmpeg is available"""
        return bool(self._ffmpeg_path and self._ffprobe_path)

    @property
    def ffmpeg_path(self) -> Optional[str]:
        return self._ffmpeg_path

    def probe(self, media_path: Path) -> VideoProbe:
        """
        Probe a media file.

        NOTE: This is a sync method. When calling from async code,
        wrap with: await asyncio.to_thread(ffmpeg.probe, path)

        Args:
            media_path: Local path of the clip

        Returns:
            VideoProbe; has_video_stream=False with error set on failure
        """
        if not self._ffprobe_path:
            return VideoProbe(False, False, error="ffprobe not available")

        try:
            result = subprocess.run(
                [
                    self._ffprobe_path,
                    "-v", "error",
                    "-print_format", "json",
                    "-show_format",
                    "-show_streams",
                    str(media_path),
                ],
                capture_output=True,
                text=True,
                timeout=30,
                check=True,
            )
            data = json.loads(result.stdout or "{}")
        except subprocess.CalledProcessError as e:
            logger.error(f"ffprobe failed for {media_path}: {e.stderr}")
            return VideoProbe(False, False, error=(e.stderr or str(e)).strip())
        except subprocess.TimeoutExpired:
            logger.error(f"ffprobe timed out for {media_path}")
            return VideoProbe(False, False, error="ffprobe timed out")
        except json.JSONDecodeError as e:
            logger.error(f"Unreadable ffprobe output for {media_path}: {e}")
            return VideoProbe(False, False, error="unreadable ffprobe output")

        video_stream = next(
            (s for s in data.get("streams", []) if s.get("codec_type") == "video"), None
        )
        if video_stream is None:
            return VideoProbe(False, False, error="No video stream found")

        try:
            nb_frames = int(video_stream.get("nb_frames") or 0)
        except ValueError:
            nb_frames = 0
        try:
            duration = float((data.get("format") or {}).get("duration") or 0)
        except ValueError:
            duration = 0.0

        return VideoProbe(
            has_video_stream=True,
            has_frames=nb_frames > 0 or duration > 0,
            duration=duration,
            width=int(video_stream.get("width") or 0),
            height=int(video_stream.get("height") or 0),
            codec=video_stream.get("codec_name") or "",
        )

    def extract_frame(self, video_path: Path, at_seconds: float, output_path: Path) -> bool:
        """
        Extract a single PNG frame.

        NOTE: This is a sync method. When calling from async code,
        wrap with: await asyncio.to_thread(ffmpeg.extract_frame, ...)

        Returns:
            True if the frame was written, False otherwise
        """
        if not self._ffmpeg_path:
            logger.error("FFmpeg not available, cannot extract frame")
            return False

        try:
            subprocess.run(
                [
                    self._ffmpeg_path,
                    "-y",
                    "-ss", f"{at_seconds:.3f}",
                    "-i", str(video_path),
                    "-frames:v", "1",
                    str(output_path),
                ],
                capture_output=True,
                timeout=60,
                check=True,
            )
            return output_path.exists()
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to extract frame at {at_seconds}s: "
                         f"{e.stderr.decode() if e.stderr else str(e)}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"Timed out extracting frame at {at_seconds}s")
            return False

    def run(self, args: List[str], timeout: int = 600) -> bool:
        """
        Run ffmpeg with the given arguments (without the executable).

        NOTE: This is a sync method. When calling from async code,
        wrap with: await asyncio.to_thread(ffmpeg.run, args)

        Returns:
            True if ffmpeg exited cleanly, False otherwise
        """
        if not self._ffmpeg_path:
            logger.error("FFmpeg not available, cannot render")
            return False

        try:
            subprocess.run(
                [self._ffmpeg_path, *args],
                capture_output=True,
                timeout=timeout,
                check=True,
            )
            return True
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
            logger.error(f"ffmpeg failed: {stderr[-2000:]}")
            return False
        except subprocess.TimeoutExpired:
            logger.error(f"ffmpeg timed out after {timeout}s")
            return False
