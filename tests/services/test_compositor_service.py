"""
Tests for the compositor: frame-grid timeline, ffmpeg plan and render flow.

ffmpeg itself is never executed; FFmpegService is replaced with a mock that
writes the files a real run would produce.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from contentengine.core.exceptions import ConfigurationError, RetryableGenerationError
from contentengine.core.models import Blueprint, EndFrame
from contentengine.services.compositor_service import (
    CompositorService,
    SegmentKind,
    ShotMedia,
    build_render_plan,
    build_timeline,
    dimensions_for,
    resolve_end_frame,
)


def _blueprint(shots, duration=10, fps=24, fmt="reel_kit", end_frame=None):
    return Blueprint(
        format=fmt,
        durationSeconds=duration,
        fps=fps,
        endFrame=end_frame,
        shots=[
            {"shotId": sid, "timeStart": start, "timeEnd": end,
             "onScreenText": {"text": text} if text else None}
            for sid, start, end, text in shots
        ],
    )


END = EndFrame(headline="Light, controlled", cta="Book now", brand_name="Acme")


class TestBuildTimeline:
    """Shots, gaps and the end frame on the frame grid."""

    def test_contiguous_shots_with_end_frame(self):
        segments = build_timeline(_blueprint([("a", 0, 2, "A"), ("b", 2, 4, "B")], duration=5))
        assert [(s.kind, s.start_frame, s.end_frame) for s in segments] == [
            (SegmentKind.SHOT, 0, 48),
            (SegmentKind.SHOT, 48, 96),
            (SegmentKind.END_FRAME, 96, 120),
        ]

    def test_gap_between_shots(self):
        segments = build_timeline(_blueprint([("a", 0, 2, "A"), ("b", 3, 4, "B")], duration=5))
        kinds = [s.kind for s in segments]
        assert kinds == [SegmentKind.SHOT, SegmentKind.GAP, SegmentKind.SHOT, SegmentKind.END_FRAME]
        gap = segments[1]
        assert (gap.start_frame, gap.end_frame) == (48, 72)

    def test_leading_gap(self):
        segments = build_timeline(_blueprint([("a", 1, 2, "A")], duration=3))
        assert segments[0].kind is SegmentKind.GAP
        assert segments[0].frames == 24

    def test_end_frame_omitted_when_shots_fill_duration(self):
        segments = build_timeline(_blueprint([("a", 0, 2, "A"), ("b", 2, 4, "B")], duration=4))
        assert [s.kind for s in segments] == [SegmentKind.SHOT, SegmentKind.SHOT]

    def test_fractional_times_floor_to_frames(self):
        segments = build_timeline(_blueprint([("a", 0, 1.01, "A")], duration=2, fps=30))
        # 1.01 * 30 = 30.3 -> 30
        assert segments[0].end_frame == 30

    def test_no_float_noise(self):
        # 0.29 * 100 is 28.999999999999996
        segments = build_timeline(_blueprint([("a", 0, 0.29, "A")], duration=1, fps=100))
        assert segments[0].end_frame == 29

    def test_shot_past_duration_is_clipped(self):
        segments = build_timeline(_blueprint([("a", 0, 2, "A"), ("b", 2, 6, "B")], duration=3))
        assert segments[-1].kind is SegmentKind.SHOT
        assert segments[-1].end_frame == 72

    def test_order_follows_time_not_list(self):
        segments = build_timeline(_blueprint([("b", 2, 4, "B"), ("a", 0, 2, "A")], duration=5))
        assert [s.shot.shot_id for s in segments if s.shot] == ["a", "b"]

    def test_overlap_raises(self):
        with pytest.raises(ValueError, match="overlaps"):
            build_timeline(_blueprint([("a", 0, 3, "A"), ("b", 2, 4, "B")]))


class TestDimensions:
    @pytest.mark.parametrize("fmt,size", [
        ("reel_kit", (1080, 1920)),
        ("wide_video_kit", (1920, 1080)),
        ("16:9", (1920, 1080)),
        ("something", (1080, 1920)),
    ])
    def test_dimensions_for(self, fmt, size):
        assert dimensions_for(fmt) == size


class TestResolveEndFrame:
    def test_blueprint_values_win(self):
        bp = _blueprint([("a", 0, 2, "A")], end_frame={"headline": "Own headline"})
        end = resolve_end_frame(bp, "Default headline", "Default CTA", "Brand")
        assert end.headline == "Own headline"
        assert end.cta == "Default CTA"
        assert end.brand_name == "Brand"

    def test_defaults_without_end_frame(self):
        end = resolve_end_frame(_blueprint([("a", 0, 2, "A")]), "H", "C", "B")
        assert (end.headline, end.cta, end.brand_name) == ("H", "C", "B")


class TestBuildRenderPlan:
    """ffmpeg argument construction."""

    def test_preview_uses_color_placeholders(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "Hello"), ("b", 2, 4, "World")], duration=5)
        plan = build_render_plan(bp, {}, tmp_path / "out.mp4", tmp_path, END, preview=True)

        assert plan.args.count("lavfi") == 3
        assert "-stream_loop" not in plan.args
        assert "-an" in plan.args
        assert plan.args[-1] == str(tmp_path / "out.mp4")
        assert plan.total_frames == 120
        assert plan.duration_seconds == 5
        assert (plan.width, plan.height) == (1080, 1920)
        graph = plan.args[plan.args.index("-filter_complex") + 1]
        assert "concat=n=3:v=1:a=0[outv]" in graph

    def test_text_files_for_shots_and_end_frame(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "Hello"), ("b", 2, 4, None)], duration=5)
        plan = build_render_plan(bp, {}, tmp_path / "out.mp4", tmp_path, END, preview=True)
        assert plan.text_files == {
            tmp_path / "shot_0.txt": "Hello",
            tmp_path / "end_frame_0.txt": "Acme",
            tmp_path / "end_frame_1.txt": "Light, controlled",
            tmp_path / "end_frame_2.txt": "Book now",
        }

    def test_clips_are_looped_and_trimmed(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "Hello")], duration=2)
        media = {"a": ShotMedia(clip_path=tmp_path / "a.mp4")}
        plan = build_render_plan(bp, media, tmp_path / "out.mp4", tmp_path, END)

        assert plan.args[1:5] == ["-stream_loop", "-1", "-i", str(tmp_path / "a.mp4")]
        graph = plan.args[plan.args.index("-filter_complex") + 1]
        assert "[0:v]trim=duration=2.000" in graph
        assert "crop=1080:1920" in graph

    def test_missing_clip_falls_back_to_placeholder(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "Hello")], duration=2)
        plan = build_render_plan(bp, {"a": ShotMedia()}, tmp_path / "out.mp4", tmp_path, END)
        assert "lavfi" in plan.args

    def test_music_and_voiceover_mixed(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "A"), ("b", 2, 4, "B")], duration=4)
        media = {"b": ShotMedia(voiceover_path=tmp_path / "vo_b.mp3")}
        plan = build_render_plan(
            bp, media, tmp_path / "out.mp4", tmp_path, END,
            music_path=tmp_path / "music.mp3", preview=True,
        )
        graph = plan.args[plan.args.index("-filter_complex") + 1]
        assert "[a_music]" in graph
        assert "adelay=2000|2000[a_vo1]" in graph
        assert "amix=inputs=2" in graph
        assert "[outa]" in plan.args
        assert "-an" not in plan.args

    def test_output_settings(self, tmp_path):
        bp = _blueprint([("a", 0, 2, "A")], duration=3, fps=30)
        plan = build_render_plan(bp, {}, tmp_path / "out.mp4", tmp_path, END, preview=True)
        args = plan.args
        assert args[args.index("-c:v") + 1] == "libx264"
        assert args[args.index("-pix_fmt") + 1] == "yuv420p"
        assert args[args.index("-r") + 1] == "30"
        assert args[args.index("-t") + 1] == "3.000"

    def test_deterministic(self, tmp_path):
        bp = _blueprint([("a", 0, 1.5, "A"), ("b", 2, 3.3, "B")], duration=4)
        first = build_render_plan(bp, {}, tmp_path / "out.mp4", tmp_path, END, preview=True)
        second = build_render_plan(bp, {}, tmp_path / "out.mp4", tmp_path, END, preview=True)
        assert first.args == second.args


def _ffmpeg(frame_bytes=4096, succeed=True):
    ffmpeg = MagicMock()
    ffmpeg.available = True

    def run(args):
        if succeed:
            Path(args[-1]).write_bytes(b"mp4")
        return succeed

    def extract_frame(video_path, at_seconds, output_path):
        output_path.write_bytes(b"\x00" * frame_bytes)
        return True

    ffmpeg.run.side_effect = run
    ffmpeg.extract_frame.side_effect = extract_frame
    return ffmpeg


class TestCompositorRender:
    @pytest.mark.asyncio
    async def test_render_writes_text_files_and_output(self, tmp_path):
        service = CompositorService(_ffmpeg(), debug=False)
        bp = _blueprint([("a", 0, 2, "Hello")], duration=3)
        output = tmp_path / "composite.mp4"

        result = await service.render(bp, {}, output, end_frame=END, preview=True)

        assert result.path == output
        assert result.duration_seconds == 3
        assert result.frame_checks == []
        assert (tmp_path / "composite_work" / "shot_0.txt").read_text() == "Hello"

    @pytest.mark.asyncio
    async def test_failed_run_is_retryable(self, tmp_path):
        service = CompositorService(_ffmpeg(succeed=False), debug=False)
        bp = _blueprint([("a", 0, 2, "Hello")], duration=3)
        with pytest.raises(RetryableGenerationError):
            await service.render(bp, {}, tmp_path / "composite.mp4", end_frame=END)

    @pytest.mark.asyncio
    async def test_requires_ffmpeg(self, tmp_path):
        ffmpeg = MagicMock()
        ffmpeg.available = False
        service = CompositorService(ffmpeg)
        with pytest.raises(ConfigurationError):
            await service.render(_blueprint([("a", 0, 2, "A")]), {}, tmp_path / "o.mp4", end_frame=END)

    @pytest.mark.asyncio
    async def test_debug_flags_small_frames(self, tmp_path):
        service = CompositorService(_ffmpeg(frame_bytes=100), blank_frame_min_bytes=2048)
        bp = _blueprint([("a", 0, 2, "A"), ("b", 2, 4, "B")], duration=5)

        result = await service.render(bp, {}, tmp_path / "composite.mp4", end_frame=END, debug=True)

        assert [c.shot_id for c in result.frame_checks] == ["a", "b"]
        assert result.frame_checks[0].at_seconds == 1.0
        assert result.frame_checks[1].at_seconds == 3.0
        assert all(c.possibly_blank for c in result.frame_checks)

    @pytest.mark.asyncio
    async def test_debug_passes_large_frames(self, tmp_path):
        service = CompositorService(_ffmpeg(frame_bytes=5000), blank_frame_min_bytes=2048, debug=True)
        bp = _blueprint([("a", 0, 2, "A")], duration=3)
        result = await service.render(bp, {}, tmp_path / "composite.mp4", end_frame=END)
        assert result.frame_checks[0].possibly_blank is False
        assert result.frame_checks[0].byte_size == 5000
