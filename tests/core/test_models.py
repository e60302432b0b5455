"""
Tests for core models and error classes.

Tests: alias handling, JobInput derived properties, blueprint ordering and
duration bounds, shot text normalization, error message rendering.
"""

import json

import pytest
from pydantic import ValidationError

from contentengine.core.exceptions import (
    ConfigurationError,
    NarrativeValidationError,
    NonRetryableValidationError,
    ProviderOutputError,
    RetryableGenerationError,
)
from contentengine.core.models import (
    AssetType,
    Blueprint,
    CompactCreativeBrief,
    ContentFormat,
    IntentCategory,
    JobInput,
    JobStatus,
    QueueMessage,
    Shot,
)


class TestJobInput:
    """JobInput parsing and derived properties."""

    def test_brand_key_alias(self):
        job = JobInput(brand_key="nablinds", format="image_kit")
        assert job.brand == "nablinds"
        assert job.format == ContentFormat.IMAGE_KIT

    def test_populate_by_name(self):
        job = JobInput(brand="acme", format="reel")
        assert job.brand == "acme"

    def test_image_formats_are_not_video(self):
        job = JobInput(brand="acme", format="image_kit")
        assert job.is_video is False
        assert job.asset_type == AssetType.IMAGE
        assert job.extension == "png"
        assert job.content_type == "image/png"

    def test_video_formats(self):
        job = JobInput(brand="acme", format="wide_video_kit")
        assert job.is_video is True
        assert job.asset_type == AssetType.VIDEO
        assert job.extension == "mp4"

    def test_rejects_unknown_format(self):
        with pytest.raises(ValidationError):
            JobInput(brand="acme", format="billboard")

    def test_rejects_empty_brand(self):
        with pytest.raises(ValidationError):
            JobInput(brand="", format="reel")

    def test_length_bounded(self):
        with pytest.raises(ValidationError):
            JobInput(brand="acme", format="reel", length_seconds=120)

    def test_variables_accept_scalars(self):
        job = JobInput(brand="acme", format="reel", variables={"a": "x", "b": 2, "c": True})
        assert job.variables["b"] == 2

    def test_queue_message_alias(self):
        msg = QueueMessage(jobId="j1", payload={"brand_key": "acme", "format": "image"})
        assert msg.job_id == "j1"
        assert msg.attempt == 1


class TestBlueprint:
    """Blueprint and shot parsing."""

    def test_camel_case_document(self):
        bp = Blueprint(**{
            "format": "reel_kit",
            "durationSeconds": 8,
            "fps": 30,
            "endFrame": {"headline": "H", "cta": "C", "brandName": "B"},
            "shots": [{
                "shotId": "s1", "timeStart": 0, "timeEnd": 2,
                "shotType": "wide", "cameraMovement": "push",
                "sceneDescription": "Living room at dusk",
                "onScreenText": {"text": "  Hello  "},
                "visualSource": "generated",
            }],
        })
        assert bp.duration_seconds == 8
        assert bp.end_frame.brand_name == "B"
        shot = bp.shots[0]
        assert shot.duration == 2
        assert shot.text == "Hello"

    def test_missing_text_is_empty_string(self):
        shot = Shot(shotId="s1", timeStart=0, timeEnd=1)
        assert shot.text == ""
        shot = Shot(shotId="s1", timeStart=0, timeEnd=1, onScreenText={"text": "   "})
        assert shot.text == ""

    def test_ordered_shots_sorts_by_time(self):
        bp = Blueprint(format="reel_kit", durationSeconds=6, shots=[
            {"shotId": "b", "timeStart": 2, "timeEnd": 4},
            {"shotId": "a", "timeStart": 0, "timeEnd": 2},
        ])
        assert [s.shot_id for s in bp.ordered_shots()] == ["a", "b"]

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            Blueprint(format="reel_kit", durationSeconds=0)

    def test_default_fps(self):
        assert Blueprint(format="reel_kit", durationSeconds=5).fps == 24


class TestBriefAndEnums:
    def test_brief_defaults_to_growth(self):
        assert CompactCreativeBrief().intent_category == IntentCategory.GROWTH

    def test_brief_intent_alias(self):
        brief = CompactCreativeBrief(intentCategory="lead_gen", rules=["text every shot"])
        assert brief.intent_category == IntentCategory.LEAD_GEN

    def test_terminal_statuses(self):
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.PROCESSING.is_terminal


class TestErrors:
    """Error classes carry their retry policy and render persisted messages."""

    def test_retry_flags(self):
        assert RetryableGenerationError("x").retryable is True
        assert NonRetryableValidationError("x").retryable is False
        assert ConfigurationError("x").retryable is False
        assert ProviderOutputError("x").retryable is False

    def test_validation_error_message_includes_violations(self):
        err = NonRetryableValidationError("bad", violations=[{"shot_id": "s1"}])
        message = err.to_error_message()
        assert message.startswith("bad: ")
        assert json.loads(message[len("bad: "):]) == [{"shot_id": "s1"}]

    def test_narrative_error_serializes_report(self):
        report = {"beats": {"missing": ["payoff"]}}
        err = NarrativeValidationError("narrative", report=report)
        assert "payoff" in err.to_error_message()
        assert err.violations == [report]

    def test_provider_output_error_keeps_payload(self):
        err = ProviderOutputError("weird", payload={"foo": 1})
        assert err.payload == {"foo": 1}
