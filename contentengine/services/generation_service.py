"""
Generation Service - invokes the generative-media provider (Replicate).

Creates a prediction, waits for it to finish, and normalizes the returned
output into a single URL. Provider output comes in several shapes; it is
classified into a tagged ProviderOutput first and then read by one
exhaustive extraction function.

Failure policy:
- Timeout, non-2xx response, failed/canceled prediction: RetryableGenerationError
- Output that cannot be normalized to a URL: ProviderOutputError (logged with payload)
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.config import Config
from ..core.exceptions import ConfigurationError, ProviderOutputError, RetryableGenerationError
from .model_selector import ModelConfig, ModelInput

logger = logging.getLogger(__name__)

TERMINAL_PREDICTION_STATES = ("succeeded", "failed", "canceled")


# ============================================================================
# Provider output normalization
# ============================================================================

class OutputShape(str, Enum):
    STRING = "string"
    LIST = "list"
    OUTPUT_FIELD = "output_field"
    URL_FIELD = "url_field"
    VIDEO_FIELD = "video_field"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class ProviderOutput:
    """Provider output tagged with the shape it arrived in."""
    shape: OutputShape
    raw: Any

    @classmethod
    def classify(cls, raw: Any) -> "ProviderOutput":
        if isinstance(raw, str):
            return cls(OutputShape.STRING, raw)
        if isinstance(raw, list):
            return cls(OutputShape.LIST, raw)
        if isinstance(raw, dict):
            if "output" in raw:
                return cls(OutputShape.OUTPUT_FIELD, raw)
            if "url" in raw:
                return cls(OutputShape.URL_FIELD, raw)
            if "video" in raw:
                return cls(OutputShape.VIDEO_FIELD, raw)
        return cls(OutputShape.UNRECOGNIZED, raw)


def _first_url(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, str) and value else None


def extract_url(output: ProviderOutput) -> str:
    """
    Read the output URL from a classified provider output.

    Raises:
        ProviderOutputError: unrecognized shape, or a recognized shape
            without a usable URL
    """
    shape = output.shape
    if shape is OutputShape.STRING:
        url = _first_url(output.raw)
    elif shape is OutputShape.LIST:
        url = _first_url(output.raw)
    elif shape is OutputShape.OUTPUT_FIELD:
        url = _first_url(output.raw["output"])
    elif shape is OutputShape.URL_FIELD:
        url = _first_url(output.raw["url"])
    elif shape is OutputShape.VIDEO_FIELD:
        url = _first_url(output.raw["video"])
    elif shape is OutputShape.UNRECOGNIZED:
        url = None
    else:
        raise AssertionError(f"Unhandled output shape: {shape}")

    if not url:
        payload = json.dumps(output.raw, default=str)
        logger.error(f"Unexpected provider output format ({shape.value}): {payload}")
        raise ProviderOutputError(f"Unexpected provider output format: {payload}", payload=output.raw)
    return url


# ============================================================================
# Results
# ============================================================================

@dataclass
class GenerationOptions:
    aspect_ratio: Optional[str] = None
    duration_seconds: Optional[float] = None
    motion_intensity: Optional[int] = None
    image_url: Optional[str] = None


@dataclass
class GenerationResult:
    url: str
    cost: Optional[float]
    model_key: str
    prediction_ids: List[str] = field(default_factory=list)


@dataclass
class FetchedOutput:
    content: bytes
    content_type: str


class GenerationService:
    """Async client for Replicate predictions."""

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        poll_interval_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize GenerationService.

        Args:
            api_token: Replicate token (defaults to Config.REPLICATE_API_TOKEN)
            base_url: API base URL
            timeout_seconds: Overall deadline for one prediction
            poll_interval_seconds: Delay between status polls
            http_client: Shared client; one is created per call when omitted
        """
        self.api_token = api_token if api_token is not None else Config.REPLICATE_API_TOKEN
        self.base_url = (base_url or Config.REPLICATE_API_BASE).rstrip("/")
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else Config.PROVIDER_TIMEOUT_SECONDS
        self.poll_interval_seconds = (
            poll_interval_seconds if poll_interval_seconds is not None
            else Config.PROVIDER_POLL_INTERVAL_SECONDS
        )
        self._http_client = http_client

        if not self.api_token:
            logger.warning("GenerationService initialized without REPLICATE_API_TOKEN")

    def build_input(self, model: ModelConfig, prompt: str, options: GenerationOptions) -> Dict[str, Any]:
        """Provider input payload for a model."""
        payload: Dict[str, Any] = {}
        if model.input_kind == ModelInput.IMAGE:
            if not options.image_url:
                raise ConfigurationError(f"Model {model.key} requires an input image")
            payload["input_image"] = options.image_url
        else:
            payload["prompt"] = prompt

        if options.aspect_ratio:
            payload["aspect_ratio"] = options.aspect_ratio
        if options.duration_seconds:
            payload["duration"] = min(options.duration_seconds, Config.MAX_PROVIDER_DURATION_SECONDS)
        if options.motion_intensity is not None:
            payload["motion_bucket_id"] = options.motion_intensity
        return payload

    async def invoke(self, model: ModelConfig, prompt: str,
                     options: Optional[GenerationOptions] = None) -> GenerationResult:
        """
        Run one prediction and return its output URL and cost.

        Args:
            model: Selected model
            prompt: Provider prompt
            options: Aspect ratio, duration, motion, input image

        Returns:
            GenerationResult with the normalized output URL
        """
        options = options or GenerationOptions()
        if not self.api_token:
            raise ConfigurationError("Missing REPLICATE_API_TOKEN")

        payload = self.build_input(model, prompt, options)
        logger.info(f"Invoking {model.key} ({model.provider_model_id})")

        if self._http_client is not None:
            prediction = await self._run_prediction(self._http_client, model, payload)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                prediction = await self._run_prediction(client, model, payload)

        url = extract_url(ProviderOutput.classify(prediction.get("output")))
        logger.info(f"{model.key} prediction {prediction.get('id')} produced {url}")
        return GenerationResult(
            url=url,
            cost=model.cost_usd,
            model_key=model.key,
            prediction_ids=[prediction.get("id", "")],
        )

    async def invoke_image_to_video(
        self,
        image_model: ModelConfig,
        video_model: ModelConfig,
        prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        """
        Two-stage path: text-to-image still, then animate the still.

        Total cost is the sum of both stages.
        """
        options = options or GenerationOptions()
        still = await self.invoke(
            image_model, prompt, GenerationOptions(aspect_ratio=options.aspect_ratio)
        )
        clip = await self.invoke(
            video_model, prompt,
            GenerationOptions(
                aspect_ratio=options.aspect_ratio,
                duration_seconds=options.duration_seconds,
                motion_intensity=options.motion_intensity,
                image_url=still.url,
            ),
        )
        costs = [c for c in (still.cost, clip.cost) if c is not None]
        return GenerationResult(
            url=clip.url,
            cost=round(sum(costs), 6) if costs else None,
            model_key=video_model.key,
            prediction_ids=still.prediction_ids + clip.prediction_ids,
        )

    async def _run_prediction(self, client: httpx.AsyncClient, model: ModelConfig,
                              payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Prefer": "wait",
        }
        deadline = time.monotonic() + self.timeout_seconds

        try:
            response = await client.post(
                f"{self.base_url}/models/{model.provider_model_id}/predictions",
                headers=headers,
                json={"input": payload},
            )
            prediction = self._check_response(response, model)

            while prediction.get("status") not in TERMINAL_PREDICTION_STATES:
                if time.monotonic() >= deadline:
                    raise RetryableGenerationError(
                        f"{model.key} prediction {prediction.get('id')} timed out "
                        f"after {self.timeout_seconds:g}s"
                    )
                await asyncio.sleep(self.poll_interval_seconds)
                poll_url = (prediction.get("urls") or {}).get("get") or (
                    f"{self.base_url}/predictions/{prediction.get('id')}"
                )
                response = await client.get(poll_url, headers=headers)
                prediction = self._check_response(response, model)

        except httpx.TimeoutException as e:
            raise RetryableGenerationError(f"{model.key} request timed out: {e}") from e
        except httpx.TransportError as e:
            raise RetryableGenerationError(f"{model.key} transport error: {e}") from e

        if prediction.get("status") != "succeeded":
            raise RetryableGenerationError(
                f"{model.key} prediction {prediction.get('status')}: {prediction.get('error')}"
            )
        return prediction

    @staticmethod
    def _check_response(response: httpx.Response, model: ModelConfig) -> Dict[str, Any]:
        if response.status_code < 200 or response.status_code >= 300:
            logger.error(f"{model.key} request failed ({response.status_code}): {response.text}")
            raise RetryableGenerationError(
                f"{model.key} request failed with HTTP {response.status_code}"
            )
        return response.json()

    async def fetch_output(self, url: str) -> FetchedOutput:
        """
        Download a generated asset.

        Transport errors are retried in place; a non-2xx answer raises
        RetryableGenerationError.
        """
        try:
            if self._http_client is not None:
                return await self._fetch(self._http_client, url)
            async with httpx.AsyncClient(timeout=120.0, follow_redirects=True) as client:
                return await self._fetch(client, url)
        except httpx.TransportError as e:
            raise RetryableGenerationError(f"Failed to fetch output {url}: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=2, min=2, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch(self, client: httpx.AsyncClient, url: str) -> FetchedOutput:
        response = await client.get(url)
        if response.status_code < 200 or response.status_code >= 300:
            raise RetryableGenerationError(f"Failed to fetch output: HTTP {response.status_code}")
        content_type = response.headers.get("content-type", "application/octet-stream")
        return FetchedOutput(content=response.content, content_type=content_type.split(";")[0].strip())
