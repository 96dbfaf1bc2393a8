"""Stateless image transform processor."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from pydantic import BaseModel, Field

from .config import Settings, settings as default_settings
from .direct import render_bytes, render_text, run_blocking
from .errors import MissingInput, PayloadTooLarge, PipelineTimeout
from .models import TransformFailure, TransformRequest, TransformResult
from .observability import Observability
from .params import parse_quality, parse_size
from .pipeline import run_pipeline
from .processor import BaseProcessor, StatelessAction

logger = logging.getLogger(__name__)


class TransformForm(BaseModel):
    """Multipart fields accepted by ``POST /transform``."""

    image: bytes | None = Field(None, description="PNG, JPEG or WebP image bytes")
    size: str | None = Field(
        None,
        description="Optional target size as WIDTHxHEIGHT, e.g. 800x600",
    )
    quality: str | None = Field(
        None,
        description="Optional lossy quality from 0.0 (smallest) to 100.0 (best)",
    )


class TransformProcessor(BaseProcessor):
    """Processor exposing the upload-to-WebP transform."""

    def __init__(
        self,
        settings: Settings | None = None,
        observability: Observability | None = None,
    ):
        self.settings = settings or default_settings
        self.observability = observability or Observability(level=self.settings.log_level)
        self._executor: ThreadPoolExecutor | None = None

    @property
    def name(self) -> str:
        return "image-transformer"

    @property
    def version(self) -> str:
        return self.settings.api_version

    def start(self) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.pipeline_workers,
            thread_name_prefix="transform",
        )
        logger.info(
            "Transform worker pool started (max_workers=%s)",
            self.settings.pipeline_workers or "default",
        )

    def stop(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="transform",
                path="/transform",
                request_model=TransformForm,
                handler=self.handle_transform,
                summary="Re-encode an uploaded image as lossy WebP",
                description=(
                    "Accepts a PNG, JPEG or WebP upload, optionally resizes it to exactly "
                    "WIDTHxHEIGHT with a Lanczos filter, and returns lossy WebP bytes."
                ),
                tags=("media",),
                media_type="image/webp",
            ),
        ]

    def build_request(self, payload: TransformForm) -> TransformRequest:
        """Validate form fields into a ``TransformRequest``; raises on client errors."""

        if payload.image is None:
            raise MissingInput("Image data not provided in 'image' field")

        limit = self.settings.max_upload_bytes
        if len(payload.image) > limit:
            raise PayloadTooLarge(f"Image exceeds the {limit} byte upload limit")

        size = parse_size(payload.size) if payload.size is not None else None
        quality = None
        if payload.quality is not None:
            quality = parse_quality(payload.quality, strict=self.settings.strict_quality)

        return TransformRequest(image=payload.image, size=size, quality=quality)

    async def execute(self, request: TransformRequest) -> TransformResult:
        """Run the pipeline on the worker pool, bounded by the configured timeout."""

        timeout = self.settings.pipeline_timeout_seconds
        try:
            return await run_blocking(
                run_pipeline,
                request,
                default_quality=self.settings.default_quality,
                max_output_pixels=self.settings.max_output_pixels,
                executor=self._executor,
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return TransformFailure.from_error(
                PipelineTimeout(f"Image transformation exceeded {timeout:g} seconds")
            )

    async def handle_transform(self, payload: TransformForm):
        """Transform the uploaded image and render the outcome."""

        request = self.build_request(payload)
        result = await self.execute(request)

        if isinstance(result, TransformFailure):
            self.observability.record_failure(result, "/transform")
            return render_text(result.message, result.status_code)
        return render_bytes(result.output, result.content_type)
