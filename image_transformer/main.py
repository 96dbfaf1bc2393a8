"""FastAPI entrypoint for the image transformer service."""

import uvicorn
from fastapi import FastAPI

from .api import ServiceConfig, create_app
from .config import Settings, settings
from .observability import Observability
from .transform import TransformProcessor

# Room for multipart boundaries and the small text fields around the image part.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def build_app(settings: Settings = settings) -> FastAPI:
    """Wire settings, observability and the transform processor into an app."""

    observability = Observability(level=settings.log_level)
    processor = TransformProcessor(settings, observability)
    config = ServiceConfig(
        version=settings.api_version,
        description=settings.api_description,
        cors_allow_origins=settings.cors_allow_origins,
        max_body_bytes=settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES,
    )
    return create_app(processor, config, observability)


app = build_app()


def main():
    """Run the service under uvicorn."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
