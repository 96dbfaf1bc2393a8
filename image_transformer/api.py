"""FastAPI application factory for stateless request/response services."""

import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import get_args

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from .direct import render_bytes, render_text
from .errors import MalformedRequest, PayloadTooLarge, TransformError
from .models import ErrorResponse, HealthResponse
from .observability import Observability
from .processor import BaseProcessor, StatelessAction

logger = logging.getLogger(__name__)

TEXT_ERROR_RESPONSE = {"content": {"text/plain": {"schema": {"type": "string"}}}}


@dataclass
class ServiceConfig:
    """
    Configuration for building a stateless microservice application.

    Args:
        name: Override service name (defaults to processor.name)
        version: Override service version (defaults to processor.version)
        description: Short description for generated docs
        cors_allow_origins: Origins allowed by the CORS policy (defaults to any)
        max_body_bytes: Reject requests whose declared Content-Length exceeds this
    """

    name: str | None = None
    version: str | None = None
    description: str | None = None
    cors_allow_origins: list[str] | None = None
    max_body_bytes: int | None = None


def _check_content_length(request: Request, limit: int | None) -> None:
    if limit is None:
        return
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(f"Request body exceeds the {limit} byte limit")


def _accepts_bytes(annotation) -> bool:
    return annotation is bytes or bytes in get_args(annotation)


async def read_form_payload(request: Request, model: type[BaseModel]) -> BaseModel:
    """
    Populate ``model`` from the request's multipart form fields.

    File parts are read into memory and decoded as UTF-8 unless the field
    takes bytes; when a field is repeated the last value wins. Fields absent from the form are left to the model's defaults.
    """

    try:
        form = await request.form()
    except MultiPartException as exc:
        raise MalformedRequest(f"Malformed multipart body: {exc.message}") from exc
    except StarletteHTTPException as exc:
        raise MalformedRequest(f"Malformed multipart body: {exc.detail}") from exc

    values = {}
    try:
        for field_name in model.model_fields:
            candidates = form.getlist(field_name)
            if not candidates:
                continue
            value = candidates[-1]
            if isinstance(value, UploadFile):
                value = await value.read()
                if not _accepts_bytes(model.model_fields[field_name].annotation):
                    try:
                        value = value.decode("utf-8")
                    except UnicodeDecodeError as exc:
                        raise MalformedRequest(
                            f"Malformed multipart body: field '{field_name}' is not valid UTF-8"
                        ) from exc
            values[field_name] = value
    finally:
        await form.close()

    return model(**values)


def create_app(
    processor: BaseProcessor,
    config: ServiceConfig | None = None,
    observability: Observability | None = None,
) -> FastAPI:
    """
    Create a FastAPI application for a stateless processor.

    Args:
        processor: The processor instance implementing business logic
        config: Optional service configuration
        observability: Logging handle started and stopped with the app
    """

    config = config or ServiceConfig()
    observability = observability or Observability()

    service_name = config.name or processor.name
    service_version = config.version or processor.version
    service_description = config.description or f"{service_name} stateless API"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        observability.start()
        processor.start()
        logger.info("%s %s started", service_name, service_version)
        try:
            yield
        finally:
            processor.stop()
            logger.info("%s stopped", service_name)
            observability.stop()

    app = FastAPI(
        title=f"{service_name.replace('-', ' ').title()} API",
        description=service_description,
        version=service_version,
        lifespan=lifespan,
    )

    app.state.processor = processor
    app.state.service_config = config
    app.state.observability = observability

    observability.install(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors raised while building payloads."""
        body = ErrorResponse(error="Validation error", detail=str(exc))
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(TransformError)
    async def transform_exception_handler(request: Request, exc: TransformError):
        """Render a rejected request as a plain-text error."""
        observability.record_failure(exc, request.url.path)
        return render_text(exc.message, exc.status_code)

    @app.get("/", response_model=HealthResponse)
    async def root():
        return HealthResponse(status="healthy", service=service_name, version=service_version)

    @app.get("/healthz", response_class=PlainTextResponse)
    async def health_check():
        return "OK"

    actions = processor.get_stateless_actions()
    if not actions:
        logger.warning(
            "Processor %s registered with stateless service but get_stateless_actions() returned nothing.",
            processor.name,
        )

    async def finish(action: StatelessAction, call_result):
        if inspect.isawaitable(call_result):
            call_result = await call_result
        if isinstance(call_result, Response):
            return call_result
        if action.media_type and isinstance(call_result, (bytes, bytearray, memoryview)):
            return render_bytes(call_result, action.media_type)
        return call_result

    def make_endpoint(action: StatelessAction):
        RequestModel = action.request_model

        if RequestModel is not None:
            # Multipart form payload
            async def endpoint(request: Request):
                _check_content_length(request, config.max_body_bytes)
                payload = await read_form_payload(request, RequestModel)
                return await finish(action, action.handler(payload))
        else:
            # No payload
            async def endpoint():
                return await finish(action, action.handler())

        return endpoint

    for action in actions:
        logger.info("Registering stateless action '%s' at %s", action.name, action.path)

        responses = {
            400: {"description": "Rejected input", **TEXT_ERROR_RESPONSE},
            500: {"description": "Processing fault", **TEXT_ERROR_RESPONSE},
        }
        if action.media_type:
            responses[200] = {"content": {action.media_type: {}}}

        openapi_extra = None
        if action.request_model is not None:
            openapi_extra = {
                "requestBody": {
                    "required": True,
                    "content": {
                        "multipart/form-data": {
                            "schema": action.request_model.model_json_schema(),
                        }
                    },
                }
            }

        route_kwargs = {
            "methods": list(action.methods),
            "response_model": action.response_model,
            "summary": action.summary,
            "description": action.description,
            "tags": list(action.tags) if action.tags else None,
            "responses": responses,
            "openapi_extra": openapi_extra,
        }
        route_kwargs = {k: v for k, v in route_kwargs.items() if v is not None}

        app.api_route(action.path, **route_kwargs)(make_endpoint(action))

    return app
