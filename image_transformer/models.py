"""Models shared by the transform API and pipeline."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from .errors import StatusCategory, TransformError

WEBP_CONTENT_TYPE = "image/webp"


class HealthResponse(BaseModel):
    """Service metadata returned from the root route."""

    status: str = Field(default="healthy")
    service: str = Field(..., description="Service name")
    version: str = Field(default="1.0.0")


class ErrorResponse(BaseModel):
    """Error envelope for requests rejected by schema validation."""

    error: str = Field(..., description="High-level error message")
    detail: str | None = Field(None, description="Additional context for debugging")


@dataclass(frozen=True)
class TransformRequest:
    """One upload plus its already-parsed parameters."""

    image: bytes
    size: tuple[int, int] | None = None
    quality: float | None = None


@dataclass(frozen=True)
class TransformSuccess:
    output: bytes
    content_type: str = WEBP_CONTENT_TYPE


@dataclass(frozen=True)
class TransformFailure:
    category: StatusCategory
    message: str
    status_code: int
    kind: str

    @classmethod
    def from_error(cls, exc: TransformError) -> "TransformFailure":
        return cls(
            category=exc.category,
            message=exc.message,
            status_code=exc.status_code,
            kind=exc.kind,
        )


TransformResult = TransformSuccess | TransformFailure
