"""Failure taxonomy for the transformation pipeline."""

from enum import Enum


class StatusCategory(str, Enum):
    """Who caused a failure: the caller's input or the service itself."""

    CLIENT = "client"
    SERVER = "server"


class TransformError(Exception):
    """
    Base class for every failure surfaced by the transform endpoint.

    Subclasses fix the HTTP status code and category; the message is the
    plain-text body returned to the caller.
    """

    status_code: int = 500
    category: StatusCategory = StatusCategory.SERVER

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class ClientError(TransformError):
    status_code = 400
    category = StatusCategory.CLIENT


class ServerError(TransformError):
    status_code = 500
    category = StatusCategory.SERVER


class MissingInput(ClientError):
    """A required multipart field was not sent."""


class MalformedRequest(ClientError):
    """The request body could not be read as multipart form data."""


class InvalidFormat(ClientError):
    """A textual parameter does not have the expected shape."""


class InvalidValue(ClientError):
    """A textual parameter has the right shape but an unusable value."""


class OutOfRange(ClientError):
    """A numeric parameter lies outside its accepted range."""


class UnrecognizedFormat(ClientError):
    """No known image signature matched the uploaded bytes."""


class UnsupportedFormat(ClientError):
    """The image format was recognized but is not accepted as input."""


class PayloadTooLarge(ClientError):
    status_code = 413


class DecodeError(ServerError):
    """Bytes that passed format validation could not be decoded."""


class EncodeError(ServerError):
    """The WebP encoder failed or produced no output."""


class PipelineTimeout(ServerError):
    status_code = 503
