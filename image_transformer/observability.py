"""Explicitly constructed logging and request-tracing handle."""

import logging
import sys
import time

from fastapi import FastAPI, Request

from .errors import StatusCategory

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Observability:
    """
    Owns the log handler for the service and records request outcomes.

    The handle is created by the entrypoint and handed to ``create_app``;
    ``start()`` and ``stop()`` run inside the application lifespan so that
    nothing is configured at import time.

    Args:
        level: Log level name or number for the service logger
        logger_name: Root logger of the service package
        stream: Where log records are written (defaults to stdout)
    """

    def __init__(
        self,
        level: str | int = logging.INFO,
        logger_name: str = "image_transformer",
        stream=None,
    ):
        self.level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
        self.logger = logging.getLogger(logger_name)
        self.http_logger = logging.getLogger(f"{logger_name}.http")
        self._stream = stream
        self._handler: logging.Handler | None = None

    @property
    def started(self) -> bool:
        return self._handler is not None

    def start(self) -> None:
        if self._handler is not None:
            return
        handler = logging.StreamHandler(self._stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.addHandler(handler)
        self.logger.setLevel(self.level)
        self._handler = handler
        self.logger.info("Logging started at level %s", logging.getLevelName(self.level))

    def stop(self) -> None:
        if self._handler is None:
            return
        self.logger.info("Logging stopped")
        self.logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def record_failure(self, failure, path: str | None = None) -> None:
        """
        Log a failed transform.

        ``failure`` is anything carrying ``category``, ``kind``, ``status_code``
        and ``message``: a ``TransformError`` or a ``TransformFailure``.
        """

        level = logging.ERROR if failure.category is StatusCategory.SERVER else logging.WARNING
        self.logger.log(
            level,
            "status=%d kind=%s path=%s error=%s",
            failure.status_code,
            failure.kind,
            path or "-",
            failure.message,
        )

    def install(self, app: FastAPI) -> None:
        """Add an HTTP middleware that logs every request and its latency."""

        http_logger = self.http_logger

        @app.middleware("http")
        async def trace_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            level = logging.ERROR if response.status_code >= 500 else logging.INFO
            http_logger.log(
                level,
                "%s %s -> %d in %.1f ms",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
            return response
