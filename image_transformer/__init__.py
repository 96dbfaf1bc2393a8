"""Image transformer: re-encodes uploaded images as lossy WebP over HTTP."""

from .processor import BaseProcessor, StatelessAction
from .api import create_app, ServiceConfig
from .config import Settings, settings
from .direct import run_blocking, render_bytes, render_text
from .observability import Observability
from .transform import TransformProcessor

__version__ = "1.0.0"


__all__ = [
    "BaseProcessor",
    "StatelessAction",
    "create_app",
    "ServiceConfig",
    "Settings",
    "settings",
    "run_blocking",
    "render_bytes",
    "render_text",
    "Observability",
    "TransformProcessor",
]
