"""Top-level package for the Geo Annotator backend."""

from .api.app_factory import create_app
from .context import AnnotationContext

__all__ = ["create_app", "AnnotationContext"]
