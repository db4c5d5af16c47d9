"""HTTP interface for the annotation engine."""

from .app_factory import create_app

__all__ = ["create_app"]
