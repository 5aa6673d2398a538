"""HTTP API for DocTransform."""

from .app import create_app

__all__ = ["create_app"]
