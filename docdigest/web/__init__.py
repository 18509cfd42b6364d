"""HTTP service exposing the summary pipeline."""

from .app import create_app

__all__ = ["create_app"]
