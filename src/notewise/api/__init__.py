"""HTTP surface for the study tasks."""

from .app import create_app

__all__ = ["create_app"]
