"""HTTP API for Simplo Pages."""

from .main import create_app

__all__ = ["create_app"]
