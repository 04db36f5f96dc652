"""Core configuration and shared helpers."""

from .config import Settings, settings, reset_settings
from .utils import (
    generate_slug,
    is_valid_slug,
    sanitize_file_name,
    is_light_background,
    with_retry,
)

__all__ = [
    "Settings",
    "settings",
    "reset_settings",
    "generate_slug",
    "is_valid_slug",
    "sanitize_file_name",
    "is_light_background",
    "with_retry",
]
