"""Small shared helpers: slugs, file names, colors and retries."""

import logging
import re
import time
import unicodedata
from typing import Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFD", text)
    return "".join(c for c in normalized if not unicodedata.combining(c))


def generate_slug(text: str) -> str:
    """Build a URL slug from a title ("Evento São Paulo!" -> "evento-sao-paulo")."""
    slug = _strip_accents(text or "").lower()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = slug.replace("_", "-")
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def is_valid_slug(slug: str) -> bool:
    """Slugs are at least 3 chars of lower-case letters, digits and single hyphens."""
    return bool(slug) and len(slug) >= 3 and bool(SLUG_PATTERN.match(slug))


def sanitize_file_name(file_name: str) -> str:
    """Make an uploaded file name safe for storage paths."""
    name = _strip_accents(file_name or "")
    name = re.sub(r"[^a-zA-Z0-9.-]", "-", name)
    name = re.sub(r"-{2,}", "-", name)
    return name.lower()


def is_light_background(color: str) -> bool:
    """Return True when a hex color is light (luminance above 0.5)."""
    hex_value = (color or "").strip().lstrip("#")
    if len(hex_value) == 3:
        hex_value = "".join(c * 2 for c in hex_value)
    try:
        r = int(hex_value[0:2], 16)
        g = int(hex_value[2:4], 16)
        b = int(hex_value[4:6], 16)
    except ValueError:
        return True
    if len(hex_value) not in (6, 8):
        return True

    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return luminance > 0.5


def with_retry(
    func: Callable[[], T],
    retries: int = 3,
    base_delay: float = 0.5,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` with exponential backoff, re-raising the last failure."""
    if retries < 1:
        raise ValueError("retries must be at least 1")

    for attempt in range(retries):
        try:
            return func()
        except exceptions as e:
            if attempt == retries - 1:
                raise
            delay = base_delay * (2 ** attempt)
            logger.warning(f"Attempt {attempt + 1}/{retries} failed: {e}; retrying in {delay:.2f}s")
            sleep(delay)

    raise RuntimeError("unreachable")
