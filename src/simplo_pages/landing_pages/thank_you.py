"""Thank-you pages shown after a lead is captured."""

import logging
import re
from typing import Dict, List, Optional, Any

from ..core.utils import generate_slug, is_valid_slug
from ..storage import Database, FileStorage
from ..storage.models import ThankYouPage, DEFAULT_THANK_YOU_COLORS, utcnow

logger = logging.getLogger(__name__)

LOGO_BUCKET = "thank-you-pages"
LOGO_FOLDER = "logos"

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
MAX_REDIRECT_DELAY = 600

EDITABLE_FIELDS = {
    "title",
    "description",
    "slug",
    "message",
    "redirect_url",
    "redirect_delay",
    "colors",
    "published",
    "logo_url",
}


def _check_redirect_url(url: Optional[str]) -> Optional[str]:
    url = (url or "").strip()
    if not url:
        return None
    if not url.startswith(("http://", "https://")):
        raise ValueError("Redirect URL must start with http:// or https://")
    return url


def _check_redirect_delay(delay: Any) -> Optional[int]:
    if delay is None or delay == "":
        return None
    try:
        value = int(delay)
    except (TypeError, ValueError):
        raise ValueError("Redirect delay must be a whole number of seconds")
    if isinstance(delay, float) and delay != value:
        raise ValueError("Redirect delay must be a whole number of seconds")
    if value < 0 or value > MAX_REDIRECT_DELAY:
        raise ValueError(f"Redirect delay must be between 0 and {MAX_REDIRECT_DELAY} seconds")
    return value


def _check_colors(colors: Optional[Dict[str, str]], base: Dict[str, str]) -> Dict[str, str]:
    merged = dict(base)
    for key, value in (colors or {}).items():
        if key not in DEFAULT_THANK_YOU_COLORS:
            raise ValueError(f"Unknown color: {key}")
        if not HEX_COLOR.match(value or ""):
            raise ValueError(f"Color '{key}' must be a hex value")
        merged[key] = value
    return merged


class ThankYouPageService:
    """CRUD and publishing for thank-you pages."""

    def __init__(self, db: Database, files: Optional[FileStorage] = None):
        self.db = db
        self.files = files

    def _check_slug(self, slug: str, exclude_id: Optional[str] = None) -> str:
        slug = (slug or "").strip()
        if not is_valid_slug(slug):
            raise ValueError(
                "Slug must be at least 3 characters of lower-case letters, numbers and hyphens"
            )
        if self.db.slug_exists("thank_you_pages", slug, exclude_id=exclude_id):
            raise ValueError(f"Slug '{slug}' is already in use")
        return slug

    def create(
        self,
        user_id: Optional[str],
        title: str,
        message: str,
        slug: Optional[str] = None,
        description: str = "",
        redirect_url: Optional[str] = None,
        redirect_delay: Any = None,
        colors: Optional[Dict[str, str]] = None,
        published: bool = False,
        logo_url: Optional[str] = None,
        landing_page_id: Optional[str] = None,
    ) -> ThankYouPage:
        """Create a thank-you page.

        When ``landing_page_id`` is given the page inherits that landing page's
        background/text colors and logo, and the landing page is linked to it.
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("Title is required")
        message = (message or "").strip()
        if not message:
            raise ValueError("Message is required")

        landing_page = None
        base_colors = dict(DEFAULT_THANK_YOU_COLORS)
        if landing_page_id:
            landing_page = self.db.get_landing_page(landing_page_id)
            if not landing_page or (user_id and landing_page.user_id and landing_page.user_id != user_id):
                raise ValueError("Landing page not found")
            page_colors = landing_page.colors
            base_colors = {"background": page_colors["background"], "text": page_colors["text"]}
            if not logo_url and landing_page.logo_url:
                logo_url = self._copy_logo(landing_page.logo_url)

        page = ThankYouPage(
            user_id=user_id,
            title=title,
            description=(description or "").strip(),
            slug=self._check_slug(slug if slug else generate_slug(title)),
            message=message,
            redirect_url=_check_redirect_url(redirect_url),
            redirect_delay=_check_redirect_delay(redirect_delay),
            colors=_check_colors(colors, base_colors),
            published=bool(published),
            logo_url=logo_url or None,
        )
        self.db.insert_thank_you_page(page)

        if landing_page:
            landing_page.thank_you_page_id = page.id
            landing_page.updated_at = utcnow()
            self.db.update_landing_page(landing_page)

        logger.info(f"Created thank-you page {page.id} ({page.slug})")
        return page

    def _copy_logo(self, path: str) -> Optional[str]:
        if path.startswith(("http://", "https://")):
            return path
        if self.files is None:
            return None
        try:
            data = self.files.open("landing-pages", path)
        except (FileNotFoundError, ValueError):
            logger.warning(f"Landing page logo {path} not found, skipping")
            return None
        name = path.rsplit("/", 1)[-1].split("-", 1)[-1]
        return self.files.upload(LOGO_BUCKET, LOGO_FOLDER, name, data)

    def get(self, page_id: str, user_id: Optional[str] = None) -> Optional[ThankYouPage]:
        page = self.db.get_thank_you_page(page_id)
        if not page:
            return None
        if user_id and page.user_id and page.user_id != user_id:
            return None
        return page

    def get_by_slug(self, slug: str, published_only: bool = False) -> Optional[ThankYouPage]:
        page = self.db.get_thank_you_page_by_slug(slug)
        if page and published_only and not page.published:
            return None
        return page

    def list(self, user_id: Optional[str] = None) -> List[ThankYouPage]:
        return self.db.list_thank_you_pages(user_id)

    def update(self, page_id: str, user_id: Optional[str] = None, **changes) -> Optional[ThankYouPage]:
        page = self.get(page_id, user_id)
        if not page:
            return None

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown thank-you page fields: {', '.join(sorted(unknown))}")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValueError("Title is required")
            page.title = title
        if "description" in changes:
            page.description = (changes["description"] or "").strip()
        if "slug" in changes and changes["slug"] != page.slug:
            page.slug = self._check_slug(changes["slug"], exclude_id=page.id)
        if "message" in changes:
            message = (changes["message"] or "").strip()
            if not message:
                raise ValueError("Message is required")
            page.message = message
        if "redirect_url" in changes:
            page.redirect_url = _check_redirect_url(changes["redirect_url"])
        if "redirect_delay" in changes:
            page.redirect_delay = _check_redirect_delay(changes["redirect_delay"])
        if "colors" in changes:
            page.colors = _check_colors(changes["colors"], page.colors)
        if "published" in changes:
            page.published = bool(changes["published"])
        if "logo_url" in changes:
            page.logo_url = changes["logo_url"] or None

        page.updated_at = utcnow()
        self.db.update_thank_you_page(page)
        return page

    def publish(self, page_id: str, user_id: Optional[str] = None) -> Optional[ThankYouPage]:
        return self.update(page_id, user_id, published=True)

    def unpublish(self, page_id: str, user_id: Optional[str] = None) -> Optional[ThankYouPage]:
        return self.update(page_id, user_id, published=False)

    def delete(self, page_id: str, user_id: Optional[str] = None) -> bool:
        """Delete a page; linked landing pages lose the link."""
        page = self.get(page_id, user_id)
        if not page:
            return False
        deleted = self.db.delete_thank_you_page(page_id)
        if deleted:
            logger.info(f"Deleted thank-you page {page_id}")
        return deleted

    def upload_logo(
        self,
        page_id: str,
        user_id: Optional[str],
        filename: str,
        data: bytes,
    ) -> Optional[ThankYouPage]:
        if self.files is None:
            raise RuntimeError("File storage is not configured")
        page = self.get(page_id, user_id)
        if not page:
            return None
        path = self.files.upload(LOGO_BUCKET, LOGO_FOLDER, filename, data)
        return self.update(page_id, user_id, logo_url=path)
