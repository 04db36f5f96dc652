"""Landing page management."""

import logging
import re
from typing import Dict, List, Optional, Any

from ..core.utils import generate_slug, is_valid_slug
from ..editor import EditorCanvas
from ..storage import Database, FileStorage
from ..storage.models import (
    LandingPage,
    FormType,
    FormPosition,
    DEFAULT_COLORS,
    DEFAULT_FONTS,
    utcnow,
)
from .forms import normalize_form_fields

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
FONT_NAME = re.compile(r"^[A-Za-z0-9 ]{1,60}$")

IMAGE_BUCKET = "landing-pages"

# kind -> (storage folder, page attribute)
IMAGE_KINDS = {
    "logo": ("logos", "logo_url"),
    "background": ("backgrounds", "background_url"),
    "event_date": ("event-dates", "event_date_image_url"),
    "participants": ("apresentadores", "participants_image_url"),
}

CONTENT_FIELDS = {
    "form_type": "formType",
    "custom_html": "customHtml",
    "form_fields": "formFields",
    "form_position": "formPosition",
    "colors": "colors",
    "fonts": "fonts",
    "widgets": "widgets",
}

RECORD_FIELDS = {
    "title",
    "description",
    "slug",
    "logo_url",
    "background_url",
    "event_date_image_url",
    "participants_image_url",
    "ga_id",
    "meta_pixel_id",
    "thank_you_page_id",
    "published",
}


def _validate_colors(colors: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = dict(DEFAULT_COLORS)
    for key, value in (colors or {}).items():
        if key not in DEFAULT_COLORS:
            raise ValueError(f"Unknown color: {key}")
        if not HEX_COLOR.match(value or ""):
            raise ValueError(f"Color '{key}' must be a hex value like #7C3AFF")
        merged[key] = value
    return merged


def _validate_fonts(fonts: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = dict(DEFAULT_FONTS)
    for key, value in (fonts or {}).items():
        if key not in DEFAULT_FONTS:
            raise ValueError(f"Unknown font slot: {key}")
        value = (value or "").strip()
        if not FONT_NAME.match(value):
            raise ValueError(f"Invalid font name for '{key}'")
        merged[key] = value
    return merged


def _validate_form_type(form_type: str) -> str:
    try:
        return FormType(form_type).value
    except ValueError:
        raise ValueError("Form type must be 'system' or 'custom'")


def _validate_form_position(position: str) -> str:
    try:
        return FormPosition(position).value
    except ValueError:
        raise ValueError("Form position must be 'left', 'right' or 'center'")


def _validate_widgets(widgets: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return EditorCanvas.from_list(widgets).to_list()


class LandingPageService:
    """Create, edit, publish and duplicate landing pages."""

    def __init__(self, db: Database, files: Optional[FileStorage] = None):
        self.db = db
        self.files = files

    # === VALIDATION ===

    def _check_title(self, title: str) -> str:
        title = (title or "").strip()
        if len(title) < MIN_TITLE_LENGTH:
            raise ValueError(f"Title must be at least {MIN_TITLE_LENGTH} characters")
        return title

    def _check_description(self, description: str) -> str:
        description = (description or "").strip()
        if len(description) < MIN_DESCRIPTION_LENGTH:
            raise ValueError(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters")
        return description

    def _check_slug(self, slug: str, exclude_id: Optional[str] = None) -> str:
        slug = (slug or "").strip()
        if not is_valid_slug(slug):
            raise ValueError(
                "Slug must be at least 3 characters of lower-case letters, numbers and hyphens"
            )
        if self.db.slug_exists("landing_pages", slug, exclude_id=exclude_id):
            raise ValueError(f"Slug '{slug}' is already in use")
        return slug

    def _check_thank_you_page(self, thank_you_page_id: Optional[str], user_id: Optional[str]):
        if not thank_you_page_id:
            return None
        page = self.db.get_thank_you_page(thank_you_page_id)
        if not page or (user_id and page.user_id and page.user_id != user_id):
            raise ValueError("Thank-you page not found")
        return thank_you_page_id

    def _build_content(
        self,
        form_type: str,
        custom_html: Optional[str],
        form_fields: Optional[List[Dict[str, Any]]],
        form_position: str,
        colors: Optional[Dict[str, str]],
        fonts: Optional[Dict[str, str]],
        widgets: Optional[List[Dict[str, Any]]],
    ) -> Dict[str, Any]:
        form_type = _validate_form_type(form_type)
        content: Dict[str, Any] = {
            "formType": form_type,
            "formPosition": _validate_form_position(form_position),
            "colors": _validate_colors(colors),
            "fonts": _validate_fonts(fonts),
        }
        if form_type == FormType.SYSTEM.value:
            content["formFields"] = normalize_form_fields(form_fields)
        else:
            if not (custom_html or "").strip():
                raise ValueError("Custom forms need HTML")
            content["customHtml"] = custom_html
        if widgets:
            content["widgets"] = _validate_widgets(widgets)
        return content

    # === CRUD ===

    def create(
        self,
        user_id: Optional[str],
        title: str,
        description: str,
        slug: Optional[str] = None,
        form_type: str = FormType.SYSTEM.value,
        custom_html: Optional[str] = None,
        form_fields: Optional[List[Dict[str, Any]]] = None,
        form_position: str = FormPosition.RIGHT.value,
        colors: Optional[Dict[str, str]] = None,
        fonts: Optional[Dict[str, str]] = None,
        widgets: Optional[List[Dict[str, Any]]] = None,
        ga_id: Optional[str] = None,
        meta_pixel_id: Optional[str] = None,
        thank_you_page_id: Optional[str] = None,
        template_id: Optional[str] = None,
        logo_url: Optional[str] = None,
        background_url: Optional[str] = None,
        event_date_image_url: Optional[str] = None,
        participants_image_url: Optional[str] = None,
    ) -> LandingPage:
        """Create an unpublished landing page."""
        title = self._check_title(title)
        description = self._check_description(description)
        slug = self._check_slug(slug if slug else generate_slug(title))

        page = LandingPage(
            user_id=user_id,
            title=title,
            description=description,
            slug=slug,
            content=self._build_content(
                form_type, custom_html, form_fields, form_position, colors, fonts, widgets
            ),
            logo_url=logo_url or None,
            background_url=background_url or None,
            event_date_image_url=event_date_image_url or None,
            participants_image_url=participants_image_url or None,
            ga_id=(ga_id or "").strip() or None,
            meta_pixel_id=(meta_pixel_id or "").strip() or None,
            thank_you_page_id=self._check_thank_you_page(thank_you_page_id, user_id),
            template_id=template_id,
            published=False,
        )
        self.db.insert_landing_page(page)
        logger.info(f"Created landing page {page.id} ({page.slug})")
        return page

    def create_from_template(
        self,
        user_id: Optional[str],
        template_id: str,
        title: str,
        description: str,
        slug: Optional[str] = None,
        **options,
    ) -> LandingPage:
        """Create a page that starts from a template's style and widgets."""
        template = self.db.get_template(template_id)
        if not template or (user_id and template.user_id and template.user_id != user_id):
            raise ValueError("Template not found")

        colors = {k: v for k, v in template.colors.items() if k in DEFAULT_COLORS}
        fonts = {
            "title": template.fonts.get("heading") or DEFAULT_FONTS["title"],
            "body": template.fonts.get("body") or DEFAULT_FONTS["body"],
        }
        options.setdefault("colors", colors)
        options.setdefault("fonts", fonts)
        options.setdefault("form_position", template.form_position or FormPosition.RIGHT.value)
        options.setdefault("widgets", template.widgets)

        return self.create(
            user_id,
            title,
            description,
            slug=slug,
            template_id=template.id,
            **options,
        )

    def get(self, page_id: str, user_id: Optional[str] = None) -> Optional[LandingPage]:
        """Get a page, hiding pages owned by someone else."""
        page = self.db.get_landing_page(page_id)
        if not page:
            return None
        if user_id and page.user_id and page.user_id != user_id:
            return None
        return page

    def get_by_slug(self, slug: str, published_only: bool = False) -> Optional[LandingPage]:
        page = self.db.get_landing_page_by_slug(slug)
        if page and published_only and not page.published:
            return None
        return page

    def list_for_user(self, user_id: Optional[str]) -> List[LandingPage]:
        return self.db.list_landing_pages(user_id)

    def update(self, page_id: str, user_id: Optional[str] = None, **changes) -> Optional[LandingPage]:
        """Apply changes to a page. Unknown fields raise ValueError."""
        page = self.get(page_id, user_id)
        if not page:
            return None

        unknown = set(changes) - RECORD_FIELDS - set(CONTENT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown landing page fields: {', '.join(sorted(unknown))}")

        if "title" in changes:
            page.title = self._check_title(changes["title"])
        if "description" in changes:
            page.description = self._check_description(changes["description"])
        if "slug" in changes and changes["slug"] != page.slug:
            page.slug = self._check_slug(changes["slug"], exclude_id=page.id)
        if "thank_you_page_id" in changes:
            page.thank_you_page_id = self._check_thank_you_page(changes["thank_you_page_id"], user_id)
        for key in ("ga_id", "meta_pixel_id", "logo_url", "background_url",
                    "event_date_image_url", "participants_image_url"):
            if key in changes:
                setattr(page, key, (changes[key] or "").strip() or None)
        if "published" in changes:
            page.published = bool(changes["published"])

        content_changes = {k: v for k, v in changes.items() if k in CONTENT_FIELDS}
        if content_changes:
            current = page.content
            page.content = self._build_content(
                content_changes.get("form_type", page.form_type),
                content_changes.get("custom_html", current.get("customHtml")),
                content_changes.get("form_fields", current.get("formFields")),
                content_changes.get("form_position", current.get("formPosition", FormPosition.RIGHT.value)),
                content_changes.get("colors", current.get("colors")),
                content_changes.get("fonts", current.get("fonts")),
                content_changes.get("widgets", current.get("widgets")),
            )

        page.updated_at = utcnow()
        self.db.update_landing_page(page)
        logger.info(f"Updated landing page {page.id}")
        return page

    def set_published(self, page_id: str, published: bool, user_id: Optional[str] = None) -> Optional[LandingPage]:
        page = self.get(page_id, user_id)
        if not page:
            return None
        page.published = published
        page.updated_at = utcnow()
        self.db.update_landing_page(page)
        logger.info(f"Landing page {page.slug} {'published' if published else 'unpublished'}")
        return page

    def publish(self, page_id: str, user_id: Optional[str] = None) -> Optional[LandingPage]:
        return self.set_published(page_id, True, user_id)

    def unpublish(self, page_id: str, user_id: Optional[str] = None) -> Optional[LandingPage]:
        return self.set_published(page_id, False, user_id)

    def delete(self, page_id: str, user_id: Optional[str] = None) -> bool:
        """Delete a page together with its leads and analytics."""
        page = self.get(page_id, user_id)
        if not page:
            return False
        deleted = self.db.delete_landing_page(page_id)
        if deleted:
            logger.info(f"Deleted landing page {page_id}")
        return deleted

    def _next_copy_slug(self, slug: str) -> str:
        candidate = f"{slug}-copy"
        counter = 2
        while self.db.slug_exists("landing_pages", candidate):
            candidate = f"{slug}-copy-{counter}"
            counter += 1
        return candidate

    def duplicate(self, page_id: str, user_id: Optional[str] = None) -> Optional[LandingPage]:
        """Copy a page under a free ``-copy`` slug. The copy is unpublished."""
        source = self.get(page_id, user_id)
        if not source:
            return None

        now = utcnow()
        copy_page = LandingPage(
            user_id=source.user_id,
            title=f"{source.title} (cópia)",
            description=source.description,
            slug=self._next_copy_slug(source.slug),
            content=dict(source.content),
            logo_url=source.logo_url,
            background_url=source.background_url,
            event_date_image_url=source.event_date_image_url,
            participants_image_url=source.participants_image_url,
            ga_id=source.ga_id,
            meta_pixel_id=source.meta_pixel_id,
            thank_you_page_id=source.thank_you_page_id,
            template_id=source.template_id,
            published=False,
            created_at=now,
            updated_at=now,
        )
        self.db.insert_landing_page(copy_page)
        logger.info(f"Duplicated landing page {source.id} as {copy_page.slug}")
        return copy_page

    # === IMAGES ===

    def attach_image(
        self,
        page_id: str,
        user_id: Optional[str],
        kind: str,
        filename: str,
        data: bytes,
    ) -> Optional[LandingPage]:
        """Upload an image and store its path on the page."""
        if self.files is None:
            raise RuntimeError("File storage is not configured")
        if kind not in IMAGE_KINDS:
            raise ValueError(f"Unknown image kind: {kind}. Use one of {', '.join(IMAGE_KINDS)}")

        page = self.get(page_id, user_id)
        if not page:
            return None

        folder, attribute = IMAGE_KINDS[kind]
        path = self.files.upload(IMAGE_BUCKET, folder, filename, data)

        previous = getattr(page, attribute)
        if previous and not previous.startswith(("http://", "https://")):
            try:
                self.files.delete(IMAGE_BUCKET, previous)
            except ValueError:
                logger.warning(f"Could not remove previous image {previous}")

        setattr(page, attribute, path)
        page.updated_at = utcnow()
        self.db.update_landing_page(page)
        return page
