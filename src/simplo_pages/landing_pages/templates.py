"""Reusable landing page templates."""

import logging
import re
from typing import Dict, List, Optional, Any

from ..editor import EditorCanvas
from ..storage import Database
from ..storage.models import Template, FormPosition, TEMPLATE_COLORS
from .service import HEX_COLOR, FONT_NAME

logger = logging.getLogger(__name__)

LAYOUT_TYPES = {
    "default": "Layout tradicional com formulário ao lado",
    "centered": "Conteúdo centralizado com formulário abaixo",
    "minimal": "Design limpo e minimalista",
    "hero": "Grande imagem de fundo com formulário sobreposto",
}

EFFECTS = ("glassmorphism", "animation", "parallax")
SEO_FIELDS = ("title", "description", "keywords")
TEMPLATE_FONT_SLOTS = ("heading", "body")

EDITABLE_FIELDS = {
    "title",
    "description",
    "colors",
    "gradients",
    "fonts",
    "form_position",
    "form_style",
    "layout_type",
    "max_width",
    "spacing",
    "effects",
    "seo",
    "widgets",
}


def template_slug(title: str) -> str:
    """Template slugs only keep ASCII letters and digits."""
    slug = re.sub(r"[^a-z0-9]+", "-", (title or "").lower())
    return slug.strip("-")


def _check_colors(colors: Any) -> Dict[str, str]:
    if not isinstance(colors, dict):
        raise ValueError("Colors must be an object")
    for key, value in colors.items():
        if key not in TEMPLATE_COLORS:
            raise ValueError(f"Unknown color: {key}")
        if not isinstance(value, str) or not HEX_COLOR.match(value):
            raise ValueError(f"Color '{key}' must be a hex value like #3b82f6")
    return dict(colors)


def _check_fonts(fonts: Any) -> Dict[str, str]:
    if not isinstance(fonts, dict):
        raise ValueError("Fonts must be an object")
    checked = {}
    for key, value in fonts.items():
        if key not in TEMPLATE_FONT_SLOTS:
            raise ValueError(f"Unknown font slot: {key}")
        value = value.strip() if isinstance(value, str) else ""
        if not FONT_NAME.match(value):
            raise ValueError(f"Invalid font name for '{key}'")
        checked[key] = value
    return checked


class TemplateService:
    """CRUD for a user's templates."""

    def __init__(self, db: Database):
        self.db = db

    def _apply(self, template: Template, changes: Dict[str, Any]):
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown template fields: {', '.join(sorted(unknown))}")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValueError("Title and description are required")
            template.title = title
            template.slug = template_slug(title)
        if "description" in changes:
            description = (changes["description"] or "").strip()
            if not description:
                raise ValueError("Title and description are required")
            template.description = description

        if changes.get("colors") is not None:
            template.colors = {**template.colors, **_check_colors(changes["colors"])}
        if changes.get("gradients") is not None:
            gradients = changes["gradients"]
            if not isinstance(gradients, list) or not all(isinstance(g, str) for g in gradients):
                raise ValueError("Gradients must be a list of CSS gradients")
            template.gradients = list(gradients)
        if changes.get("fonts") is not None:
            template.fonts = {**template.fonts, **_check_fonts(changes["fonts"])}
        if changes.get("form_position") is not None:
            try:
                template.form_position = FormPosition(changes["form_position"]).value
            except ValueError:
                raise ValueError("Form position must be 'left', 'right' or 'center'")
        if changes.get("form_style") is not None:
            template.form_style = {**template.form_style, **dict(changes["form_style"])}
        if changes.get("layout_type") is not None:
            if changes["layout_type"] not in LAYOUT_TYPES:
                raise ValueError(f"Layout must be one of: {', '.join(LAYOUT_TYPES)}")
            template.layout_type = changes["layout_type"]
        if changes.get("max_width") is not None:
            template.max_width = str(changes["max_width"])
        if changes.get("spacing") is not None:
            template.spacing = {k: str(v) for k, v in dict(changes["spacing"]).items()}
        if changes.get("effects") is not None:
            effects = dict(changes["effects"])
            template.effects = {name: bool(effects.get(name, template.effects.get(name, False)))
                                for name in EFFECTS}
        if changes.get("seo") is not None:
            seo = dict(changes["seo"])
            template.seo = {name: str(seo.get(name, template.seo.get(name, "")) or "")
                            for name in SEO_FIELDS}
        if changes.get("widgets") is not None:
            template.widgets = EditorCanvas.from_list(changes["widgets"]).to_list()

    def create(self, user_id: Optional[str], title: str, description: str, **fields) -> Template:
        title = (title or "").strip()
        description = (description or "").strip()
        if not title or not description:
            raise ValueError("Title and description are required")

        slug = template_slug(title)
        if not slug:
            raise ValueError("Title must contain letters or numbers")

        template = Template(user_id=user_id, title=title, slug=slug, description=description)
        self._apply(template, fields)
        self.db.insert_template(template)
        logger.info(f"Created template {template.id} ({template.slug})")
        return template

    def get(self, template_id: str, user_id: Optional[str] = None) -> Optional[Template]:
        template = self.db.get_template(template_id)
        if not template:
            return None
        if user_id and template.user_id and template.user_id != user_id:
            return None
        return template

    def list(self, user_id: Optional[str] = None) -> List[Template]:
        return self.db.list_templates(user_id)

    def update(self, template_id: str, user_id: Optional[str] = None, **changes) -> Optional[Template]:
        template = self.get(template_id, user_id)
        if not template:
            return None
        self._apply(template, changes)
        self.db.update_template(template)
        return template

    def delete(self, template_id: str, user_id: Optional[str] = None) -> bool:
        template = self.get(template_id, user_id)
        if not template:
            return False
        deleted = self.db.delete_template(template_id)
        if deleted:
            logger.info(f"Deleted template {template_id}")
        return deleted
