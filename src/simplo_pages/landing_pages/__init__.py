"""Landing pages, templates, thank-you pages and their public rendering."""

from .forms import (
    FieldType,
    FormField,
    DEFAULT_FORM_FIELDS,
    default_form_fields,
    validate_submission,
    clean_custom_submission,
)
from .service import LandingPageService, IMAGE_KINDS
from .templates import TemplateService, template_slug
from .thank_you import ThankYouPageService
from .renderer import PageRenderer

__all__ = [
    "FieldType",
    "FormField",
    "DEFAULT_FORM_FIELDS",
    "default_form_fields",
    "validate_submission",
    "clean_custom_submission",
    "LandingPageService",
    "IMAGE_KINDS",
    "TemplateService",
    "template_slug",
    "ThankYouPageService",
    "PageRenderer",
]
