"""Data models for page and lead storage."""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any


def new_id() -> str:
    """Generate a record id."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FormType(Enum):
    """How a landing page collects leads."""

    SYSTEM = "system"
    CUSTOM = "custom"


class FormPosition(Enum):
    """Where the form sits in the page grid."""

    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


DEFAULT_COLORS = {
    "primary": "#7C3AFF",
    "secondary": "#4CC9F0",
    "background": "#FFFFFF",
    "text": "#1A1F2E",
}

DEFAULT_FONTS = {
    "title": "Inter",
    "body": "Inter",
}

TEMPLATE_COLORS = {
    "primary": "#3b82f6",
    "secondary": "#8b5cf6",
    "background": "#1e1e1e",
    "text": "#ffffff",
}

TEMPLATE_FORM_STYLE = {
    "borderRadius": "0.5rem",
    "backgroundColor": "rgba(0,0,0,0.5)",
    "inputStyle": "modern",
    "buttonStyle": "gradient",
}

DEFAULT_THANK_YOU_COLORS = {
    "background": "#FFFFFF",
    "text": "#1A1F2E",
}


@dataclass
class User:
    """A dashboard account."""

    id: str = field(default_factory=new_id)
    email: str = ""
    password_hash: str = ""
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Profile:
    """Display information for a user."""

    id: str = ""
    name: str = ""
    avatar_url: Optional[str] = None
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Session:
    """An authenticated dashboard session."""

    token: str
    user_id: str
    created_at: datetime = field(default_factory=utcnow)
    expires_at: Optional[datetime] = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= utcnow()


@dataclass
class LandingPage:
    """A publishable landing page."""

    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    title: str = ""
    description: str = ""
    slug: str = ""
    content: Dict[str, Any] = field(default_factory=dict)
    logo_url: Optional[str] = None
    background_url: Optional[str] = None
    event_date_image_url: Optional[str] = None
    participants_image_url: Optional[str] = None
    ga_id: Optional[str] = None
    meta_pixel_id: Optional[str] = None
    thank_you_page_id: Optional[str] = None
    template_id: Optional[str] = None
    published: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def form_type(self) -> str:
        return self.content.get("formType", FormType.SYSTEM.value)

    @property
    def form_fields(self) -> List[Dict[str, Any]]:
        return self.content.get("formFields") or []

    @property
    def colors(self) -> Dict[str, str]:
        return {**DEFAULT_COLORS, **(self.content.get("colors") or {})}

    @property
    def fonts(self) -> Dict[str, str]:
        return {**DEFAULT_FONTS, **(self.content.get("fonts") or {})}

    @property
    def widgets(self) -> List[Dict[str, Any]]:
        return self.content.get("widgets") or []

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class Template:
    """A reusable style/layout preset for landing pages."""

    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    title: str = ""
    slug: str = ""
    description: str = ""
    colors: Dict[str, str] = field(default_factory=lambda: dict(TEMPLATE_COLORS))
    gradients: List[str] = field(default_factory=list)
    fonts: Dict[str, str] = field(default_factory=lambda: {"heading": "Inter", "body": "Inter"})
    form_position: str = FormPosition.RIGHT.value
    form_style: Dict[str, Any] = field(default_factory=lambda: dict(TEMPLATE_FORM_STYLE))
    layout_type: str = "default"
    max_width: str = "full"
    spacing: Dict[str, str] = field(default_factory=dict)
    effects: Dict[str, bool] = field(default_factory=lambda: {
        "glassmorphism": False,
        "animation": False,
        "parallax": False,
    })
    seo: Dict[str, str] = field(default_factory=lambda: {
        "title": "",
        "description": "",
        "keywords": "",
    })
    widgets: List[Dict[str, Any]] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class ThankYouPage:
    """A confirmation page shown after a form submission."""

    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    title: str = ""
    description: str = ""
    slug: str = ""
    logo_url: Optional[str] = None
    message: str = ""
    redirect_url: Optional[str] = None
    redirect_delay: Optional[int] = None
    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_THANK_YOU_COLORS))
    published: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def has_redirect(self) -> bool:
        return bool(self.redirect_url) and bool(self.redirect_delay)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class Lead:
    """A form submission captured against a landing page."""

    id: str = field(default_factory=new_id)
    landing_page_id: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)

    # Joined from landing_pages when available
    landing_page_title: Optional[str] = None
    landing_page_slug: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Get best available name for display."""
        return self.data.get("name") or self.data.get("email") or f"Lead {self.id[:8]}"

    def to_dict(self) -> Dict[str, Any]:
        landing_page = None
        if self.landing_page_title is not None or self.landing_page_slug is not None:
            landing_page = {
                "title": self.landing_page_title,
                "slug": self.landing_page_slug,
            }
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "landing_page_id": self.landing_page_id,
            "landing_page": landing_page,
            "data": self.data,
        }


@dataclass
class PageView:
    """A single visit to a landing page."""

    id: str = field(default_factory=new_id)
    landing_page_id: str = ""
    session_id: str = ""
    referrer: str = ""
    user_agent: str = ""
    duration_seconds: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class AnalyticsEvent:
    """An interaction event (scroll depth, submit) during a visit."""

    id: str = field(default_factory=new_id)
    landing_page_id: str = ""
    session_id: str = ""
    event_type: str = ""
    event_data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class AppConfig:
    """Workspace-wide settings: branding, notifications and integration key."""

    id: str = field(default_factory=new_id)
    site_name: str = "Simplo Pages"
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    primary_color: str = "#0066FF"
    notify_on_lead: bool = True
    admin_email: str = ""
    whatsapp_number: Optional[str] = None
    whatsapp_message: Optional[str] = None
    integration_api_key: Optional[str] = None
    is_active: bool = True

    def to_dict(self, include_key: bool = True) -> Dict[str, Any]:
        data = asdict(self)
        if not include_key:
            data.pop("integration_api_key", None)
        return data
