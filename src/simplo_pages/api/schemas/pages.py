"""Pydantic models for landing pages, templates and thank-you pages."""

from typing import Optional, Dict, List, Any
from pydantic import BaseModel


class LandingPageCreate(BaseModel):
    title: str
    description: str
    slug: Optional[str] = None
    form_type: str = "system"
    custom_html: Optional[str] = None
    form_fields: Optional[List[Dict[str, Any]]] = None
    form_position: str = "right"
    colors: Optional[Dict[str, str]] = None
    fonts: Optional[Dict[str, str]] = None
    widgets: Optional[List[Dict[str, Any]]] = None
    ga_id: Optional[str] = None
    meta_pixel_id: Optional[str] = None
    thank_you_page_id: Optional[str] = None
    template_id: Optional[str] = None


class LandingPageUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None
    form_type: Optional[str] = None
    custom_html: Optional[str] = None
    form_fields: Optional[List[Dict[str, Any]]] = None
    form_position: Optional[str] = None
    colors: Optional[Dict[str, str]] = None
    fonts: Optional[Dict[str, str]] = None
    widgets: Optional[List[Dict[str, Any]]] = None
    ga_id: Optional[str] = None
    meta_pixel_id: Optional[str] = None
    thank_you_page_id: Optional[str] = None
    published: Optional[bool] = None


class TemplateCreate(BaseModel):
    title: str
    description: str
    colors: Optional[Dict[str, str]] = None
    gradients: Optional[List[str]] = None
    fonts: Optional[Dict[str, str]] = None
    form_position: Optional[str] = None
    form_style: Optional[Dict[str, Any]] = None
    layout_type: Optional[str] = None
    max_width: Optional[str] = None
    spacing: Optional[Dict[str, str]] = None
    effects: Optional[Dict[str, bool]] = None
    seo: Optional[Dict[str, str]] = None
    widgets: Optional[List[Dict[str, Any]]] = None


class TemplateUpdate(TemplateCreate):
    title: Optional[str] = None
    description: Optional[str] = None


class TemplateUseRequest(BaseModel):
    title: str
    description: str
    slug: Optional[str] = None


class ThankYouPageCreate(BaseModel):
    title: str
    message: str
    slug: Optional[str] = None
    description: str = ""
    redirect_url: Optional[str] = None
    redirect_delay: Optional[int] = None
    colors: Optional[Dict[str, str]] = None
    published: bool = False
    landing_page_id: Optional[str] = None


class ThankYouPageUpdate(BaseModel):
    title: Optional[str] = None
    message: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    redirect_url: Optional[str] = None
    redirect_delay: Optional[int] = None
    colors: Optional[Dict[str, str]] = None
    published: Optional[bool] = None
