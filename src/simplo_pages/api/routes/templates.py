"""Dashboard routes for templates."""

import logging

from fastapi import APIRouter, Depends

from ..deps import Services, get_current_user, get_services, not_found, validation_error
from ..schemas.pages import TemplateCreate, TemplateUpdate, TemplateUseRequest
from ...storage import User
from .landing_pages import page_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/templates", tags=["templates"])


@router.get("")
def list_templates(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    return [t.to_dict() for t in services.templates.list(user.id)]


@router.post("", status_code=201)
def create_template(
    payload: TemplateCreate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    fields = payload.model_dump(exclude_none=True)
    title = fields.pop("title")
    description = fields.pop("description")
    try:
        template = services.templates.create(user.id, title, description, **fields)
    except ValueError as e:
        raise validation_error(e)
    return template.to_dict()


@router.get("/{template_id}")
def get_template(template_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    template = services.templates.get(template_id, user.id)
    if not template:
        raise not_found("Template")
    return template.to_dict()


@router.patch("/{template_id}")
@router.put("/{template_id}")
def update_template(
    template_id: str,
    payload: TemplateUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        template = services.templates.update(template_id, user.id, **payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise validation_error(e)
    if not template:
        raise not_found("Template")
    return template.to_dict()


@router.delete("/{template_id}")
def delete_template(template_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    if not services.templates.delete(template_id, user.id):
        raise not_found("Template")
    return {"success": True}


@router.post("/{template_id}/use", status_code=201)
def use_template(
    template_id: str,
    payload: TemplateUseRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Start a new landing page from this template."""
    if not services.templates.get(template_id, user.id):
        raise not_found("Template")
    try:
        page = services.pages.create_from_template(
            user.id, template_id, payload.title, payload.description, slug=payload.slug
        )
    except ValueError as e:
        raise validation_error(e)
    return page_response(services, page)
