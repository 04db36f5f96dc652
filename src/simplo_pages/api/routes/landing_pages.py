"""Dashboard routes for landing pages."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import HTMLResponse

from ..deps import Services, get_current_user, get_services, not_found, validation_error
from ..schemas.pages import LandingPageCreate, LandingPageUpdate
from ...landing_pages import IMAGE_KINDS
from ...storage import LandingPage, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/landing-pages", tags=["landing-pages"])


def page_response(services: Services, page: LandingPage) -> Dict[str, Any]:
    data = page.to_dict()
    data["public_path"] = f"/{page.slug}"
    data["images"] = {
        kind: services.files.public_url(getattr(page, attribute))
        for kind, (_, attribute) in IMAGE_KINDS.items()
    }
    return data


@router.get("")
def list_pages(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    pages = services.pages.list_for_user(user.id)
    results = []
    for page in pages:
        data = page_response(services, page)
        data["lead_count"] = services.leads.count_for_page(page.id)
        results.append(data)
    return results


@router.post("", status_code=201)
def create_page(
    payload: LandingPageCreate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    data = payload.model_dump()
    template_id = data.pop("template_id")
    try:
        if template_id:
            options = {k: v for k, v in data.items() if v is not None and k in payload.model_fields_set}
            for key in ("title", "description", "slug"):
                options.pop(key, None)
            page = services.pages.create_from_template(
                user.id, template_id, payload.title, payload.description, slug=payload.slug, **options
            )
        else:
            page = services.pages.create(user.id, **data)
    except ValueError as e:
        raise validation_error(e)
    return page_response(services, page)


@router.get("/{page_id}")
def get_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.pages.get(page_id, user.id)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)


@router.patch("/{page_id}")
@router.put("/{page_id}")
def update_page(
    page_id: str,
    payload: LandingPageUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    changes = payload.model_dump(exclude_unset=True)
    try:
        page = services.pages.update(page_id, user.id, **changes)
    except ValueError as e:
        raise validation_error(e)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)


@router.delete("/{page_id}")
def delete_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    if not services.pages.delete(page_id, user.id):
        raise not_found("Landing page")
    return {"success": True}


@router.post("/{page_id}/publish")
def publish_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.pages.publish(page_id, user.id)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)


@router.post("/{page_id}/unpublish")
def unpublish_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.pages.unpublish(page_id, user.id)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)


@router.post("/{page_id}/duplicate", status_code=201)
def duplicate_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.pages.duplicate(page_id, user.id)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)


@router.get("/{page_id}/preview", response_class=HTMLResponse)
def preview_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    """Render the page as visitors would see it, published or not."""
    page = services.pages.get(page_id, user.id)
    if not page:
        raise not_found("Landing page")
    return HTMLResponse(services.renderer.render_landing_page(page))


@router.post("/{page_id}/images/{kind}")
async def upload_image(
    page_id: str,
    kind: str,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if kind not in IMAGE_KINDS:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "validation_error",
                    "detail": f"Image kind must be one of: {', '.join(IMAGE_KINDS)}"},
        )
    data = await file.read()
    try:
        page = services.pages.attach_image(page_id, user.id, kind, file.filename or "upload", data)
    except ValueError as e:
        raise validation_error(e)
    if not page:
        raise not_found("Landing page")
    return page_response(services, page)
