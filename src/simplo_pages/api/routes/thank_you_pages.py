"""Dashboard routes for thank-you pages."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import HTMLResponse

from ..deps import Services, get_current_user, get_services, not_found, validation_error
from ..schemas.pages import ThankYouPageCreate, ThankYouPageUpdate
from ...storage import ThankYouPage, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/thank-you-pages", tags=["thank-you-pages"])


def thank_you_response(services: Services, page: ThankYouPage) -> Dict[str, Any]:
    data = page.to_dict()
    data["public_path"] = f"/{page.slug}"
    data["logo"] = services.files.public_url(page.logo_url, "thank-you-pages")
    return data


@router.get("")
def list_thank_you_pages(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    return [thank_you_response(services, p) for p in services.thank_you.list(user.id)]


@router.post("", status_code=201)
def create_thank_you_page(
    payload: ThankYouPageCreate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        page = services.thank_you.create(user.id, **payload.model_dump())
    except ValueError as e:
        raise validation_error(e)
    return thank_you_response(services, page)


@router.get("/{page_id}")
def get_thank_you_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.thank_you.get(page_id, user.id)
    if not page:
        raise not_found("Thank-you page")
    return thank_you_response(services, page)


@router.patch("/{page_id}")
@router.put("/{page_id}")
def update_thank_you_page(
    page_id: str,
    payload: ThankYouPageUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        page = services.thank_you.update(page_id, user.id, **payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise validation_error(e)
    if not page:
        raise not_found("Thank-you page")
    return thank_you_response(services, page)


@router.delete("/{page_id}")
def delete_thank_you_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    if not services.thank_you.delete(page_id, user.id):
        raise not_found("Thank-you page")
    return {"success": True}


@router.post("/{page_id}/publish")
def publish_thank_you_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.thank_you.publish(page_id, user.id)
    if not page:
        raise not_found("Thank-you page")
    return thank_you_response(services, page)


@router.post("/{page_id}/unpublish")
def unpublish_thank_you_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.thank_you.unpublish(page_id, user.id)
    if not page:
        raise not_found("Thank-you page")
    return thank_you_response(services, page)


@router.get("/{page_id}/preview", response_class=HTMLResponse)
def preview_thank_you_page(page_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    page = services.thank_you.get(page_id, user.id)
    if not page:
        raise not_found("Thank-you page")
    return HTMLResponse(services.renderer.render_thank_you_page(page))


@router.post("/{page_id}/logo")
async def upload_logo(
    page_id: str,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    data = await file.read()
    try:
        page = services.thank_you.upload_logo(page_id, user.id, file.filename or "logo", data)
    except ValueError as e:
        raise validation_error(e)
    if not page:
        raise not_found("Thank-you page")
    return thank_you_response(services, page)
