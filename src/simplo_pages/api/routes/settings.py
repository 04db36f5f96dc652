"""Workspace settings, integration key and profile routes."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..deps import Services, get_current_user, get_services, not_found, validation_error
from ..schemas.auth import PasswordChange, ProfileUpdate
from ..schemas.settings import SettingsUpdate
from ...storage import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/settings", tags=["settings"])

ASSET_KINDS = {"logo": "logo_url", "favicon": "favicon_url"}


def settings_response(services: Services) -> dict:
    config = services.config.get()
    data = config.to_dict()
    data["logo"] = services.files.public_url(config.logo_url, "app-assets")
    data["favicon"] = services.files.public_url(config.favicon_url, "app-assets")
    return data


@router.get("")
def get_settings(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    return settings_response(services)


@router.put("")
@router.patch("")
def update_settings(
    payload: SettingsUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        services.config.update(**payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise validation_error(e)
    return settings_response(services)


@router.post("/api-key")
def regenerate_api_key(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    """Issue a new integration key; the previous one stops working."""
    return {"integration_api_key": services.config.regenerate_api_key()}


@router.delete("/api-key")
def revoke_api_key(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    services.config.revoke_api_key()
    return {"success": True}


@router.post("/assets/{kind}")
async def upload_asset(
    kind: str,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Upload the workspace logo or favicon."""
    if kind not in ASSET_KINDS:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "validation_error", "detail": "Asset must be 'logo' or 'favicon'"},
        )
    data = await file.read()
    try:
        path = services.files.upload("app-assets", kind, file.filename or kind, data)
        services.config.update(**{ASSET_KINDS[kind]: path})
    except ValueError as e:
        raise validation_error(e)
    return settings_response(services)


@router.get("/profile")
def get_profile(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    profile = services.accounts.get_profile(user.id)
    if not profile:
        raise not_found("Profile")
    return {"id": profile.id, "email": user.email, "name": profile.name, "avatar_url": profile.avatar_url}


@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        profile = services.accounts.update_profile(user.id, name=payload.name, avatar_url=payload.avatar_url)
    except ValueError as e:
        raise validation_error(e)
    if not profile:
        raise not_found("Profile")
    return {"id": profile.id, "email": user.email, "name": profile.name, "avatar_url": profile.avatar_url}


@router.post("/password")
def change_password(
    payload: PasswordChange,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        changed = services.accounts.change_password(user.id, payload.current_password, payload.new_password)
    except ValueError as e:
        raise validation_error(e)
    if not changed:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "validation_error", "detail": "Current password is incorrect"},
        )
    return {"success": True}
