"""Public routes: rendered pages, form submissions, tracking and uploads.

This router declares the catch-all ``/{slug}`` paths and must be included last.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from ..deps import Services, get_services, validation_error
from ..schemas.tracking import TrackDurationRequest, TrackEventRequest, TrackViewRequest
from ...storage.files import BUCKETS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.post("/api/track/view")
def track_view(payload: TrackViewRequest, request: Request, services: Services = Depends(get_services)):
    user_agent = payload.user_agent or request.headers.get("user-agent", "")
    try:
        view = services.tracker.track_view(
            payload.landing_page_id, payload.session_id, payload.referrer, user_agent
        )
    except ValueError as e:
        raise validation_error(e)
    return {"success": view is not None}


@router.post("/api/track/duration")
def track_duration(payload: TrackDurationRequest, services: Services = Depends(get_services)):
    try:
        updated = services.tracker.track_duration(payload.session_id, payload.duration_seconds)
    except ValueError as e:
        raise validation_error(e)
    return {"success": updated > 0}


@router.post("/api/track/event")
def track_event(payload: TrackEventRequest, services: Services = Depends(get_services)):
    try:
        event = services.tracker.track_event(
            payload.landing_page_id, payload.session_id, payload.event_type, payload.event_data
        )
    except ValueError as e:
        raise validation_error(e)
    return {"success": event is not None}


@router.get("/storage/v1/object/public/{bucket}/{path:path}")
def serve_upload(bucket: str, path: str, services: Services = Depends(get_services)):
    if bucket not in BUCKETS:
        raise HTTPException(status_code=404, detail="Not found")
    try:
        data = services.files.open(bucket, path)
    except (FileNotFoundError, ValueError):
        raise HTTPException(status_code=404, detail="Not found")
    return Response(
        data,
        media_type=services.files.content_type(path),
        headers={"Cache-Control": "public, max-age=3600"},
    )


@router.get("/{slug}", response_class=HTMLResponse)
def public_page(slug: str, services: Services = Depends(get_services)):
    """Serve a published thank-you page or landing page for a slug."""
    thank_you = services.thank_you.get_by_slug(slug, published_only=True)
    if thank_you:
        return HTMLResponse(services.renderer.render_thank_you_page(thank_you))

    page = services.pages.get_by_slug(slug, published_only=True)
    if page:
        return HTMLResponse(services.renderer.render_landing_page(page))

    return HTMLResponse(services.renderer.render_not_found(), status_code=404)


async def _read_submission(request: Request) -> tuple:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": "validation_error", "detail": "Invalid JSON body"},
            )
        if not isinstance(body, dict):
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": "validation_error", "detail": "Body must be an object"},
            )
        return body, True

    form = await request.form()
    data = {}
    for key in form.keys():
        values = [str(v) for v in form.getlist(key)]
        data[key] = values if len(values) > 1 else values[0]
    return data, False


@router.post("/{slug}/submit")
async def submit_lead(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Capture a lead from a JSON or form-encoded submission."""
    data, is_json = await _read_submission(request)

    page = services.pages.get_by_slug(slug, published_only=True)
    if not page:
        raise HTTPException(
            status_code=404,
            detail={"success": False, "error": "not_found", "detail": "Landing page not found"},
        )

    try:
        lead = services.leads.submit(page, data, notify=False)
    except ValueError as e:
        raise validation_error(e)
    background_tasks.add_task(services.leads.notify, lead)

    redirect_url = None
    if page.thank_you_page_id:
        thank_you = services.thank_you.get(page.thank_you_page_id)
        if thank_you and thank_you.published:
            redirect_url = f"/{thank_you.slug}"

    if not is_json and redirect_url:
        return RedirectResponse(redirect_url, status_code=303, background=background_tasks)
    return JSONResponse(
        {"success": True, "lead_id": lead.id, "redirect_url": redirect_url},
        status_code=201,
        background=background_tasks,
    )
