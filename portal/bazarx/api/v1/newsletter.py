"""
Newsletter API

``router`` holds the public subscribe/unsubscribe endpoints; ``admin_router``
the subscriber management behind the ``newsletter`` section.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from bazarx.config import settings
from bazarx.dependencies import get_backend_client, get_user_client, require_section, upstream_http_error
from bazarx.models.user import SessionUser
from bazarx.rate_limit import limiter
from bazarx.schemas.auth import MessageResponse
from bazarx.schemas.newsletter import (
    MailtoResponse,
    NewsletterStats,
    SubscribeRequest,
    SubscriberPage,
    UnsubscribeRequest,
    UnsubscribeResult,
)
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.newsletter_service import (
    export_csv,
    filter_subscribers,
    mailto_link,
    newsletter_service,
    paginate,
)
from bazarx.services.validation import FormValidationError, as_http_error

router = APIRouter()
admin_router = APIRouter()


# ---------- Public ----------

@router.get("/unsubscribe", response_model=UnsubscribeResult)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def unsubscribe_page(
    request: Request,
    email: Optional[str] = Query(None),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Unsubscribe page state

    With ``?email=`` the request is submitted once on load; without it the
    page waits for the form.
    """
    if email is None:
        return UnsubscribeResult(status="idle")
    return await newsletter_service.unsubscribe(client, email)


@router.post("/unsubscribe", response_model=UnsubscribeResult)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def unsubscribe(
    request: Request,
    body: UnsubscribeRequest,
    client: BackendClient = Depends(get_backend_client),
):
    return await newsletter_service.unsubscribe(client, body.email)


@router.post("/subscribe", response_model=MessageResponse)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def subscribe(
    request: Request,
    body: SubscribeRequest,
    client: BackendClient = Depends(get_backend_client),
):
    try:
        message = await newsletter_service.subscribe(client, body)
    except FormValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return MessageResponse(message=message)


# ---------- Admin ----------

@admin_router.get("", response_model=SubscriberPage)
async def list_subscribers(
    status: str = Query("all", pattern="^(all|active|inactive)$"),
    source: str = Query("all", pattern="^(all|footer|popup|checkout|other)$"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    current_user: SessionUser = Depends(require_section("newsletter")),
    client: BackendClient = Depends(get_user_client),
):
    try:
        subscribers = await newsletter_service.list_subscribers(client)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return paginate(filter_subscribers(subscribers, status, source, search), page)


@admin_router.get("/stats", response_model=NewsletterStats)
async def get_stats(
    current_user: SessionUser = Depends(require_section("newsletter")),
    client: BackendClient = Depends(get_user_client),
):
    try:
        return await newsletter_service.stats(client)
    except BackendError as exc:
        raise upstream_http_error(exc)


@admin_router.get("/export")
async def export_subscribers(
    status: str = Query("all", pattern="^(all|active|inactive)$"),
    source: str = Query("all", pattern="^(all|footer|popup|checkout|other)$"),
    search: Optional[str] = None,
    current_user: SessionUser = Depends(require_section("newsletter")),
    client: BackendClient = Depends(get_user_client),
):
    """CSV of the filtered subscribers (all pages)."""
    try:
        subscribers = await newsletter_service.list_subscribers(client)
    except BackendError as exc:
        raise upstream_http_error(exc)
    filename = f"newsletter_subscribers_{date.today().isoformat()}.csv"
    return Response(
        content=export_csv(filter_subscribers(subscribers, status, source, search)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@admin_router.get("/mailto", response_model=MailtoResponse)
async def get_mailto_link(
    current_user: SessionUser = Depends(require_section("newsletter")),
    client: BackendClient = Depends(get_user_client),
):
    try:
        subscribers = await newsletter_service.list_subscribers(client)
        return mailto_link(subscribers)
    except FormValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)


@admin_router.delete("/{subscriber_id}")
async def delete_subscriber(
    subscriber_id: str,
    current_user: SessionUser = Depends(require_section("newsletter")),
    client: BackendClient = Depends(get_user_client),
):
    """Delete a subscriber; returns the reloaded first page and stats."""
    try:
        subscribers, stats = await newsletter_service.delete(client, subscriber_id)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return {
        "message": "Subscriber deleted successfully",
        "page": paginate(subscribers, 1),
        "stats": stats,
    }
