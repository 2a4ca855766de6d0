"""
Admin Dashboard API
"""
import logging

from fastapi import APIRouter, Depends

from bazarx.dependencies import get_user_client, require_section
from bazarx.models.user import SessionUser
from bazarx.schemas.dashboard import DashboardPage, ErrorPanel, SkeletonView
from bazarx.services.backend_client import BackendAuthError, BackendClient, BackendError
from bazarx.services.dashboard_service import dashboard_service
from bazarx.views.dashboard import render_dashboard
from bazarx.views.skeletons import render_skeleton

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=DashboardPage)
async def get_dashboard(
    current_user: SessionUser = Depends(require_section("home")),
    client: BackendClient = Depends(get_user_client),
):
    """
    The dashboard of the session's role

    A failed load is not an HTTP error: the page shows an error panel with
    the upstream message in place of the dashboard.
    """
    try:
        payload = await dashboard_service.fetch(client)
    except BackendAuthError:
        raise
    except BackendError as exc:
        logger.warning("Dashboard load failed for %s: %s", current_user.email, exc.message)
        return DashboardPage(state="error", error=ErrorPanel(message=exc.message))

    view = render_dashboard(current_user.role, payload, current_user.name)
    return DashboardPage(state="ready", view=view)


@router.get("/skeleton", response_model=SkeletonView)
async def get_dashboard_skeleton(current_user: SessionUser = Depends(require_section("home"))):
    """Loading placeholder matching the role's dashboard layout."""
    return render_skeleton(current_user.role)
