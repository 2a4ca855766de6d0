"""
Role Permission API
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from bazarx.config.permissions import (
    can_access_route,
    can_edit_own_content,
    navigation_for_role,
    role_display_name,
    route_prefixes_for_role,
    sections_for_role,
)
from bazarx.dependencies import get_current_user
from bazarx.models.user import SessionUser
from bazarx.schemas.auth import PermissionsResponse, RouteCheckResponse

router = APIRouter()


@router.get("/me", response_model=PermissionsResponse)
async def get_my_permissions(current_user: SessionUser = Depends(get_current_user)):
    """Sections, route prefixes and menu of the session's role. Unknown roles get nothing."""
    return PermissionsResponse(
        role=current_user.role,
        display_name=role_display_name(current_user.role),
        sections=list(sections_for_role(current_user.role)),
        routes=sorted(route_prefixes_for_role(current_user.role)),
        navigation=navigation_for_role(current_user.role),
    )


@router.get("/check", response_model=RouteCheckResponse)
async def check_route(
    path: str = Query(..., min_length=1),
    created_by: Optional[str] = Query(None, alias="createdBy"),
    current_user: SessionUser = Depends(get_current_user),
):
    """
    Whether the session may open ``path``

    With ``createdBy`` the response also says whether the record that user
    created may be edited.
    """
    can_edit = None
    if created_by is not None:
        can_edit = can_edit_own_content(current_user.role, current_user.id, created_by)
    return RouteCheckResponse(
        path=path,
        allowed=can_access_route(current_user.role, path),
        can_edit=can_edit,
    )
