"""
Authentication API Routes
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from bazarx.config import settings
from bazarx.dependencies import (
    get_backend_client,
    get_current_user,
    get_optional_user,
    get_store,
    get_user_client,
    upstream_http_error,
)
from bazarx.models.user import SessionUser
from bazarx.rate_limit import limiter
from bazarx.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetSubmit,
    ProfileUpdate,
    ResetLinkStatus,
    UserResponse,
)
from bazarx.services import auth_service
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.validation import FormValidationError, as_http_error
from bazarx.state import SetCredentials, Store, UpdateUser, session_stores
from bazarx.utils.security import create_session_token

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_session_cookie(response: Response, session_token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,
    )


def _user_response(user: SessionUser) -> UserResponse:
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role, phone=user.phone)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    client: BackendClient = Depends(get_backend_client),
):
    """
    Login with email and password

    Starts a portal session holding the upstream token and seeds the
    session's state store.
    """
    try:
        user = await auth_service.login(client, credentials.email, credentials.password)
    except BackendError as exc:
        if exc.status_code not in (400, 401, 403, 404):
            raise upstream_http_error(exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message or "Login failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session_token = create_session_token(user)
    store = session_stores.get(user.sid, expires_at=user.expires_at)
    store.dispatch(SetCredentials(user=user.public_dict(), token=user.token))
    _set_session_cookie(response, session_token)

    return LoginResponse(session_token=session_token, user=_user_response(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, user: Optional[SessionUser] = Depends(get_optional_user)):
    """End the session; clears the cookie and the session's state."""
    if user is not None:
        session_stores.drop(user.sid)
        logger.info("User %s logged out", user.email)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: SessionUser = Depends(get_current_user)):
    """Get current user information"""
    return _user_response(current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    changes: ProfileUpdate,
    response: Response,
    current_user: SessionUser = Depends(get_current_user),
    client: BackendClient = Depends(get_user_client),
    store: Store = Depends(get_store),
):
    """Update the user's own profile and refresh the session with the result."""
    try:
        updated = await auth_service.update_profile(client, changes)
    except BackendError as exc:
        raise upstream_http_error(exc)

    store.dispatch(UpdateUser(changes=updated))
    current_user.name = updated.get("name") or current_user.name
    current_user.phone = updated.get("phone", current_user.phone)
    _set_session_cookie(response, create_session_token(current_user))
    return _user_response(current_user)


@router.get("/reset-password", response_model=ResetLinkStatus)
async def check_reset_link(
    userId: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    expires: Optional[str] = Query(None),
):
    """State of the password reset page for the link's query parameters."""
    return auth_service.check_reset_link(userId, role, expires)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def reset_password(
    request: Request,
    submit: PasswordResetSubmit,
    client: BackendClient = Depends(get_backend_client),
):
    try:
        message = await auth_service.reset_password(client, submit)
    except FormValidationError as exc:
        raise as_http_error(exc)
    except BackendError as exc:
        raise upstream_http_error(exc)
    return MessageResponse(message=message)
