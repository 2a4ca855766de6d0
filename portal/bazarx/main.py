"""
BazarXpress Portal - Main FastAPI Application
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from bazarx.config import settings
from bazarx.dependencies import LoginRedirect, session_from_request
from bazarx.rate_limit import limiter
from bazarx.services.backend_client import BackendAuthError
from bazarx.state import session_stores

logger = logging.getLogger(__name__)
from bazarx.api.v1 import addresses, auth, cart, dashboard, newsletter, permissions, warehouses

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."

# The address picker asks the browser for the current position
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(self)",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting %s %s against %s", settings.APP_NAME, settings.APP_VERSION, settings.API_URL)
    if not settings.GOOGLE_MAPS_API_KEY and not settings.OPENCAGE_API_KEY:
        logger.warning("No geocoding key configured; address lookups will return blank fields")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="BazarXpress Portal API",
    description="Admin and account portal in front of the BazarXpress REST API",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan
)

# slowapi reads the limiter from app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


@app.exception_handler(LoginRedirect)
async def login_redirect_handler(request: Request, exc: LoginRedirect):
    """Guards end here; the protected page is never built."""
    return RedirectResponse(url=exc.location, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(BackendAuthError)
async def upstream_auth_error_handler(request: Request, exc: BackendAuthError):
    """The upstream API rejected the session's token: end the session."""
    user = session_from_request(request)
    if user is not None:
        session_stores.drop(user.sid)
        logger.info("Upstream rejected token of %s, session ended", user.email)
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": SESSION_EXPIRED_MESSAGE},
    )
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


# Public
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(newsletter.router, prefix="/api/v1/newsletter", tags=["Newsletter"])
# Customer account
app.include_router(addresses.router, prefix="/api/v1/addresses", tags=["Addresses"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(cart.wishlist_router, prefix="/api/v1/wishlist", tags=["Wishlist"])
# Admin
app.include_router(permissions.router, prefix="/api/v1/permissions", tags=["Permissions"])
app.include_router(dashboard.router, prefix="/api/v1/admin/dashboard", tags=["Dashboard"])
app.include_router(warehouses.router, prefix="/api/v1/admin/warehouses", tags=["Warehouses"])
app.include_router(newsletter.admin_router, prefix="/api/v1/admin/newsletter", tags=["Newsletter Admin"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": settings.APP_VERSION}
