import logging
import secrets
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.sessions import SessionMiddleware

from .auth import IdentityProvider, SupabaseCredentialsProvider
from .cache import ViewCache
from .config import Settings, get_settings
from .database import DatabaseClient
from .exceptions import DatabaseError
from .middleware import AuthorizationMiddleware
from .models import ErrorResponse
from .routers.auth import router as auth_router
from .routers.invoices import router as invoices_router

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(level)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DatabaseClient] = None,
    identity_provider: Optional[IdentityProvider] = None,
) -> FastAPI:
    """Build the dashboard app.

    ``store`` and ``identity_provider`` default to the Supabase-backed
    implementations, created at startup from ``settings``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or DatabaseClient.from_credentials(
            settings.supabase_url, settings.supabase_service_role_key
        )
        app.state.identity_provider = identity_provider or SupabaseCredentialsProvider(
            settings.supabase_url, settings.supabase_key
        )
        app.state.view_cache = ViewCache()
        logger.info("%s startup complete.", settings.app_name)
        try:
            yield
        finally:
            app.state.view_cache.clear()
            logger.info("%s shutdown complete.", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Invoice management dashboard",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    session_secret = settings.session_secret
    if not session_secret:
        logger.warning("SESSION_SECRET is not set; sessions will not survive a restart")
        session_secret = secrets.token_urlsafe(32)

    # Added last so it runs first: the gate reads the session it loads
    app.add_middleware(AuthorizationMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        max_age=settings.session_max_age,
        same_site="lax",
    )

    app.include_router(auth_router)
    app.include_router(invoices_router)

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {"message": f"{settings.app_name} is running", "status": "healthy"}

    @app.get("/api/health")
    async def health_check(request: Request):
        """Detailed health check with database connectivity"""
        try:
            await run_in_threadpool(request.app.state.store.ping)
        except DatabaseError:
            raise HTTPException(
                status_code=503,
                detail="Service unavailable: database unreachable"
            )
        return {
            "status": "healthy",
            "database": "connected",
            "timestamp": date.today().isoformat()
        }

    # Error handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                success=False,
                error=str(exc.detail),
                details=f"Status Code: {exc.status_code}"
            ).model_dump()
        )

    @app.exception_handler(DatabaseError)
    async def database_exception_handler(request, exc):
        # Already logged where it was raised
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(success=False, error=str(exc)).model_dump()
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                success=False,
                error="Internal server error",
            ).model_dump()
        )

    return app
