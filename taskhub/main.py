import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from taskhub.config import settings
from taskhub.core.exceptions import (
    AuthError, EmailAlreadyRegistered, ProfileLoadFailure, ProfileCreateFailure, AttachmentUploadError
)
from taskhub.modules.auth import routes as auth_routes
from taskhub.modules.profiles import routes as profiles_routes
from taskhub.modules.tasks import routes as tasks_routes
from taskhub.modules.comments import routes as comments_routes
from taskhub.modules.attachments import routes as attachments_routes
from taskhub.modules.chat import routes as chat_routes
from taskhub.modules.messages import routes as messages_routes
from taskhub.modules.notifications import routes as notifications_routes
from taskhub.modules.teams import routes as teams_routes
from taskhub.modules.preferences import routes as preferences_routes
from taskhub.modules.dashboard import routes as dashboard_routes
from taskhub.modules.statistics import routes as statistics_routes
from taskhub.modules.realtime import routes as realtime_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(EmailAlreadyRegistered)
async def email_registered_handler(request: Request, exc: EmailAlreadyRegistered):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ProfileLoadFailure)
@app.exception_handler(ProfileCreateFailure)
async def profile_failure_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(AttachmentUploadError)
async def attachment_upload_handler(request: Request, exc: AttachmentUploadError):
    logger.error("Attachment upload failed for: %s", ", ".join(exc.failed))
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "failed": exc.failed, "uploaded": len(exc.uploaded)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(tasks_routes.router, prefix="/api/v1")
app.include_router(comments_routes.router, prefix="/api/v1")
app.include_router(attachments_routes.router, prefix="/api/v1")
app.include_router(chat_routes.router, prefix="/api/v1")
app.include_router(messages_routes.router, prefix="/api/v1")
app.include_router(notifications_routes.router, prefix="/api/v1")
app.include_router(teams_routes.router, prefix="/api/v1")
app.include_router(preferences_routes.router, prefix="/api/v1")
app.include_router(dashboard_routes.router, prefix="/api/v1")
app.include_router(statistics_routes.router, prefix="/api/v1")
app.include_router(realtime_routes.router)


@app.on_event("startup")
async def startup_event():
    settings.require_supabase()
    logger.info("Application startup")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: Supabase connection parameters must be configured."""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return {"status": "ready"}
