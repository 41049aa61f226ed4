import asyncio
import logging
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from supabase import Client

from app.config import settings
from app.core.errors import AppError
from app.database.supabase_client import get_supabase
from app.modules.health.service import check_health
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.organization import routes as organization_routes
from app.modules.members import routes as members_routes
from app.modules.roles import routes as roles_routes
from app.modules.projects import routes as projects_routes
from app.modules.vba_projects import routes as vba_projects_routes
from app.modules.field_reports import routes as field_reports_routes
from app.modules.reports import routes as reports_routes
from app.modules.backups import routes as backups_routes
from app.modules.permits import routes as permits_routes
from app.modules.documents import routes as documents_routes
from app.modules.activity_logs import routes as activity_logs_routes
from app.modules.search import routes as search_routes
from app.modules.weather import routes as weather_routes
from app.modules.security import routes as security_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    content = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        content["details"] = jsonable_encoder(exc.details, custom_encoder={Exception: str})
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s [%s]", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(status_code=exc.status_code, content=content)


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
                    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
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
app.include_router(organization_routes.router, prefix="/api/v1")
app.include_router(members_routes.router, prefix="/api/v1")
app.include_router(roles_routes.router, prefix="/api/v1")
app.include_router(projects_routes.router, prefix="/api/v1")
app.include_router(vba_projects_routes.router, prefix="/api/v1")
app.include_router(field_reports_routes.router, prefix="/api/v1")
app.include_router(reports_routes.router, prefix="/api/v1")
app.include_router(backups_routes.router, prefix="/api/v1")
app.include_router(permits_routes.router, prefix="/api/v1")
app.include_router(documents_routes.router, prefix="/api/v1")
app.include_router(activity_logs_routes.router, prefix="/api/v1")
app.include_router(search_routes.router, prefix="/api/v1")
app.include_router(weather_routes.router, prefix="/api/v1")
app.include_router(security_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment}, v{settings.app_version})")

    if settings.backup_scheduler_enabled:
        from app.modules.backups.scheduler import backup_scheduler_loop
        app.state.backup_scheduler = asyncio.create_task(backup_scheduler_loop())
        logger.info(f"Backup scheduler started - checking every {settings.backup_scheduler_interval}s")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "backup_scheduler", None)
    if task is not None:
        task.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health(supabase: Client = Depends(get_supabase)):
    """Database probe, configured services, version and environment"""
    body, status_code = check_health(supabase)
    return JSONResponse(status_code=status_code, content=body)


@app.get("/ready")
@limiter.exempt
async def ready(supabase: Client = Depends(get_supabase)):
    body, status_code = check_health(supabase)
    return JSONResponse(
        status_code=status_code,
        content={"status": "ready" if status_code == 200 else "not_ready", "database": body["database"]},
    )
