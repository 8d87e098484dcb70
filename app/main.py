import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.config.catalog import get_catalog
from app.core.errors import backend_error
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.repositories import routes as repositories_routes
from app.modules.repositories.store import get_repository_store
from app.modules.prompts import routes as prompts_routes
from app.modules.generation import routes as generation_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(
    title=settings.app_name,
    description="Prompt repositories, stars and sample generation",
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(APIError)
async def backend_exception_handler(request: Request, exc: APIError):
    """Backend errors that escaped a service: unique violations are 409, the rest 500"""
    logger.error("Backend error on %s %s", request.method, request.url.path)
    error = backend_error("process request", exc)
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    detail = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"detail": detail})


SECURITY_HEADERS = [
    (b"x-content-type-options", b"nosniff"),
    (b"x-frame-options", b"DENY"),
    (b"referrer-policy", b"no-referrer"),
]


class SecurityHeadersMiddleware:
    """Adds SECURITY_HEADERS to every HTTP response. Prompt content is user text, so nothing may sniff or frame it."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + SECURITY_HEADERS
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

for module_routes in (auth_routes, profiles_routes, repositories_routes, prompts_routes, generation_routes):
    app.include_router(module_routes.router, prefix=API_PREFIX)


def _log_store_change():
    logger.debug("Repository store updated")


@app.on_event("startup")
async def startup_event():
    logger.info("%s starting (environment=%s)", settings.app_name, settings.environment)
    if not settings.openrouter_api_key:
        logger.error("OpenRouter API key is not set. Sample generation is disabled until OPENROUTER_API_KEY is configured.")
    app.state.unsubscribe_store_log = get_repository_store().subscribe(_log_store_change)


@app.on_event("shutdown")
async def shutdown_event():
    unsubscribe = getattr(app.state, "unsubscribe_store_log", None)
    if unsubscribe:
        unsubscribe()
    logger.info("%s stopped", settings.app_name)


@app.get("/")
async def root():
    return {"name": settings.app_name, "docs": "/docs", "api": API_PREFIX}


@app.get(f"{API_PREFIX}/catalog")
async def catalog():
    """Licenses, categories and sort options for the repository forms"""
    return get_catalog()


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Ready once the Supabase settings are present; no call is made to the backend"""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready", "reason": "Supabase is not configured"})
    return {"status": "ready"}
