import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from cisops.api.rate_limit import limiter
from cisops.api.routes_auth import router as auth_router
from cisops.api.routes_health import router as health_router
from cisops.api.routes_invoice import router as invoice_router
from cisops.api.routes_metrics import router as metrics_router
from cisops.api.routes_returns import router as returns_router
from cisops.api.routes_subcontractor import router as subcontractor_router
from cisops.api.routes_submission import router as submission_router
from cisops.api.routes_user import router as user_router
from cisops.core.config import settings
from cisops.core.errors import register_error_handlers
from cisops.core.logger import init_logging
from cisops.db.init_db import init_db

logger = logging.getLogger(__name__)


async def _rate_limit_handler(request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded path=%s", request.url.path)
    return JSONResponse(status_code=429, content={"detail": "Too many requests"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.setdefault(
            "Strict-Transport-Security",
            f"max-age={settings.HSTS_SECONDS}; includeSubDomains; preload",
        )
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Content-Security-Policy", settings.CONTENT_SECURITY_POLICY)
        return response


def create_app() -> FastAPI:
    init_logging()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    if is_production:
        app.add_middleware(HTTPSRedirectMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    register_error_handlers(app)

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(user_router, prefix="/users", tags=["users"])
    app.include_router(subcontractor_router, prefix="/subcontractors", tags=["subcontractors"])
    app.include_router(invoice_router, prefix="/invoices", tags=["invoices"])
    app.include_router(returns_router, prefix="/returns", tags=["returns"])
    app.include_router(submission_router, prefix="/submissions", tags=["submissions"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)

    @app.on_event("startup")
    def startup_event():
        init_db()

    return app


app = create_app()
