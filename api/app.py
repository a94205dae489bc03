import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from api.core.config import Settings, get_settings
from api.repositories.json_storage import JsonWorkOrderRepository
from api.routers import work_orders as work_orders_router
from api.services.work_order_service import WorkOrderService

DEV_ORIGINS = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("api").setLevel(settings.log_level)


def create_app(settings: Settings | None = None, service: WorkOrderService | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (`uvicorn api.app:create_app --factory`)."""
    settings = settings or get_settings()
    configure_logging(settings)

    application = FastAPI(title="Work Orders API")

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(DEV_ORIGINS)
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    application.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    application.state.settings = settings
    application.state.work_order_service = service or WorkOrderService(
        JsonWorkOrderRepository(settings.work_orders_file)
    )

    @application.get("/healthz")
    def healthz():
        return {"ok": True}

    application.include_router(work_orders_router.router)
    return application


app = create_app()
