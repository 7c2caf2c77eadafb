"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination
from prometheus_client import make_asgi_app

from app.config import get_settings
from app.core.errors import (
    SuppressionOverrideRequired,
    TransientStoreError,
    ValidationError,
)
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers import (
    analytics_router,
    decisions_router,
    events_router,
    identities_router,
    scheduled_actions_router,
    suppressions_router,
    webhooks,
)

logger = get_logger("api")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": exc.message, "field": exc.field},
        )

    @app.exception_handler(SuppressionOverrideRequired)
    async def override_required_handler(
        request: Request, exc: SuppressionOverrideRequired
    ):
        return JSONResponse(
            status_code=409,
            content={
                "detail": str(exc),
                "recipient_id": exc.recipient_id,
                "reasons": exc.reasons,
            },
        )

    @app.exception_handler(TransientStoreError)
    async def transient_store_handler(request: Request, exc: TransientStoreError):
        logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Store temporarily unavailable; retry later"},
            headers={"Retry-After": "5"},
        )


def create_app(testing: bool = False) -> FastAPI:
    LoggingConfig()
    settings = get_settings()

    app = FastAPI(title=settings.app_name)
    app.state.testing = testing

    register_exception_handlers(app)

    app.include_router(events_router.router)
    app.include_router(decisions_router.router)
    app.include_router(identities_router.router)
    app.include_router(suppressions_router.router)
    app.include_router(scheduled_actions_router.router)
    app.include_router(analytics_router.router)
    app.include_router(webhooks.router)

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        return {"status": "ok", "environment": settings.environment}

    if not testing:
        app.mount("/metrics", make_asgi_app())

    add_pagination(app)
    return app


app = create_app()
