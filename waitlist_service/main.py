import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from waitlist_service.api.v1.admin import router as admin_router
from waitlist_service.api.v1.auth import router as auth_router
from waitlist_service.api.v1.waitlist import router as waitlist_router
from waitlist_service.core.config import settings
from waitlist_service.core.errors import WaitlistError, waitlist_error_handler
from waitlist_service.core.options import WaitlistOptions
from waitlist_service.db.session import engine
from waitlist_service.schemas.waitlist import build_join_model, build_search_model

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    options: WaitlistOptions = app.state.waitlist_options
    logger.info(
        "Waitlist enabled=%s cap=%s domains=%s fields=%s",
        options.enabled,
        options.maximum_participants,
        options.allowed_domains,
        [f.name for f in options.additional_fields],
    )
    yield
    await engine.dispose()


def create_app(options: Optional[WaitlistOptions] = None) -> FastAPI:
    options = options or WaitlistOptions.from_settings(settings)
    # Build the generated request models up front so a bad field
    # declaration fails at startup, not on the first request.
    build_join_model(options.additional_fields)
    build_search_model(options.additional_fields, options.max_page_size)

    app = FastAPI(
        title="Waitlist API",
        version="0.1.0",
        description="Waitlist admission and management.",
        lifespan=lifespan,
    )
    app.state.waitlist_options = options
    app.add_exception_handler(WaitlistError, waitlist_error_handler)

    app.include_router(waitlist_router, prefix="/api/v1")
    app.include_router(auth_router,     prefix="/api/v1")
    app.include_router(admin_router,    prefix="/api/v1")

    @app.get("/health", tags=["meta"])
    async def health_check():
        return {"status": "ok", "version": app.version, "waitlist_enabled": options.enabled}

    return app


app = create_app()
