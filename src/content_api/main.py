from contextlib import asynccontextmanager
from textwrap import dedent
import logging
import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from content_api.auth import AuthService
from content_api.errors import (
    ContentAPIError,
    handle_broad_exceptions,
    handle_content_api_errors,
    handle_http_exceptions,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
)
from content_api.dependencies import Stores, build_stores
from content_api.rate_limit import FixedWindowRateLimiter, rate_limit_middleware
from content_api.routers.auth import router as auth_router
from content_api.routers.careers import router as careers_router
from content_api.routers.gallery import router as gallery_router
from content_api.routers.health import router as health_router
from content_api.routers.news import router as news_router
from content_api.config.settings import Settings, get_settings

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, stores: Stores | None = None) -> FastAPI:
    """
    Create a FastAPI application.

    Stores passed in are used as-is and left open on shutdown; otherwise the
    lifespan connects the configured backends and closes them again.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = stores is None
        app.state.stores = stores or build_stores(settings)
        app.state.stores.records.init_collections()
        logger.info(f"{settings.app_name} started ({settings.environment}, storage={settings.storage_mode})")
        try:
            yield
        finally:
            if owned:
                app.state.stores.close()
            logger.info("Store connections closed")

    app = FastAPI(
        title=settings.app_name,
        summary="Gallery, news and careers content",
        version=settings.api_version,
        description=dedent(
            """\
        Public reads for gallery, news and career content; writes need an admin
        bearer token from `POST /api/auth/login`.
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.auth_service = AuthService(settings)

    app.include_router(auth_router, prefix=settings.api_prefix, tags=["auth"])
    app.include_router(gallery_router, prefix=settings.api_prefix, tags=["gallery"])
    app.include_router(news_router, prefix=settings.api_prefix, tags=["news"])
    app.include_router(careers_router, prefix=settings.api_prefix, tags=["careers"])
    app.include_router(health_router, prefix=settings.api_prefix, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=ContentAPIError,
        handler=handle_content_api_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=StarletteHTTPException,
        handler=handle_http_exceptions,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    if settings.rate_limit_enabled:
        limiter = FixedWindowRateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)
        app.middleware("http")(rate_limit_middleware(limiter))
    app.middleware("http")(handle_broad_exceptions)
    # Outermost, so 429 and 500 answers carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"
