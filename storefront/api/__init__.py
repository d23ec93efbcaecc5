"""
HTTP surface — FastAPI application factory.

    app = create_app()                          # SQLAlchemy, settings from env
    app = create_app(container=build_memory())  # tests

    uvicorn --factory storefront.api:create_app
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from kungfu import Error

from storefront import __version__
from storefront.config import Settings, load_settings, configure_logging
from storefront.db import create_database
from storefront.errors import StorefrontError
from storefront.catalog import seed_catalog
from storefront.wiring import Storefront, build_sqlalchemy
from storefront.api._errors import storefront_error_handler
from storefront.api._routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    container: Storefront | None = None,
) -> FastAPI:
    settings = settings or (container.settings if container else load_settings())
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if container is not None:
            app.state.storefront = container
            yield
            await container.dispatcher.drain()
            return

        session_factory, engine = await create_database(settings.database_url)
        storefront = build_sqlalchemy(session_factory, settings)
        if settings.seed_catalog:
            result = await seed_catalog(storefront.catalog)
            if isinstance(result, Error):
                logger.error("Catalog seeding failed: %s", result.error.message)

        app.state.storefront = storefront
        try:
            yield
        finally:
            await storefront.dispatcher.drain()
            await engine.dispose()

    app = FastAPI(title="storefront", version=__version__, lifespan=lifespan)
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.include_router(router)
    return app


__all__ = ("create_app",)
