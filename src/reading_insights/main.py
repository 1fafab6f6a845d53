import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from reading_insights.api.routes.catalog import router as catalog_router
from reading_insights.api.routes.health import router as health_router
from reading_insights.api.routes.insights import router as insights_router
from reading_insights.config import settings
from reading_insights.logging_config import configure_logging
from reading_insights.middleware import RequestContextMiddleware
from reading_insights.services.catalog_client import CatalogClient

configure_logging(
    level=settings.log_level,
    output_format=settings.log_format,
    service_name=settings.log_service_name,
)
logger = logging.getLogger(__name__)
logger.info("Application bootstrapped")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    async with httpx.AsyncClient(follow_redirects=True) as http_client:
        app.state.catalog_client = CatalogClient.from_settings(http_client, settings)
        logger.info("Catalog client ready", extra={"catalog_base_url": settings.catalog_base_url})
        yield
        app.state.catalog_client.clear_cache()


app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    lifespan=lifespan,
)
app.add_middleware(RequestContextMiddleware)
app.include_router(health_router)
app.include_router(insights_router)
app.include_router(catalog_router)
