"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from wph.categories.router import router as categories_router
from wph.config import get_settings
from wph.dashboard.router import router as dashboard_router
from wph.database import close_db, init_db
from wph.health.router import router as health_router
from wph.home.router import router as home_router
from wph.middleware import setup_middleware
from wph.projects.router import router as projects_router
from wph.redis_client import close_redis, init_redis
from wph.sitemap.router import router as sitemap_router
from wph.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database engine and Redis pool; close them on shutdown."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Web3 Project Hunt API",
        description="Directory of Web3 projects: catalog, submissions, project pages and dashboards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(categories_router)
    app.include_router(projects_router)
    app.include_router(dashboard_router)
    app.include_router(home_router)
    app.include_router(sitemap_router)

    return app


app = create_app()
