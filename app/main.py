"""
==============================================================================
Catalog Publishing API - Application Entry Point
==============================================================================

Products are edited in the product store and copied, with computed
inventory flags, into a read-optimized catalog:

    /api/v1/products   products, variants, inventory, media
    /api/v1/catalog    publish, read and refresh catalog entries
    /api/v1/packages   registered plugin packages
    /api/v1/users      accounts and shop grants (admin)
    /api/v1/auth       JWT login

Run:
----
    uvicorn app.main:app --reload
    uvicorn app.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.db import DatabaseManager, init_db
from app.api.router import api_router
from app.plugins import get_registry


settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


class Application:
    """Builds the FastAPI app and owns its startup and shutdown."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self.app = FastAPI(
            title=settings.app_name,
            version="1.0.0",
            description="Product store and read-optimized catalog publishing",
            lifespan=self._lifespan,
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_exception_handlers(self.app)
        self.app.include_router(api_router)
        self.app.add_api_route("/", self._docs_redirect, include_in_schema=False)

    @staticmethod
    async def _docs_redirect() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        logger.info(f"🚀 Starting {self._settings.app_name} ({self._settings.app_env})")

        init_db()
        packages = get_registry().names()
        logger.info(f"📦 Packages: {', '.join(packages) or 'none'}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")

        yield

        DatabaseManager().dispose()
        logger.info("🛑 Shutdown complete")


app = Application(settings).app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
