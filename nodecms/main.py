"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nodecms.core.config import Settings, settings as default_settings
from nodecms.core.exceptions import NodeCMSError, http_status_for
from nodecms.db.session import build_store
from nodecms.db.store import DocumentStore
from nodecms.services.container import bootstrap, build_services

from nodecms.api.nodes import router as nodes_router
from nodecms.api.roles import router as roles_router
from nodecms.api.users import router as users_router

logger = logging.getLogger("nodecms")


def configure_logging(settings: Settings = default_settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(settings: Settings = default_settings, store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the API app. ``store`` overrides the configured document store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"Starting {settings.APP_NAME} API")
        doc_store = store or await build_store(settings)
        services = build_services(doc_store, settings)
        await bootstrap(services, settings)
        app.state.services = services

        yield

        logger.info(f"Shutting down {settings.APP_NAME} API")
        await doc_store.close()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Typed, permissioned content nodes",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NodeCMSError)
    async def nodecms_exception_handler(request: Request, exc: NodeCMSError):
        return JSONResponse(
            status_code=http_status_for(exc),
            content=exc.status.model_dump(exclude_none=True),
        )

    app.include_router(nodes_router, prefix="/api")
    app.include_router(roles_router, prefix="/api")
    app.include_router(users_router, prefix="/api")

    @app.get("/api/health")
    async def health():
        """Quick health check endpoint."""
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()
