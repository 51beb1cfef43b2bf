import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from form_journal.config import Settings, settings
from form_journal.exceptions import StorageUnavailable
from form_journal.routers import analyses, statistics
from form_journal.services.store import AnalysisStore

logger = logging.getLogger(__name__)


def create_app(config: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: open the store; it lives as long as the app
        store = AnalysisStore(config.database_url, echo=config.debug)
        await store.open()
        app.state.store = store
        yield
        # Shutdown: release connections
        await store.close()

    app = FastAPI(
        title=config.app_name,
        description="Journal of exercise-form analyses with progress statistics",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = config

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageUnavailable)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
        logger.error(f"Storage unavailable: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    # Include routers
    app.include_router(analyses.router, prefix="/api/analyses", tags=["Analyses"])
    app.include_router(statistics.router, prefix="/api/statistics", tags=["Statistics"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": config.app_name}

    return app


app = create_app()
