"""FastAPI application for the Load Consolidation Service.

This API provides endpoints for:
- Grouping pending orders into loads by geographic area
- Adding and removing orders on existing loads
- Checking order compatibility and auditing delivery conflicts
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import traceback

from load_service.api.schemas import ErrorResponse, HealthResponse
from load_service.api.routes import loads
from load_service.core.consolidation import (
    GroupingOptions,
    LoadConsolidationEngine,
    LoadFinalizationError,
)
from load_service.db import database
from load_service.db.database import init_database, close_database, check_database_health
from load_service.db.repositories import SQLAlchemyLoadRepository, SQLAlchemyOrderRepository
from load_service.utils.config import get_default_grouping_options

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class AppState:
    """Centralized application state."""

    def __init__(self):
        self.default_options: Optional[GroupingOptions] = None
        self.engine: Optional[LoadConsolidationEngine] = None

    def initialize(self):
        """Resolve configuration and build the engine; requires an initialized database."""
        self.default_options = get_default_grouping_options()
        logger.info(f"Consolidation defaults: {self.default_options.to_dict()}")

        session_factory = database.get_session_factory()
        self.engine = LoadConsolidationEngine(
            SQLAlchemyOrderRepository(session_factory),
            SQLAlchemyLoadRepository(session_factory),
            default_options=self.default_options,
        )

    def get_engine(self) -> LoadConsolidationEngine:
        if self.engine is None:
            raise RuntimeError("Consolidation engine not initialized")
        return self.engine

    def shutdown(self):
        self.engine = None
        logger.info("Load consolidation service shut down")


# Create global app state
app_state = AppState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("Starting Load Consolidation Service API")

    try:
        await init_database()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    app_state.initialize()

    yield

    app_state.shutdown()
    await close_database()


# Create FastAPI app
app = FastAPI(
    title="Load Consolidation Service API",
    description="Groups pending delivery orders into vehicle loads",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoadFinalizationError)
async def load_finalization_exception_handler(request: Request, exc: LoadFinalizationError):
    """Grouping failed part-way; earlier loads stay committed."""
    logger.error(
        f"Load finalization failed after {len(exc.committed_loads)} committed load(s); "
        f"orders possibly in mixed state: {exc.pending_order_ids}"
    )

    committed = ", ".join(load.load_id for load in exc.committed_loads) or "none"
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Load consolidation failed",
            detail=f"{exc} (committed loads: {committed})",
        ).model_dump(mode="json"),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    logger.error(traceback.format_exc())

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail=str(exc),
        ).model_dump(mode="json"),
    )


# Health check endpoint
@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """Root endpoint - health check."""
    return HealthResponse(
        status="healthy",
        components={
            "configuration": "initialized" if app_state.default_options else "not_initialized",
        },
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Detailed health check."""
    try:
        db_health = await check_database_health()
        components_status = {
            "configuration": "healthy" if app_state.default_options else "unhealthy",
            "database": db_health["status"],
        }

        overall_status = "healthy" if all(
            s == "healthy" for s in components_status.values()
        ) else "degraded"

        return HealthResponse(
            status=overall_status,
            components=components_status,
        )

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")


# Include routers
app.include_router(loads.router, prefix="/api/v1", tags=["Loads"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "load_service.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
