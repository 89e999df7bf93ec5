"""FastAPI main application."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List, Optional
import logging
import structlog

from ..config import settings
from ..core.aggregator import RegionStatsAggregator
from ..core.category_mapper import CultureLanguageIndex
from ..core.entities import DerivedStatistics, Entity
from ..core.errors import RegionNotFoundError
from ..store.json_store import JsonWorldStore

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Realm Statistics API",
    description="Region derived-statistics recompute service for world-data authoring tools",
    version="0.1.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class WorldData:
    """World-data manager holding the store and culture language index."""

    def __init__(self):
        self.store: Optional[JsonWorldStore] = None
        self.language_index: Optional[CultureLanguageIndex] = None

    def initialize(self):
        """Open the world-data store and load the culture catalog."""
        logger.info("Initializing world data", roots=settings.search_roots)
        self.store = JsonWorldStore.from_settings(settings)
        self.language_index = CultureLanguageIndex.from_catalog_dirs(settings.culture_catalog_dirs)
        logger.info("World data initialized", available=self.store.available)

    def aggregator(self) -> RegionStatsAggregator:
        """Aggregator over the current store, with a fresh record cache."""
        if self.store is None:
            raise RuntimeError("World data not initialized. Call initialize() first.")
        self.store.clear_cache()
        return RegionStatsAggregator(self.store, self.language_index)


# Global world-data instance
world = WorldData()


# Request/Response models
class CoverageSummary(BaseModel):
    """Which leaves a recompute reached."""

    settlements: int = Field(description="Settlements and points of interest counted")
    unpopulated_areas: int = Field(description="Unpopulated areas counted")
    missing_ids: List[str] = Field(default_factory=list, description="Referenced ids with no record")


class RecomputeResponse(BaseModel):
    """Result of recomputing a region."""

    region_id: str
    derived: DerivedStatistics
    coverage: CoverageSummary


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Load world data on startup."""
    logger.info("Starting Realm Statistics API")
    world.initialize()
    logger.info("API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Realm Statistics API")


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Realm Statistics API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    if world.store is None or not world.store.available:
        logger.error("Health check failed", roots=settings.search_roots)
        raise HTTPException(status_code=503, detail="World data unavailable")

    return {
        "status": "healthy",
        "world_data": "available",
        "cultures_indexed": len(world.language_index) if world.language_index is not None else 0,
    }


@app.get("/entities/{entity_id}", response_model=Entity)
async def get_entity(entity_id: str):
    """Get a world-data entity record."""
    if world.store is None:
        raise HTTPException(status_code=503, detail="World data not initialized")

    entity = world.store.lookup(entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return entity


@app.post("/regions/{region_id}/recompute", response_model=RecomputeResponse)
async def recompute_region(region_id: str):
    """
    Recompute a region's derived statistics.

    The result is returned to the caller; saving it is left to the editor.
    """
    logger.info("Region recompute requested", region_id=region_id)

    try:
        aggregator = world.aggregator()
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))

    try:
        region = aggregator.find_region(region_id)
    except RegionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    derived, leaves = aggregator.compute_with_coverage(region)

    return RecomputeResponse(
        region_id=region.id,
        derived=derived,
        coverage=CoverageSummary(
            settlements=len(leaves.settlements),
            unpopulated_areas=len(leaves.unpopulated_areas),
            missing_ids=leaves.missing_ids,
        ),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
