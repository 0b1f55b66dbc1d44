"""
Collab Engine - FastAPI Application

Main entry point for the Collab Engine backend.

Architecture:
- Brand-Fit survey + lifestyle surveys → CampaignMatchingEngine → scored catalog
- Brand / creator / platform rows → intelligence aggregators → admin console
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import CORS_ALLOW_ORIGINS
from .database import init_db
from .routers import admin_router, brand_fit_router, matching_router
from .routers.brand_fit import close_brand_fit_forms

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup, flush pending Brand-Fit edits on shutdown."""
    init_db()
    yield
    close_brand_fit_forms()
    logger.info("Flushed pending Brand-Fit edits")

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Collab Engine",
    description="""
    Collab Engine - Creator / Brand Collaboration Backend

    Matches creators to brand campaigns from their declared Brand-Fit
    preferences and gives admins a read-only view of brand health,
    creator quality and platform integrity.

    ## Surfaces
    1. **Campaign matching**: Brand-Fit + surveys → scored, filtered catalog
    2. **Brand-Fit**: debounced, whole-record saves of the preference survey
    3. **Admin intelligence**: brand risk, creator tiers, data freshness

    ## Key Principles
    - Matching is deterministic and recomputed on every request
    - Policy filters (regulated brands, driving) are never overridden by score
    - Admin views are derived, never persisted
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(matching_router)
app.include_router(brand_fit_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Collab Engine",
        "version": __version__,
        "description": "Creator / Brand Collaboration Backend",
        "docs": "/docs",
        "surfaces": {
            "matching": "/campaigns/matches",
            "brand_fit": "/brand-fit",
            "admin": "/admin",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# For running with: python -m collab_engine.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
