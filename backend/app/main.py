from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.session import init_db
from app.routers import health, pricing, historical, competitors

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    logger.info("Starting Hotel Pricing API...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Version: {settings.app_version}")

    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down Hotel Pricing API...")


app = FastAPI(
    title="Hotel Pricing API",
    description="Hotel revenue management backend - dynamic pricing recommendations",
    version=settings.app_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router)
app.include_router(pricing.router)
app.include_router(historical.router)
app.include_router(competitors.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": "Hotel Pricing API",
        "version": settings.app_version,
        "description": "Dynamic pricing recommendations for hotels",
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "pricing_recommend": "GET /pricing/recommend",
            "pricing_predictions": "GET /pricing/predictions/{hotel_id}",
            "historical_entries": "POST /historical/entries",
            "historical_upload": "POST /historical/upload",
            "historical_list": "GET /historical/{hotel_id}",
            "competitor_prices": "POST /competitors/prices",
            "competitor_alerts": "GET /competitors/alerts",
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
