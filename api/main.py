"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, zones, imports, audio
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="City Guided POI Import API",
    description="Imports, enriches and narrates points of interest for city zones",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(zones.router)
app.include_router(imports.router)
app.include_router(audio.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting City Guided POI Import API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info(f"Ollama: {settings.OLLAMA_URL} ({settings.OLLAMA_MODEL})")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down City Guided POI Import API")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "City Guided POI Import API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "zones": "/admin/zones",
            "import": "/admin/import/{zone_id}",
            "import_status": "/admin/import/{zone_id}/status",
            "audio_guide": "/admin/pois/{poi_id}/audio-guide",
            "playback": "/pois/{poi_id}/audio-guide",
            "models": "/admin/llm/models"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
