"""Pinpoint: FastAPI backend for turning shared posts into saved locations."""
import logging
import os
import subprocess
import sys

from fastapi import FastAPI

# Fallback routing and storage failures are logged at WARNING / ERROR; INFO shows each share.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("location_core").setLevel(logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)
from fastapi.middleware.cors import CORSMiddleware

from api.locations import router as locations_router
from api.posts import router as posts_router
from api.recommendations import router as recommendations_router
from api.routes import router
from api.saved import router as saved_router
from schemas.health import HealthResponse
from utils.config import CORS_ORIGINS, PORT

LOG = logging.getLogger(__name__)

app = FastAPI(
    title="Pinpoint API",
    description="Resolve shared TikTok, Instagram and web posts to places, and serve saved locations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes under /api
app.include_router(router, prefix="/api")
app.include_router(posts_router, prefix="/api")
app.include_router(saved_router, prefix="/api")
app.include_router(locations_router, prefix="/api")
app.include_router(recommendations_router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
def api_health() -> HealthResponse:
    """Explicit health route so /api/health is always available."""
    return HealthResponse()


@app.on_event("startup")
def startup() -> None:
    """Run DB migrations. Tests create their schema from the models instead."""
    if os.environ.get("TESTING") == "true":
        return
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    result = subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        cwd=backend_dir,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(f"Alembic upgrade failed: {result.stderr or result.stdout}")
    LOG.info("Database migrations applied")


@app.get("/")
def root() -> dict:
    """Root redirect/info."""
    return {"service": "pinpoint-api", "docs": "/docs", "health": "/api/health"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
