"""
FastAPI application entry-point.

Run:  uvicorn src.api.main:app --port 3000
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routers import auth, catalog, data, query
from src.core.config import get_settings
from src.core.errors import register_exception_handlers
from src.core.logging import get_logger
from src.core.utils import utc_timestamp
from src.sheets.cache import DatasetCache, get_dataset_cache

logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Analytics API starting | source=%s | sheet=%s | env=%s",
                settings.data_source, settings.sheet_id, settings.environment)
    yield


app = FastAPI(
    title="Sheet Metrics Dashboard API",
    version="0.2.0",
    description="Answers free-text questions about daily business metrics kept in a spreadsheet",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.allowed_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(query.router, prefix="/api", tags=["Insights"])
app.include_router(data.router, prefix="/api", tags=["Data"])
app.include_router(catalog.router, prefix="/api", tags=["Catalog"])


@app.get("/api/health")
def health(cache: DatasetCache = Depends(get_dataset_cache)):
    return {"status": "ok", "timestamp": utc_timestamp(), "cacheState": cache.state()}
