"""
FastAPI application entry point for the migration workbench.

To run locally:
    uvicorn migrator.main:app --reload --app-dir backend
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import datasets, profiling
from .core.config import settings
from .middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("migrator")

app = FastAPI(
    title=settings.APP_NAME,
    description="Profile legacy datasets: type inference, key candidates and geo detection",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
)

# Last added runs first: requests are logged, then errors mapped.
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(datasets.router, prefix=settings.API_PREFIX)
app.include_router(profiling.router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "app": settings.APP_NAME,
    }


logger.info("%s %s ready (prefix %s)", settings.APP_NAME, settings.APP_VERSION, settings.API_PREFIX)
