"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import SearchAPIError, router, search_api_error_handler
from .config import settings
from .sites import get_site_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("vodsearch starting on %s:%s", settings.host, settings.port)
    logger.info("Sources: %s", ", ".join(s.key for s in get_site_config().sources()) or "none")

    yield

    logger.info("vodsearch shutting down")


app = FastAPI(
    title="vodsearch",
    description="Aggregated video search across many upstream sites",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(SearchAPIError, search_api_error_handler)

app.include_router(router, prefix="/api", tags=["search"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "vodsearch",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "health": "/api/health",
            "search": "/api/search",
            "search_stream": "/api/search/stream",
        },
    }


def run():
    """Run the application with uvicorn."""
    import uvicorn
    uvicorn.run(
        "vodsearch.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
