"""FastAPI routes for aggregated search."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse

from ..search import BatchSearch, ContentPolicy, SearchAggregator, SearchStream
from ..sites import SiteConfig, get_site_config
from .auth import require_username
from .errors import SearchAPIError
from .schemas import ErrorResponse, HealthResponse, ResultSchema, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}


def cache_headers(cache_time: int) -> dict[str, str]:
    """Browser and CDN cache headers for a cacheable search response."""
    return {
        "Cache-Control": f"public, max-age={cache_time}, s-maxage={cache_time}",
        "CDN-Cache-Control": f"public, s-maxage={cache_time}",
        "Vercel-CDN-Cache-Control": f"public, s-maxage={cache_time}",
        "Netlify-Vary": "query",
    }


def get_aggregator() -> SearchAggregator:
    return SearchAggregator()


def get_content_policy() -> ContentPolicy:
    return ContentPolicy.from_settings()


@router.get("/health", response_model=HealthResponse)
async def health_check(site_config: SiteConfig = Depends(get_site_config)):
    """Check service health and list the enabled sources."""
    return HealthResponse(
        status="healthy",
        sources=[s.key for s in site_config.sources()],
    )


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def search(
    response: Response,
    q: str | None = None,
    username: str = Depends(require_username),
    site_config: SiteConfig = Depends(get_site_config),
    aggregator: SearchAggregator = Depends(get_aggregator),
    policy: ContentPolicy = Depends(get_content_policy),
):
    """
    Search every source available to the user and return one ranked list.

    A blank query short-circuits to an empty, cacheable response. Empty
    results are returned without cache headers.
    """
    cache_time = site_config.resolved_cache_time()
    query = (q or "").strip()

    if not query:
        response.headers.update(cache_headers(cache_time))
        return SearchResponse(results=[])

    sources = site_config.available_sources(username)
    try:
        batch = await BatchSearch(aggregator, policy).run(query, sources)
    except Exception as e:
        logger.exception("Search failed for %r", query)
        raise SearchAPIError(500, "search failed") from e

    if batch.cacheable:
        response.headers.update(cache_headers(cache_time))

    return SearchResponse(
        results=[ResultSchema.model_validate(r.to_dict()) for r in batch.results],
    )


@router.get(
    "/search/stream",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def search_stream(
    request: Request,
    q: str | None = None,
    username: str = Depends(require_username),
    site_config: SiteConfig = Depends(get_site_config),
    aggregator: SearchAggregator = Depends(get_aggregator),
    policy: ContentPolicy = Depends(get_content_policy),
) -> StreamingResponse:
    """Stream one event per source as each finishes."""
    query = (q or "").strip()
    if not query:
        raise SearchAPIError(400, "search query must not be empty")

    stream = SearchStream(
        aggregator,
        query,
        site_config.available_sources(username),
        policy,
        is_disconnected=request.is_disconnected,
    )

    async def event_generator():
        try:
            async for frame in stream.events():
                yield frame
        finally:
            stream.close()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
