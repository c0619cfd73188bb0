"""
Catalog Search API Endpoint
FastAPI router exposing the hybrid catalog search
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ...models.catalog_search import SearchCriteria, SearchResult
from ...services.search.catalog_search_service import CatalogSearchService
from ...services.search.exceptions import InvalidCriteriaError, SearchCancelledError
from ...utils.logging_context import bind_search_context, log_performance, unbind_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/catalog", tags=["catalog"])

# Non-standard "client closed request" status
STATUS_CLIENT_CLOSED_REQUEST = 499

# How often a running search checks whether its client went away
DISCONNECT_POLL_SECONDS = 0.1


async def watch_for_disconnect(
    request: Request,
    cancel_event: asyncio.Event,
    poll_seconds: float = DISCONNECT_POLL_SECONDS
) -> None:
    """Set cancel_event once the client closes the connection"""
    while not await request.is_disconnected():
        await asyncio.sleep(poll_seconds)

    logger.info("Client disconnected, cancelling catalog search")
    cancel_event.set()


# Dependency injection placeholder (overridden in main.py)
def get_catalog_search_service_dep() -> CatalogSearchService:
    """Dependency injection placeholder for catalog search - overridden in main.py"""
    raise RuntimeError("Catalog search dependency not initialized")


@router.post("/search", response_model=SearchResult)
async def search_catalog(
    criteria: SearchCriteria,
    request: Request,
    service: CatalogSearchService = Depends(get_catalog_search_service_dep)
) -> SearchResult:
    """
    Search catalog products and categories

    A client disconnect cancels a hybrid search between reconciliation
    rounds; the request then ends with status 499.

    Example:
        POST /api/v1/catalog/search
        {
            "keyword": "cordless drill",
            "catalog_id": "electronics",
            "skip": 0,
            "take": 20,
            "response_group": ["WithProducts"]
        }
    """
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(watch_for_disconnect(request, cancel_event))

    bind_search_context(search_phrase=criteria.keyword, catalog_id=criteria.catalog_id)
    try:
        with log_performance("catalog_search"):
            return await service.search(criteria, cancel_event=cancel_event)
    except InvalidCriteriaError as e:
        logger.info(f"Rejected catalog search criteria: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except SearchCancelledError as e:
        raise HTTPException(status_code=STATUS_CLIENT_CLOSED_REQUEST, detail=str(e))
    finally:
        watcher.cancel()
        unbind_context("search_phrase", "catalog_id")
