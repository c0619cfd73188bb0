"""
Logging Context Management Utilities

Helpers for binding search context to structured logs. Bound values appear
in every log statement emitted within the same execution context.
"""

import time
from contextlib import contextmanager
from typing import Optional
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars


def bind_search_context(
    search_phrase: Optional[str] = None,
    catalog_id: Optional[str] = None,
    route: Optional[str] = None,
    **kwargs
):
    """
    Bind catalog search context to all logs.

    Args:
        search_phrase: Keyword sent to the search index
        catalog_id: Catalog the search is restricted to
        route: Selected search route ("hybrid" or "legacy")
        **kwargs: Additional context key-value pairs

    Example:
        ```python
        bind_search_context(search_phrase="drill", route="hybrid")
        logger.info("reconciliation_round")  # Includes search_phrase, route
        ```
    """
    context = {}

    if search_phrase:
        context["search_phrase"] = search_phrase
    if catalog_id:
        context["catalog_id"] = catalog_id
    if route:
        context["route"] = route

    context.update(kwargs)
    bind_contextvars(**context)


def unbind_context(*keys: str):
    """Remove specific keys from logging context"""
    unbind_contextvars(*keys)


@contextmanager
def log_context(**context_vars):
    """
    Context manager for temporary logging context.

    Example:
        ```python
        with log_context(route="hybrid", search_phrase="drill"):
            logger.info("searching catalog")
        # route and search_phrase removed after the block
        ```
    """
    bind_contextvars(**context_vars)
    try:
        yield
    finally:
        unbind_contextvars(*context_vars.keys())


@contextmanager
def log_performance(operation_name: str, logger=None):
    """
    Log start, completion and duration of an operation.

    Example:
        ```python
        with log_performance("catalog_search"):
            result = await service.search(criteria)
        # Logs catalog_search_started / catalog_search_completed with duration_ms
        ```
    """
    if logger is None:
        logger = structlog.get_logger()

    start_time = time.perf_counter()
    logger.info(f"{operation_name}_started", operation=operation_name)

    try:
        yield
    finally:
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"{operation_name}_completed",
            operation=operation_name,
            duration_ms=duration_ms
        )
