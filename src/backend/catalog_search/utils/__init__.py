"""Utility functions and helpers for logging context and performance tracking."""

from .logging_context import (
    bind_search_context,
    unbind_context,
    log_context,
    log_performance,
)

__all__ = [
    "bind_search_context",
    "unbind_context",
    "log_context",
    "log_performance",
]
