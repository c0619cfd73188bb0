"""Middleware package for request logging context injection."""

from .logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
