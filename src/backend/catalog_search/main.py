"""
Catalog Search Service
FastAPI Application Entry Point
"""

import logging
import logging.handlers
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import structlog
from fastapi import FastAPI
from dotenv import load_dotenv

from .api.v1.catalog import router as catalog_router, get_catalog_search_service_dep
from .api.v1.health import router as health_router
from .middleware import LoggingMiddleware
from .services.catalog.in_memory import (
    InMemoryCatalog,
    InMemoryItemService,
    InMemoryLegacyCatalogSearchService,
    InMemoryProductSearchService,
)
from .services.config.configuration_service import ConfigurationService, get_config_service
from .services.config.settings_manager import ConfigSettingsManager
from .services.search.catalog_search_service import CatalogSearchService
from .services.search.reconciliation import ReconciliationEngine

# Load environment variables
load_dotenv()

SERVICE_NAME = "catalog-search"
SERVICE_VERSION = "1.0.0"


def configure_logging():
    """
    Configure structured logging using structlog.

    - Production (ENV=production): JSON output for log aggregation
    - Development: human-readable console output
    - Context (correlation_id, route, search_phrase) merged from contextvars
    """
    env = os.getenv("ENV", "development").lower()
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback
        )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # Project root is three levels up from src/backend/catalog_search/
    project_root = Path(__file__).resolve().parents[3]
    default_log_path = project_root / "logs" / "catalog-search.log"
    log_file_path = Path(os.getenv("LOG_FILE_PATH", str(default_log_path))).resolve()
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file_path),
        maxBytes=10 * 1024 * 1024,  # 10MB per file
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(log_level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return structlog.get_logger(__name__)


logger = configure_logging()

# Global instances
catalog_search_service: Optional[CatalogSearchService] = None


def build_catalog_search_service(
    config_service: ConfigurationService,
    catalog: InMemoryCatalog
) -> CatalogSearchService:
    """
    Wire the catalog search service from configuration.

    Args:
        config_service: Source of reconciliation and feature toggle settings
        catalog: Catalog backing the record store, index and legacy search
    """
    reconciliation_config = config_service.get_reconciliation_config()
    flag = config_service.get_indexed_search_flag()

    engine = ReconciliationEngine(
        product_search_service=InMemoryProductSearchService(catalog),
        item_service=InMemoryItemService(catalog),
        max_retries=reconciliation_config["max_retries"],
        deadline_seconds=reconciliation_config["deadline_seconds"],
    )

    return CatalogSearchService(
        legacy_search_service=InMemoryLegacyCatalogSearchService(catalog),
        reconciliation_engine=engine,
        settings_manager=ConfigSettingsManager(config_service),
        indexed_search_setting=flag["setting_name"],
        indexed_search_default=flag["default"],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown"""
    global catalog_search_service

    logger.info("Starting catalog search application...")

    config_service = get_config_service()
    for config_name, is_valid in config_service.validate_all().items():
        if not is_valid:
            logger.warning("config_validation_failed", config_name=config_name)

    seed_path = os.getenv("CATALOG_SEED_PATH")
    if seed_path:
        catalog = InMemoryCatalog.from_seed_file(seed_path)
    else:
        logger.warning("CATALOG_SEED_PATH not set, starting with an empty catalog")
        catalog = InMemoryCatalog()

    catalog_search_service = build_catalog_search_service(config_service, catalog)
    logger.info("✓ Catalog search service initialized")

    yield

    logger.info("Shutting down catalog search application...")
    catalog_search_service = None


app = FastAPI(
    title="Catalog Search",
    description="Hybrid catalog search reconciling a search index with the record store",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

app.add_middleware(LoggingMiddleware)


def get_catalog_search_service() -> CatalogSearchService:
    """Get catalog search service instance for dependency injection"""
    if catalog_search_service is None:
        raise RuntimeError("Catalog search service not initialized")
    return catalog_search_service


app.include_router(catalog_router)
app.include_router(health_router)

app.dependency_overrides[get_catalog_search_service_dep] = get_catalog_search_service


@app.get("/")
async def root():
    """Root endpoint - service info"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "search": "/api/v1/catalog/search",
            "config_health": "/api/v1/health/config",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health_check():
    """Liveness check"""
    return {
        "status": "healthy" if catalog_search_service is not None else "starting",
        "service": SERVICE_NAME,
    }
