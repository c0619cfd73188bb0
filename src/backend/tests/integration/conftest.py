"""
Integration test fixtures

Fixtures wiring the real catalog search service over in-memory collaborators
and an HTTP client against the FastAPI application.
"""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep application log files out of the source tree
os.environ.setdefault("LOG_FILE_PATH", os.path.join(tempfile.gettempdir(), "catalog-search-tests.log"))


@pytest.fixture
def catalog_search_service(config_service, sample_catalog):
    """Catalog search service built the way main.py builds it"""
    from catalog_search.main import build_catalog_search_service

    return build_catalog_search_service(config_service, sample_catalog)


@pytest_asyncio.fixture
async def api_client(catalog_search_service):
    """
    HTTP client for API integration testing

    Usage:
        async def test_health_endpoint(api_client):
            response = await api_client.get("/health")
            assert response.status_code == 200
    """
    from catalog_search.main import app
    from catalog_search.api.v1.catalog import get_catalog_search_service_dep

    previous = app.dependency_overrides.get(get_catalog_search_service_dep)
    app.dependency_overrides[get_catalog_search_service_dep] = lambda: catalog_search_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides[get_catalog_search_service_dep] = previous
