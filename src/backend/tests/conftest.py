"""
Pytest configuration and shared fixtures
Provides catalog data and configuration fixtures for all test modules
"""

import json
import sys
import tempfile
from pathlib import Path

import pytest

# Add backend directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog_search.models.catalog_search import CatalogProduct, Category
from catalog_search.services.catalog.in_memory import InMemoryCatalog
from catalog_search.services.config.configuration_service import ConfigurationService


@pytest.fixture
def test_config_dir():
    """Temporary config directory with search_config.json and settings.json"""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_dir = Path(tmpdir)

        configs = {
            "search_config.json": {
                "version": "1.0",
                "reconciliation": {
                    "max_retries": 3,
                    "deadline_seconds": None
                },
                "feature_flags": {
                    "use_indexed_search": {
                        "setting_name": "Catalog.Search.UseCatalogIndexedSearchInManager",
                        "default": True
                    }
                }
            },
            "settings.json": {
                "version": "1.0",
                "settings": {
                    "Catalog.Search.UseCatalogIndexedSearchInManager": True
                }
            }
        }

        for filename, content in configs.items():
            (config_dir / filename).write_text(json.dumps(content))

        yield config_dir


@pytest.fixture
def config_service(test_config_dir):
    """ConfigurationService reading the temporary config directory"""
    return ConfigurationService(config_dir=str(test_config_dir))


@pytest.fixture
def sample_categories():
    return [
        Category(id="tools", name="Tools", catalog_id="hardware"),
        Category(id="drills", name="Drills", catalog_id="hardware", parent_id="tools"),
        Category(id="saws", name="Saws", catalog_id="hardware", parent_id="tools"),
        Category(id="audio", name="Audio", catalog_id="electronics"),
    ]


@pytest.fixture
def sample_products():
    return [
        CatalogProduct(
            id="p-1", code="DRL-18V", name="Cordless Drill 18V",
            catalog_id="hardware", category_id="drills", outlines=["tools", "drills"],
            properties={"voltage": "18V"}
        ),
        CatalogProduct(
            id="p-2", code="DRL-12V", name="Compact Drill 12V",
            catalog_id="hardware", category_id="drills", outlines=["tools", "drills"]
        ),
        CatalogProduct(
            id="p-3", code="HMR-DRL", name="Hammer Drill Cordless",
            catalog_id="hardware", category_id="drills", outlines=["tools", "drills"]
        ),
        CatalogProduct(
            id="p-4", code="SAW-CIRC", name="Circular Saw",
            catalog_id="hardware", category_id="saws", outlines=["tools", "saws"]
        ),
        CatalogProduct(
            id="p-5", code="DRL-BITS", name="Drill Bit Set",
            catalog_id="hardware", category_id="drills", outlines=["tools", "drills"],
            is_active=False
        ),
        CatalogProduct(
            id="p-6", code="SPK-BT", name="Bluetooth Speaker",
            catalog_id="electronics", category_id="audio", outlines=["audio"]
        ),
    ]


@pytest.fixture
def sample_catalog(sample_products, sample_categories):
    """In-memory catalog holding every sample product and category"""
    return InMemoryCatalog(products=sample_products, categories=sample_categories)
