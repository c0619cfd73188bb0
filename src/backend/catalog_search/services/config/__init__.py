"""
Configuration Services
Provides centralized configuration and settings lookup for catalog search
"""

from .configuration_service import (
    ConfigurationService,
    get_config_service,
    init_config_service,
    USE_INDEXED_SEARCH_SETTING,
)
from .settings_manager import ConfigSettingsManager, setting_env_var

__all__ = [
    "ConfigurationService",
    "get_config_service",
    "init_config_service",
    "USE_INDEXED_SEARCH_SETTING",
    "ConfigSettingsManager",
    "setting_env_var",
]
