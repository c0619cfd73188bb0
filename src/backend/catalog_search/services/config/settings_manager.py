"""
Settings Manager

Named setting lookup backed by settings.json, with environment variable
overrides. An environment variable named after the setting (upper-cased,
non-alphanumerics replaced by "_") takes precedence:

    Catalog.Search.UseCatalogIndexedSearchInManager
    -> CATALOG_SEARCH_USECATALOGINDEXEDSEARCHINMANAGER
"""

import logging
import os
import re
from typing import Any, Optional

from ..search.interfaces import SettingsManager
from .configuration_service import ConfigurationService, get_config_service

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def setting_env_var(name: str) -> str:
    return re.sub(r"[^0-9A-Za-z]+", "_", name).upper()


def _coerce(raw: str, default: Any) -> Any:
    """Parse a string setting value into the type of the default"""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        logger.warning(f"Unrecognized boolean setting value '{raw}', using default {default}")
        return default
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Unrecognized integer setting value '{raw}', using default {default}")
            return default
    return raw


class ConfigSettingsManager(SettingsManager):
    """SettingsManager reading settings.json through ConfigurationService"""

    def __init__(self, config_service: Optional[ConfigurationService] = None):
        self.config_service = config_service or get_config_service()

    def get_value(self, name: str, default: Any) -> Any:
        env_value = os.getenv(setting_env_var(name))
        if env_value is not None:
            return _coerce(env_value, default)

        try:
            settings = self.config_service.get_settings()
        except FileNotFoundError:
            logger.warning(f"settings.json not found, using default for {name}")
            return default

        value = settings.get(name)
        if value is None:
            return default
        # JSON strings such as "false" get the same parsing as environment values
        if isinstance(value, str):
            return _coerce(value, default)
        return value
