"""
Configuration Service
Loads and caches the catalog search JSON configuration
"""

import json
import os
from functools import lru_cache
from typing import Dict, Any, List, Optional
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

USE_INDEXED_SEARCH_SETTING = "Catalog.Search.UseCatalogIndexedSearchInManager"

# Config files every deployment must ship
REQUIRED_CONFIGS = ("search_config", "settings")

DEFAULT_RECONCILIATION = {"max_retries": 3, "deadline_seconds": None}


def reconciliation_errors(reconciliation: Dict[str, Any]) -> List[str]:
    """Describe every invalid value in a reconciliation config section"""
    errors = []

    max_retries = reconciliation.get("max_retries", DEFAULT_RECONCILIATION["max_retries"])
    if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
        errors.append(f"max_retries must be a non-negative integer, got {max_retries!r}")

    deadline = reconciliation.get("deadline_seconds")
    if deadline is not None and (
        isinstance(deadline, bool) or not isinstance(deadline, (int, float)) or deadline <= 0
    ):
        errors.append(f"deadline_seconds must be a positive number or null, got {deadline!r}")

    return errors


class ConfigurationService:
    """
    Reads search_config.json and settings.json from one config directory.

    Parsed files are cached per service instance; reload_config drops
    the cache after an on-disk edit.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Args:
            config_dir: Directory holding the JSON files. Falls back to
                CATALOG_CONFIG_DIR, then to the config directory shipped
                with the package
        """
        config_dir = config_dir or os.getenv("CATALOG_CONFIG_DIR")
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parents[2] / "config"

        logger.info(f"Catalog search config directory: {self.config_dir}")

    @lru_cache(maxsize=32)
    def load_config(self, config_name: str) -> Dict[str, Any]:
        """
        Parse <config_dir>/<config_name>.json

        Raises:
            FileNotFoundError: If the file does not exist
            json.JSONDecodeError: If the file is not valid JSON
        """
        config_path = self.config_dir / f"{config_name}.json"

        if not config_path.exists():
            logger.error(f"Missing config file {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"{config_path} is not valid JSON: {e}")
            raise

        logger.info(f"Loaded {config_name} (version {config.get('version', 'N/A')})")
        return config

    def reload_config(self, config_name: str) -> Dict[str, Any]:
        """Drop cached files and parse config_name again"""
        self.load_config.cache_clear()
        logger.info(f"Reloading {config_name} from disk")
        return self.load_config(config_name)

    def get_search_config(self) -> Dict[str, Any]:
        return self.load_config("search_config")

    def get_reconciliation_config(self) -> Dict[str, Any]:
        """
        Reconciliation loop settings

        Returns:
            Dict with max_retries (default 3) and deadline_seconds (default None)
        """
        config = dict(DEFAULT_RECONCILIATION)
        config.update(self.get_search_config().get("reconciliation", {}))
        return config

    def get_indexed_search_flag(self) -> Dict[str, Any]:
        """
        Feature toggle gating the hybrid indexed search path

        Returns:
            Dict with setting_name and default
        """
        flags = self.get_search_config().get("feature_flags", {})
        flag = {"setting_name": USE_INDEXED_SEARCH_SETTING, "default": True}
        flag.update(flags.get("use_indexed_search", {}))
        return flag

    def get_settings(self) -> Dict[str, Any]:
        """Named platform settings from settings.json"""
        return self.load_config("settings").get("settings", {})

    def validate_config(self, config_name: str) -> bool:
        """Return False when config_name is missing, unparsable or holds invalid values"""
        try:
            config = self.load_config(config_name)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"{config_name} failed to load: {e}")
            return False

        if "version" not in config:
            logger.warning(f"{config_name} has no version field")

        errors = []
        if config_name == "search_config":
            errors = reconciliation_errors(config.get("reconciliation", {}))
        elif config_name == "settings" and not isinstance(config.get("settings", {}), dict):
            errors = ["settings must be an object of name/value pairs"]

        for error in errors:
            logger.error(f"{config_name}: {error}")
        return not errors

    def validate_all(self) -> Dict[str, bool]:
        """Validate every required config file"""
        return {name: self.validate_config(name) for name in REQUIRED_CONFIGS}


_config_service: Optional[ConfigurationService] = None


def get_config_service() -> ConfigurationService:
    """Process-wide ConfigurationService, created on first use"""
    global _config_service
    if _config_service is None:
        _config_service = ConfigurationService()
    return _config_service


def init_config_service(config_dir: Optional[str] = None) -> ConfigurationService:
    """Replace the process-wide ConfigurationService"""
    global _config_service
    _config_service = ConfigurationService(config_dir)
    return _config_service
