"""Dependency injection container for the API and CLI entry points."""

import logging
import threading
from pathlib import Path
from typing import Optional

from scaforge.config.loader import ConfigStore, get_codec
from scaforge.config.types import ProjectConfig
from scaforge.constants import (
    BUNDLED_PLUGINS_DIR,
    CONFIG_FORMAT,
    INSTALLED_PLUGINS_DIR,
    PLUGIN_PATHS,
    PROJECT_ROOT,
    STRICT_DEPENDENCIES,
    SYMMETRIC_CONFLICTS,
)
from scaforge.integrations.rules import RuleEngine
from scaforge.plugins.discovery import PluginDiscovery
from scaforge.plugins.manager import PluginManager
from scaforge.plugins.registry import PluginCatalog
from scaforge.plugins.sample_plugins import sample_plugins

logger = logging.getLogger(__name__)

# ============================================================================
# Global service instances (Singleton pattern, but exposed via functions for easier testing/mocking)
# ============================================================================

_catalog_instance = None
_rule_engine_instance = None
_config_store_instance = None

# Serialises load -> mutate -> save of the project config
project_lock = threading.Lock()


def build_catalog(extra_paths: Optional[list] = None) -> PluginCatalog:
    """Create a catalog seeded with sample plugins and discovered manifests.

    Discovered manifests override sample plugins of the same name.
    """
    catalog = PluginCatalog(sample_plugins)

    search_paths = [
        (BUNDLED_PLUGINS_DIR, "bundled"),
        (INSTALLED_PLUGINS_DIR, "installed"),
    ]
    for p in extra_paths if extra_paths is not None else PLUGIN_PATHS:
        search_paths.append((Path(p), "external"))

    catalog.register_all(PluginDiscovery(search_paths).discover_all())
    return catalog


def get_catalog() -> PluginCatalog:
    """Get plugin catalog (singleton)."""
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = build_catalog()
        logger.info(f"Created PluginCatalog instance with {_catalog_instance.count()} plugins")
    return _catalog_instance


def get_rule_engine() -> RuleEngine:
    """Get auto-integration rule engine (singleton)."""
    global _rule_engine_instance
    if _rule_engine_instance is None:
        _rule_engine_instance = RuleEngine()
        errors = _rule_engine_instance.validate_rules()
        if errors:
            logger.error(f"Auto-integration rules have {len(errors)} error(s)")
        logger.info(f"Created RuleEngine instance with {len(_rule_engine_instance.rules)} rules")
    return _rule_engine_instance


def get_config_store() -> ConfigStore:
    """Get the project config store (singleton)."""
    global _config_store_instance
    if _config_store_instance is None:
        store = ConfigStore(PROJECT_ROOT)
        if not store.exists():
            store = ConfigStore(PROJECT_ROOT, get_codec(CONFIG_FORMAT))
        _config_store_instance = store
        logger.info(f"Created ConfigStore instance for {store.path}")
    return _config_store_instance


def create_manager(config: ProjectConfig, catalog: Optional[PluginCatalog] = None) -> PluginManager:
    """Create a PluginManager with the policies from the environment."""
    return PluginManager(
        config,
        catalog if catalog is not None else get_catalog(),
        auto_install_dependencies=not STRICT_DEPENDENCIES,
        symmetric_conflicts=SYMMETRIC_CONFLICTS,
    )


# Test utility function (for unit testing - resets all singletons)
def reset_services():
    """Reset all service instances (only for testing)."""
    global _catalog_instance, _rule_engine_instance, _config_store_instance

    _catalog_instance = None
    _rule_engine_instance = None
    _config_store_instance = None
    logger.info("Reset all service instances")
