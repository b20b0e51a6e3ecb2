"""Plugin catalog - in-memory lookup of plugin manifests by name."""

import logging
from typing import Dict, Iterable, List, Optional, Set

from scaforge.plugins.manifest import PluginCategory, PluginManifest

logger = logging.getLogger(__name__)


class PluginCatalog:
    """Central catalog of available plugins.

    Instances are created explicitly and passed to the resolver and engines;
    there is no process-wide catalog in library code.
    """

    def __init__(self, manifests: Optional[Iterable[PluginManifest]] = None):
        self._plugins: Dict[str, PluginManifest] = {}
        if manifests:
            self.register_all(manifests)

    def register(self, manifest: PluginManifest) -> None:
        """Register a plugin manifest (last write wins)."""
        if manifest.name in self._plugins:
            logger.warning(f"Plugin '{manifest.name}' already registered, overwriting")
        self._plugins[manifest.name] = manifest
        logger.debug(f"Registered plugin: {manifest.name} ({manifest.category.value})")

    def register_all(self, manifests: Iterable[PluginManifest]) -> None:
        for manifest in manifests:
            self.register(manifest)

    def unregister(self, name: str) -> bool:
        """Remove a plugin from the catalog.

        Returns:
            True if the plugin was present
        """
        return self._plugins.pop(name, None) is not None

    def get(self, name: str) -> Optional[PluginManifest]:
        """Get a plugin by name."""
        return self._plugins.get(name)

    def has(self, name: str) -> bool:
        """Check if a plugin is registered."""
        return name in self._plugins

    def get_all(self) -> List[PluginManifest]:
        """Get all registered plugins."""
        return list(self._plugins.values())

    def get_by_category(self, category: PluginCategory) -> List[PluginManifest]:
        """Get all plugins of a specific category."""
        return [p for p in self._plugins.values() if p.category == category]

    def categories(self) -> Set[PluginCategory]:
        """Get the categories that currently have at least one plugin."""
        return {p.category for p in self._plugins.values()}

    def count(self) -> int:
        """Get total number of registered plugins."""
        return len(self._plugins)

    def clear(self) -> None:
        self._plugins.clear()

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return self.count()
