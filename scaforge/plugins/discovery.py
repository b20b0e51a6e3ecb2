"""Plugin discovery - builds manifests from plugin.json files on disk."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from scaforge.plugins.manifest import PluginManifest, schema_from_json

logger = logging.getLogger(__name__)


class PluginDiscovery:
    """Finds plugin manifests in a list of search paths.

    Each search path holds one directory per plugin, with a plugin.json
    inside. Paths are searched in order and the first manifest found for a
    name is kept.
    """

    MANIFEST_FILE = "plugin.json"

    def __init__(self, search_paths: List[Tuple[Path, str]]):
        """
        Args:
            search_paths: (directory, source label) pairs, e.g. (BUNDLED_PLUGINS_DIR, "bundled")
        """
        self.search_paths = search_paths

    def discover_all(self) -> List[PluginManifest]:
        """Load every valid manifest under the search paths."""
        found: Dict[str, PluginManifest] = {}

        for manifest_file, source in self._manifest_files():
            manifest = self._load_manifest(manifest_file, source)
            if manifest is None:
                continue
            if manifest.name in found:
                logger.warning(f"Ignoring {manifest_file}: plugin '{manifest.name}' was already discovered")
                continue
            found[manifest.name] = manifest

        logger.info(f"Discovered {len(found)} plugin manifest(s)")
        return list(found.values())

    def discover_single(self, plugin_path: Path, source: str = "external") -> Optional[PluginManifest]:
        """Load the manifest in one plugin directory, or None if it is missing or invalid."""
        manifest_file = Path(plugin_path) / self.MANIFEST_FILE
        if not manifest_file.is_file():
            logger.error(f"{plugin_path} has no {self.MANIFEST_FILE}")
            return None
        return self._load_manifest(manifest_file, source)

    def _manifest_files(self) -> Iterator[Tuple[Path, str]]:
        for search_path, source in self.search_paths:
            if not search_path.is_dir():
                logger.debug(f"Skipping missing plugin directory {search_path}")
                continue
            for plugin_dir in sorted(p for p in search_path.iterdir() if p.is_dir()):
                manifest_file = plugin_dir / self.MANIFEST_FILE
                if manifest_file.is_file():
                    yield manifest_file, source

    @staticmethod
    def _parse(data: Dict[str, Any]) -> PluginManifest:
        if isinstance(data.get("config_schema"), dict):
            data = {**data, "config_schema": schema_from_json(data["config_schema"])}
        return PluginManifest(**data)

    def _load_manifest(self, manifest_file: Path, source: str) -> Optional[PluginManifest]:
        """Read one plugin.json. Broken files are logged and yield None."""
        try:
            data = json.loads(manifest_file.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                logger.error(f"{manifest_file}: manifest must be a JSON object")
                return None
            manifest = self._parse(data)
        except json.JSONDecodeError as e:
            logger.error(f"{manifest_file} is not valid JSON: {e}")
            return None
        except ValidationError as e:
            logger.error(f"{manifest_file} is not a valid manifest: {e}")
            return None
        except (OSError, TypeError) as e:
            logger.error(f"Cannot load {manifest_file}: {e}")
            return None

        logger.debug(f"Loaded plugin '{manifest.name}' from {manifest_file.parent} ({source})")
        return manifest
