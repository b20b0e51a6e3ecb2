"""Global constants for the Scaforge plugin service."""

import os
from pathlib import Path

# Directory paths
SCAFORGE_ROOT = Path(__file__).resolve().parent.parent  # repository root

# Project the API and CLI operate on (supports SCAFORGE_PROJECT_ROOT env var, defaults to cwd)
_project_root_env = os.getenv("SCAFORGE_PROJECT_ROOT", "")
PROJECT_ROOT = Path(_project_root_env).resolve() if _project_root_env else Path.cwd()

# Plugin manifest search paths
BUNDLED_PLUGINS_DIR = SCAFORGE_ROOT / "plugins" / "bundled"    # plugin.json manifests shipped with the repo
INSTALLED_PLUGINS_DIR = SCAFORGE_ROOT / "plugins" / "installed"  # manifests added with `manage_plugins.py install`

LOG_DIR = SCAFORGE_ROOT / "logs"

# Extra manifest directories, separated by os.pathsep
PLUGIN_PATHS = [Path(p) for p in os.getenv("PLUGIN_PATHS", "").split(os.pathsep) if p]

# Persisted project config: "json" (scaforge.json) or "yaml" (scaforge.yaml)
CONFIG_FORMAT = os.getenv("SCAFORGE_CONFIG_FORMAT", "json").lower()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Resolver policies
STRICT_DEPENDENCIES = _env_flag("SCAFORGE_STRICT_DEPENDENCIES", False)
SYMMETRIC_CONFLICTS = _env_flag("SCAFORGE_SYMMETRIC_CONFLICTS", False)
