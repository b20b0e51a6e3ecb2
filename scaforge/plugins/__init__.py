"""Plugin system for scaforge.

Imports are lazy so that lightweight components like PluginCatalog can be
used without pulling in the sample manifests or discovery.
"""

__all__ = [
    "PluginManifest",
    "PluginCategory",
    "FrameworkTarget",
    "PluginIntegration",
    "PluginFile",
    "PydanticConfigSchema",
    "PluginCatalog",
    "PluginDiscovery",
    "PluginManager",
    "PluginOperationResult",
    "ValidationResult",
    "sample_plugins",
]


def __getattr__(name):
    if name in (
        "PluginManifest",
        "PluginCategory",
        "FrameworkTarget",
        "PluginIntegration",
        "PluginFile",
        "PydanticConfigSchema",
    ):
        from scaforge.plugins import manifest
        return getattr(manifest, name)
    if name == "PluginCatalog":
        from scaforge.plugins.registry import PluginCatalog
        return PluginCatalog
    if name == "PluginDiscovery":
        from scaforge.plugins.discovery import PluginDiscovery
        return PluginDiscovery
    if name in ("PluginManager", "PluginOperationResult", "ValidationResult"):
        from scaforge.plugins import manager
        return getattr(manager, name)
    if name == "sample_plugins":
        from scaforge.plugins.sample_plugins import sample_plugins
        return sample_plugins
    raise AttributeError(f"module 'scaforge.plugins' has no attribute {name!r}")
