"""Shared fixtures for the plugin resolution tests."""

import pytest

from scaforge.config.types import create_default_config
from scaforge.plugins.manifest import FrameworkTarget, PluginCategory, PluginManifest
from scaforge.plugins.registry import PluginCatalog
from scaforge.plugins.sample_plugins import sample_plugins


def _make_plugin(
    name,
    category=PluginCategory.API,
    targets=(FrameworkTarget.NEXTJS,),
    dependencies=(),
    conflicts=(),
    **kwargs,
):
    return PluginManifest(
        name=name,
        display_name=name.title(),
        category=category,
        supported_targets=list(targets),
        dependencies=list(dependencies),
        conflicts=list(conflicts),
        **kwargs,
    )


@pytest.fixture
def make_plugin():
    """Factory for minimal manifests targeting nextjs."""
    return _make_plugin


@pytest.fixture
def catalog():
    return PluginCatalog()


@pytest.fixture
def sample_catalog():
    return PluginCatalog(sample_plugins)


@pytest.fixture
def config():
    """Empty nextjs project."""
    return create_default_config("my-app", FrameworkTarget.NEXTJS)
