"""
Tests for PluginCatalog
"""

from scaforge.plugins.manifest import PluginCategory
from scaforge.plugins.registry import PluginCatalog
from scaforge.plugins.sample_plugins import sample_plugins


class TestPluginCatalog:
    """Lookup and registration"""

    def test_register_and_get(self, catalog, make_plugin):
        """A registered manifest is returned by name"""
        manifest = make_plugin("api-rest")
        catalog.register(manifest)

        assert catalog.get("api-rest") is manifest
        assert catalog.has("api-rest")
        assert "api-rest" in catalog
        assert catalog.count() == 1

    def test_get_unknown_returns_none(self, catalog):
        assert catalog.get("api-missing") is None
        assert not catalog.has("api-missing")

    def test_register_overwrites(self, catalog, make_plugin):
        """Registering the same name again keeps the last manifest"""
        catalog.register(make_plugin("api-rest", description="first"))
        catalog.register(make_plugin("api-rest", description="second"))

        assert len(catalog) == 1
        assert catalog.get("api-rest").description == "second"

    def test_unregister(self, catalog, make_plugin):
        catalog.register(make_plugin("api-rest"))

        assert catalog.unregister("api-rest") is True
        assert catalog.unregister("api-rest") is False
        assert catalog.count() == 0

    def test_get_all_keeps_registration_order(self, catalog, make_plugin):
        catalog.register_all([make_plugin("api-b"), make_plugin("api-a"), make_plugin("api-c")])

        assert [p.name for p in catalog.get_all()] == ["api-b", "api-a", "api-c"]

    def test_get_by_category(self, catalog, make_plugin):
        """Only manifests of the requested category are returned"""
        catalog.register(make_plugin("api-rest"))
        catalog.register(make_plugin("auth-basic", category=PluginCategory.AUTH))

        auth = catalog.get_by_category(PluginCategory.AUTH)
        assert [p.name for p in auth] == ["auth-basic"]
        assert catalog.get_by_category(PluginCategory.CMS) == []

    def test_categories(self, catalog, make_plugin):
        catalog.register(make_plugin("api-rest"))
        catalog.register(make_plugin("auth-basic", category=PluginCategory.AUTH))

        assert catalog.categories() == {PluginCategory.API, PluginCategory.AUTH}

    def test_clear(self, catalog, make_plugin):
        catalog.register(make_plugin("api-rest"))
        catalog.clear()

        assert catalog.count() == 0
        assert catalog.get_all() == []

    def test_catalogs_are_independent(self, make_plugin):
        """Two catalogs never share registrations"""
        first = PluginCatalog()
        second = PluginCatalog()
        first.register(make_plugin("api-rest"))

        assert first.has("api-rest")
        assert not second.has("api-rest")


class TestSamplePlugins:
    """The sample manifests that seed the default catalog"""

    def test_sample_names_are_unique(self):
        names = [p.name for p in sample_plugins]
        assert len(names) == len(set(names))

    def test_sample_dependencies_resolve(self):
        """Every sample dependency is itself a sample plugin"""
        catalog = PluginCatalog(sample_plugins)
        for manifest in sample_plugins:
            for dep in manifest.dependencies:
                assert catalog.has(dep), f"{manifest.name} depends on unknown {dep}"

    def test_sample_integrations_target_known_plugins(self):
        catalog = PluginCatalog(sample_plugins)
        for manifest in sample_plugins:
            for integration in manifest.integrations:
                assert catalog.has(integration.plugin)
