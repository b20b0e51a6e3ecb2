"""
Tests for manifest integrations
"""

import asyncio

from scaforge.config.types import PluginConfig
from scaforge.integrations.engine import (
    find_integrations_targeting,
    get_applicable_integrations,
    get_integration_files,
    has_integration,
    run_integrations,
)
from scaforge.plugins.manifest import PluginFile, PluginIntegration


def install(config, *names):
    for name in names:
        config.plugins[name] = PluginConfig(enabled=True)
    return config


class TestApplicableIntegrations:
    """Which integrations apply to a project"""

    def test_only_installed_targets(self, config, sample_catalog):
        posthog = sample_catalog.get("analytics-posthog")

        assert get_applicable_integrations(posthog, install(config, "analytics-posthog")) == []

        install(config, "api-trpc")
        applicable = get_applicable_integrations(posthog, config)
        assert [i.to_dict() for i in applicable] == [{
            "source_plugin": "analytics-posthog",
            "target_plugin": "api-trpc",
            "type": "hook",
            "files": ["src/server/trpc/middleware/analytics.ts"],
        }]

    def test_file_conditions(self, config, sample_catalog):
        """Conditional files need every listed plugin installed"""
        prisma = sample_catalog.get("db-prisma")
        install(config, "db-prisma", "api-trpc")

        assert get_integration_files(prisma, "api-trpc", config) == ["src/server/trpc/context/db.ts"]

        install(config, "auth-authjs")
        assert get_integration_files(prisma, "api-trpc", config) == [
            "src/server/trpc/context/db.ts",
            "src/server/trpc/routers/auth.ts",
        ]

    def test_disabled_target_does_not_count(self, config, sample_catalog):
        config.plugins["api-trpc"] = PluginConfig(enabled=False)
        clerk = sample_catalog.get("auth-clerk")

        assert get_applicable_integrations(clerk, config) == []

    def test_has_integration(self, sample_catalog):
        clerk = sample_catalog.get("auth-clerk")

        assert has_integration(clerk, "api-trpc")
        assert not has_integration(clerk, "db-prisma")

    def test_files_for_missing_integration(self, config, sample_catalog):
        assert get_integration_files(sample_catalog.get("cms-sanity"), "api-trpc", config) == []

    def test_integrations_targeting_new_plugin(self, config, sample_catalog):
        """Installed plugins that integrate with a newly added one"""
        install(config, "auth-clerk", "analytics-posthog", "api-trpc")

        found = find_integrations_targeting("api-trpc", config, sample_catalog)

        assert [(i.source_plugin, i.type) for i in found] == [
            ("auth-clerk", "middleware"),
            ("analytics-posthog", "hook"),
        ]

    def test_targeting_skips_unknown_plugins(self, config, sample_catalog):
        install(config, "custom-thing", "api-trpc")

        assert find_integrations_targeting("api-trpc", config, sample_catalog) == []


class TestRunIntegrations:
    """Applying integrations through a generator"""

    def test_dry_run_reports_files(self, config, sample_catalog):
        clerk = sample_catalog.get("auth-clerk")
        install(config, "auth-clerk", "api-trpc")

        result = asyncio.run(run_integrations(clerk, config, dry_run=True))

        assert len(result.applied) == 1
        assert result.applied[0].generated_files == ["src/server/trpc/context.ts"]
        assert result.skipped == []
        assert result.errors == []

    def test_missing_target_is_skipped(self, config, sample_catalog):
        clerk = sample_catalog.get("auth-clerk")
        install(config, "auth-clerk")

        result = asyncio.run(run_integrations(clerk, config))

        assert result.applied == []
        assert result.skipped[0].target_plugin == "api-trpc"
        assert result.skipped[0].reason == 'Target plugin "api-trpc" is not installed'

    def test_generator_is_called(self, config, sample_catalog):
        calls = []

        async def generator(manifest, integration, project):
            calls.append((manifest.name, integration.plugin, project.name))
            return ["out.ts"]

        clerk = sample_catalog.get("auth-clerk")
        install(config, "auth-clerk", "api-trpc")

        result = asyncio.run(run_integrations(clerk, config, generator=generator))

        assert calls == [("auth-clerk", "api-trpc", "my-app")]
        assert result.applied[0].generated_files == ["out.ts"]

    def test_dry_run_skips_generator(self, config, sample_catalog):
        async def generator(manifest, integration, project):
            raise AssertionError("generator must not run")

        install(config, "auth-clerk", "api-trpc")
        result = asyncio.run(run_integrations(sample_catalog.get("auth-clerk"), config, generator, dry_run=True))

        assert result.errors == []

    def test_failure_does_not_stop_others(self, config, make_plugin):
        """A failing integration is recorded and the next one still runs"""
        manifest = make_plugin(
            "api-multi",
            integrations=[
                PluginIntegration(plugin="db-one", type="context", files=[PluginFile(path="a.ts")]),
                PluginIntegration(plugin="db-two", type="context", files=[PluginFile(path="b.ts")]),
            ],
        )
        install(config, "api-multi", "db-one", "db-two")

        async def generator(manifest, integration, project):
            if integration.plugin == "db-one":
                raise RuntimeError("template missing")
            return [f.path for f in integration.files]

        result = asyncio.run(run_integrations(manifest, config, generator=generator))

        assert [e.target_plugin for e in result.errors] == ["db-one"]
        assert result.errors[0].error == "template missing"
        assert [a.target_plugin for a in result.applied] == ["db-two"]
