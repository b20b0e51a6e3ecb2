"""Integration engine - decides which manifest integrations apply to a project."""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from scaforge.config.types import ProjectConfig
from scaforge.plugins.manifest import PluginFile, PluginIntegration, PluginManifest
from scaforge.plugins.registry import PluginCatalog

logger = logging.getLogger(__name__)

# Out-of-scope code generator: renders an integration's files, returns written paths
IntegrationGenerator = Callable[[PluginManifest, PluginIntegration, ProjectConfig], Awaitable[List[str]]]


@dataclass
class ApplicableIntegration:
    source_plugin: str
    target_plugin: str
    type: str
    files: List[str]

    def to_dict(self) -> dict:
        return {
            "source_plugin": self.source_plugin,
            "target_plugin": self.target_plugin,
            "type": self.type,
            "files": list(self.files),
        }


@dataclass
class AppliedIntegration:
    source_plugin: str
    target_plugin: str
    type: str
    generated_files: List[str] = field(default_factory=list)


@dataclass
class SkippedIntegration:
    source_plugin: str
    target_plugin: str
    reason: str


@dataclass
class IntegrationError:
    source_plugin: str
    target_plugin: str
    error: str


@dataclass
class IntegrationResult:
    applied: List[AppliedIntegration] = field(default_factory=list)
    skipped: List[SkippedIntegration] = field(default_factory=list)
    errors: List[IntegrationError] = field(default_factory=list)


def _file_applies(file: PluginFile, installed: List[str]) -> bool:
    if not file.condition:
        return True
    return all(name in installed for name in file.condition)


def _integration_files(integration: PluginIntegration, installed: List[str]) -> List[str]:
    return [f.path for f in integration.files if _file_applies(f, installed)]


def get_applicable_integrations(
    manifest: PluginManifest,
    config: ProjectConfig,
) -> List[ApplicableIntegration]:
    """List the integrations of a plugin whose target plugin is installed."""
    installed = config.enabled_plugins()
    return [
        ApplicableIntegration(
            source_plugin=manifest.name,
            target_plugin=integration.plugin,
            type=integration.type,
            files=_integration_files(integration, installed),
        )
        for integration in manifest.integrations
        if integration.plugin in installed
    ]


def find_integrations_targeting(
    plugin_name: str,
    config: ProjectConfig,
    catalog: PluginCatalog,
) -> List[ApplicableIntegration]:
    """List installed plugins' integrations that target ``plugin_name``.

    These are unlocked when ``plugin_name`` joins a project whose plugins
    already declare an integration with it.
    """
    installed = config.enabled_plugins()
    found = []
    for source in installed:
        if source == plugin_name:
            continue
        manifest = catalog.get(source)
        if manifest is None:
            continue
        for integration in manifest.integrations:
            if integration.plugin == plugin_name:
                found.append(ApplicableIntegration(
                    source_plugin=source,
                    target_plugin=plugin_name,
                    type=integration.type,
                    files=_integration_files(integration, installed),
                ))
    return found


def has_integration(manifest: PluginManifest, target_plugin: str) -> bool:
    return any(i.plugin == target_plugin for i in manifest.integrations)


def get_integration_files(
    manifest: PluginManifest,
    target_plugin: str,
    config: ProjectConfig,
) -> List[str]:
    """Get the file paths an integration with ``target_plugin`` would generate."""
    integration = next((i for i in manifest.integrations if i.plugin == target_plugin), None)
    if integration is None:
        return []
    return _integration_files(integration, config.enabled_plugins())


async def run_integrations(
    manifest: PluginManifest,
    config: ProjectConfig,
    generator: Optional[IntegrationGenerator] = None,
    dry_run: bool = False,
) -> IntegrationResult:
    """Apply a plugin's integrations with the other installed plugins.

    Integrations run one after another. Without a generator, or with
    ``dry_run``, the files that would be generated are reported instead.
    A failing integration is recorded in ``errors`` and the rest continue.

    Args:
        manifest: The plugin being installed
        config: Project configuration after the install
        generator: Async code generator for one integration
        dry_run: Report files without calling the generator

    Returns:
        IntegrationResult
    """
    result = IntegrationResult()
    installed = config.enabled_plugins()

    for integration in manifest.integrations:
        if integration.plugin not in installed:
            result.skipped.append(SkippedIntegration(
                source_plugin=manifest.name,
                target_plugin=integration.plugin,
                reason=f'Target plugin "{integration.plugin}" is not installed',
            ))
            continue

        try:
            if generator is None or dry_run:
                files = _integration_files(integration, installed)
            else:
                files = await generator(manifest, integration, config)
        except Exception as e:
            logger.error(f"Integration {manifest.name} -> {integration.plugin} failed: {e}")
            result.errors.append(IntegrationError(
                source_plugin=manifest.name,
                target_plugin=integration.plugin,
                error=str(e),
            ))
            continue

        result.applied.append(AppliedIntegration(
            source_plugin=manifest.name,
            target_plugin=integration.plugin,
            type=integration.type,
            generated_files=list(files),
        ))
        logger.info(f"Applied integration {manifest.name} -> {integration.plugin} ({integration.type})")

    return result
