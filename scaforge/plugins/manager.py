"""Plugin manager - adds and removes plugins while keeping the project consistent."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from scaforge.config.types import PluginConfig, ProjectConfig
from scaforge.errors import (
    DependencyCycleError,
    DependencyMissingError,
    HasDependentsError,
    PluginAlreadyInstalledError,
    PluginConflictError,
    PluginNotFoundError,
    PluginNotInstalledError,
    ScaforgeError,
    TargetNotSupportedError,
)
from scaforge.plugins.manifest import PluginManifest
from scaforge.plugins.registry import PluginCatalog

logger = logging.getLogger(__name__)


@dataclass
class PluginOperationResult:
    """Result of a successful add or remove."""

    plugin: str
    message: str
    installed_dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "plugin": self.plugin,
            "message": self.message,
            "installed_dependencies": list(self.installed_dependencies),
        }


@dataclass
class ValidationResult:
    """Outcome of a pre-flight check."""

    errors: List[ScaforgeError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}


class PluginManager:
    """Resolves plugin dependencies and conflicts for one project.

    The manager owns a private copy of the project configuration. Every
    check runs before any mutation, so a failed add() or remove() leaves
    the configuration unchanged.

    Policies:
        auto_install_dependencies: install missing dependencies depth-first
            (True) or fail with DependencyMissingError (False).
        symmetric_conflicts: also reject a plugin that an installed plugin
            lists in its own conflicts. Off by default, in which case only
            the incoming plugin's conflicts list is consulted.

    Dependency cycles are rejected with DependencyCycleError.
    """

    def __init__(
        self,
        config: ProjectConfig,
        catalog: PluginCatalog,
        auto_install_dependencies: bool = True,
        symmetric_conflicts: bool = False,
    ):
        self.config = config.model_copy(deep=True)
        self.catalog = catalog
        self.auto_install_dependencies = auto_install_dependencies
        self.symmetric_conflicts = symmetric_conflicts

    def get_config(self) -> ProjectConfig:
        return self.config

    def get_installed(self) -> List[str]:
        """Get the names of enabled plugins."""
        return self.config.enabled_plugins()

    def is_installed(self, name: str) -> bool:
        plugin = self.config.plugins.get(name)
        return plugin is not None and plugin.enabled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def check_conflicts(self, manifest: PluginManifest) -> List[str]:
        """Get installed plugins that conflict with a manifest."""
        return self._conflicts_among(manifest, self.get_installed())

    def get_missing_dependencies(self, manifest: PluginManifest) -> List[str]:
        return [dep for dep in manifest.dependencies if not self.is_installed(dep)]

    def get_dependents(self, name: str) -> List[str]:
        """Get installed plugins that declare ``name`` as a dependency."""
        dependents = []
        for installed in self.get_installed():
            if installed == name:
                continue
            manifest = self.catalog.get(installed)
            if manifest is not None and name in manifest.dependencies:
                dependents.append(installed)
        return dependents

    def plan_dependencies(self, manifest: PluginManifest) -> List[str]:
        """Compute the dependencies add() would auto-install, in install order.

        Raises:
            PluginNotFoundError: a dependency is not in the catalog
            TargetNotSupportedError: a dependency does not support the target
            PluginConflictError: a dependency conflicts with the resulting set
            DependencyCycleError: the dependency graph loops back
        """
        planned: List[str] = []
        self._plan(manifest, planned, [manifest.name])
        return planned

    def _plan(self, manifest: PluginManifest, planned: List[str], chain: List[str]) -> None:
        for dep_name in manifest.dependencies:
            if self.is_installed(dep_name) or dep_name in planned:
                continue
            if dep_name in chain:
                cycle = chain[chain.index(dep_name):] + [dep_name]
                raise DependencyCycleError(chain[0], cycle)

            dep = self.catalog.get(dep_name)
            if dep is None:
                raise PluginNotFoundError(dep_name, required_by=manifest.name)
            self._check_target(dep)
            conflicts = self._conflicts_among(dep, self.get_installed() + planned)
            if conflicts:
                raise PluginConflictError(dep_name, conflicts)

            self._plan(dep, planned, chain + [dep_name])
            planned.append(dep_name)

    def _conflicts_among(self, manifest: PluginManifest, names: Iterable[str]) -> List[str]:
        conflicts = []
        for other in names:
            if other == manifest.name:
                continue
            if other in manifest.conflicts:
                conflicts.append(other)
            elif self.symmetric_conflicts:
                other_manifest = self.catalog.get(other)
                if other_manifest is not None and manifest.name in other_manifest.conflicts:
                    conflicts.append(other)
        return conflicts

    def _check_target(self, manifest: PluginManifest) -> None:
        target = self.config.target
        if not manifest.supports(target):
            raise TargetNotSupportedError(
                manifest.name,
                target.value,
                [t.value for t in manifest.supported_targets],
            )

    # ------------------------------------------------------------------
    # Checks shared by add/validate_add and remove/validate_remove
    # ------------------------------------------------------------------

    def _check_add(self, name: str) -> Tuple[List[ScaforgeError], List[str]]:
        """Run every add check without mutating anything.

        Returns:
            (errors, dependencies to install). Errors are ordered the way
            add() reports them; the first one is what add() raises.
        """
        manifest = self.catalog.get(name)
        if manifest is None:
            return [PluginNotFoundError(name)], []

        errors: List[ScaforgeError] = []
        if self.is_installed(name):
            errors.append(PluginAlreadyInstalledError(name))

        try:
            self._check_target(manifest)
        except TargetNotSupportedError as e:
            errors.append(e)

        conflicts = self.check_conflicts(manifest)
        if conflicts:
            errors.append(PluginConflictError(name, conflicts))

        if errors:
            return errors, []

        if not self.auto_install_dependencies:
            missing = self.get_missing_dependencies(manifest)
            if missing:
                return [DependencyMissingError(name, missing)], []
            return [], []

        try:
            planned = self.plan_dependencies(manifest)
        except ScaforgeError as e:
            return [e], []

        conflicts = self._conflicts_among(manifest, planned)
        if conflicts:
            return [PluginConflictError(name, conflicts)], []
        return [], planned

    def _check_remove(self, name: str) -> List[ScaforgeError]:
        if self.catalog.get(name) is None:
            return [PluginNotFoundError(name)]

        errors: List[ScaforgeError] = []
        if not self.is_installed(name):
            errors.append(PluginNotInstalledError(name))

        dependents = self.get_dependents(name)
        if dependents:
            errors.append(HasDependentsError(name, dependents))

        return errors

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate_add(self, name: str) -> ValidationResult:
        """Check whether add(name) would succeed, without changing anything."""
        errors, _ = self._check_add(name)
        return ValidationResult(errors=errors)

    def validate_remove(self, name: str) -> ValidationResult:
        """Check whether remove(name) would succeed, without changing anything."""
        return ValidationResult(errors=self._check_remove(name))

    def add(self, name: str, options: Optional[Dict[str, Any]] = None) -> PluginOperationResult:
        """Add a plugin, installing its dependencies first when allowed.

        Args:
            name: Plugin name
            options: Plugin options, stored as given

        Returns:
            PluginOperationResult listing auto-installed dependencies

        Raises:
            ScaforgeError: the first failing check; the config is unchanged
        """
        errors, dependencies = self._check_add(name)
        if errors:
            logger.info(f"Cannot add plugin '{name}': {errors[0].message}")
            raise errors[0]

        for dep_name in dependencies:
            self.config.plugins[dep_name] = PluginConfig(enabled=True, options={})
            logger.info(f"Installed dependency '{dep_name}' for plugin '{name}'")

        self.config.plugins[name] = PluginConfig(enabled=True, options=dict(options or {}))
        logger.info(f"Added plugin: {name}")

        return PluginOperationResult(
            plugin=name,
            message=f'Plugin "{name}" added successfully',
            installed_dependencies=dependencies,
        )

    def remove(self, name: str) -> PluginOperationResult:
        """Remove a plugin. Dependents must be removed first.

        Raises:
            ScaforgeError: the first failing check; the config is unchanged
        """
        errors = self._check_remove(name)
        if errors:
            logger.info(f"Cannot remove plugin '{name}': {errors[0].message}")
            raise errors[0]

        del self.config.plugins[name]
        logger.info(f"Removed plugin: {name}")

        return PluginOperationResult(plugin=name, message=f'Plugin "{name}" removed successfully')


def check_invariants(
    config: ProjectConfig,
    catalog: PluginCatalog,
    symmetric_conflicts: bool = False,
) -> List[ScaforgeError]:
    """Report consistency violations in an externally loaded configuration.

    Covers unknown plugins, conflicts, missing dependencies and unsupported
    targets among the enabled plugins.
    """
    manager = PluginManager(config, catalog, symmetric_conflicts=symmetric_conflicts)
    errors: List[ScaforgeError] = []

    for name in manager.get_installed():
        manifest = catalog.get(name)
        if manifest is None:
            errors.append(PluginNotFoundError(name))
            continue

        try:
            manager._check_target(manifest)
        except TargetNotSupportedError as e:
            errors.append(e)

        conflicts = manager.check_conflicts(manifest)
        if conflicts:
            errors.append(PluginConflictError(name, conflicts))

        missing = manager.get_missing_dependencies(manifest)
        if missing:
            errors.append(DependencyMissingError(name, missing))

    return errors
