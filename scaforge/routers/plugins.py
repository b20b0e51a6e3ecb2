"""Plugin management REST API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from scaforge.dependencies import create_manager, get_catalog, get_config_store, get_rule_engine, project_lock
from scaforge.errors import ErrorCode, ScaforgeError
from scaforge.integrations.engine import find_integrations_targeting, get_applicable_integrations
from scaforge.plugins.manifest import PluginCategory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["plugins"])

_STATUS_CODES = {
    ErrorCode.PLUGIN_NOT_FOUND: 404,
    ErrorCode.CONFIG_NOT_FOUND: 404,
    ErrorCode.CONFIG_INVALID: 422,
}


class PluginAddRequest(BaseModel):
    """Request body for adding a plugin."""

    options: Dict[str, Any] = {}


def _http_error(error: ScaforgeError) -> HTTPException:
    status_code = _STATUS_CODES.get(error.code, 409)
    return HTTPException(status_code=status_code, detail=error.to_dict())


def _load_project():
    try:
        return get_config_store().load()
    except ScaforgeError as e:
        raise _http_error(e)


@router.get("/plugins")
def list_plugins(category: Optional[PluginCategory] = None):
    """List catalog plugins, optionally filtered by category."""
    catalog = get_catalog()
    plugins = catalog.get_by_category(category) if category else catalog.get_all()
    return {
        "plugins": [p.to_dict() for p in sorted(plugins, key=lambda p: p.name)],
        "categories": sorted(c.value for c in catalog.categories()),
    }


@router.get("/plugins/{name}")
def get_plugin(name: str):
    """Get a catalog plugin's manifest."""
    manifest = get_catalog().get(name)
    if not manifest:
        raise HTTPException(status_code=404, detail=f"Plugin '{name}' not found")
    return manifest.to_dict()


@router.get("/project")
def get_project():
    """Get the project configuration."""
    config = _load_project()
    return config.model_dump(mode="json")


@router.get("/project/integrations")
def list_project_integrations():
    """List auto-integration rules matched by the installed plugins."""
    config = _load_project()
    matches = get_rule_engine().find_matching_rules(config.enabled_plugins())
    return {"integrations": [m.to_dict() for m in matches]}


@router.get("/project/plugins/{name}/validate-add")
def validate_add(name: str):
    """Pre-flight check for adding a plugin."""
    manager = create_manager(_load_project(), get_catalog())
    return manager.validate_add(name).to_dict()


@router.get("/project/plugins/{name}/validate-remove")
def validate_remove(name: str):
    """Pre-flight check for removing a plugin."""
    manager = create_manager(_load_project(), get_catalog())
    return manager.validate_remove(name).to_dict()


@router.post("/project/plugins/{name}")
def add_plugin(name: str, body: Optional[PluginAddRequest] = None):
    """Add a plugin to the project and report the integrations it unlocks."""
    catalog = get_catalog()

    with project_lock:
        config = _load_project()
        manager = create_manager(config, catalog)
        existing = manager.get_installed()

        try:
            manifest = catalog.get(name)
            options = manifest.resolve_options(body.options if body else None) if manifest else {}
            result = manager.add(name, options)
        except ScaforgeError as e:
            raise _http_error(e)

        get_config_store().save(manager.get_config())

    updated = manager.get_config()
    rules = get_rule_engine().get_rules_for_new_plugin(name, existing + result.installed_dependencies)
    integrations = get_applicable_integrations(manifest, updated)
    integrations += find_integrations_targeting(name, updated, catalog)
    return {
        **result.to_dict(),
        "rules": [m.to_dict() for m in rules],
        "integrations": [i.to_dict() for i in integrations],
        "post_install": manifest.post_install,
    }


@router.delete("/project/plugins/{name}")
def remove_plugin(name: str):
    """Remove a plugin from the project."""
    with project_lock:
        manager = create_manager(_load_project(), get_catalog())
        try:
            result = manager.remove(name)
        except ScaforgeError as e:
            raise _http_error(e)
        get_config_store().save(manager.get_config())

    return result.to_dict()


@router.get("/integrations/rules")
def list_rules():
    """List the auto-integration rule table."""
    return {
        "rules": [
            {
                "id": rule.id,
                "description": rule.description,
                "when": list(rule.when),
                "priority": rule.priority,
                "action": rule.action.type.value if rule.action else None,
            }
            for rule in get_rule_engine().rules
        ]
    }
