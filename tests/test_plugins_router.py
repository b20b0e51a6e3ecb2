"""
Tests for the plugin REST API
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scaforge.config.loader import ConfigStore
from scaforge.config.types import create_default_config
from scaforge.plugins.manifest import FrameworkTarget
from scaforge.routers import plugins as plugins_module
from scaforge.routers import plugins_router


@pytest.fixture
def store(tmp_path):
    return ConfigStore(tmp_path)


@pytest.fixture
def client(monkeypatch, store, sample_catalog):
    monkeypatch.setattr(plugins_module, "get_config_store", lambda: store)
    monkeypatch.setattr(plugins_module, "get_catalog", lambda: sample_catalog)

    app = FastAPI()
    app.include_router(plugins_router)
    return TestClient(app)


@pytest.fixture
def project(store):
    config = create_default_config("demo", FrameworkTarget.NEXTJS)
    store.save(config)
    return config


class TestCatalogEndpoints:
    """GET /api/plugins"""

    def test_list_plugins(self, client):
        response = client.get("/api/plugins")

        assert response.status_code == 200
        data = response.json()
        names = [p["name"] for p in data["plugins"]]
        assert "auth-clerk" in names
        assert names == sorted(names)
        assert "auth" in data["categories"]

    def test_filter_by_category(self, client):
        response = client.get("/api/plugins", params={"category": "auth"})

        plugins = response.json()["plugins"]
        assert {p["name"] for p in plugins} == {"auth-clerk", "auth-authjs", "auth-better"}

    def test_get_plugin(self, client):
        response = client.get("/api/plugins/api-trpc")

        assert response.status_code == 200
        assert response.json()["has_config_schema"] is True

    def test_get_unknown_plugin(self, client):
        assert client.get("/api/plugins/api-missing").status_code == 404

    def test_rule_table(self, client):
        rules = client.get("/api/integrations/rules").json()["rules"]

        assert len(rules) == 8
        assert rules[0]["id"] == "auth-api-middleware"


class TestProjectEndpoints:
    """Project mutation endpoints"""

    def test_project_missing(self, client):
        response = client.get("/api/project")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "CONFIG_NOT_FOUND"

    def test_get_project(self, client, project):
        response = client.get("/api/project")

        assert response.status_code == 200
        assert response.json()["name"] == "demo"

    def test_add_plugin_persists(self, client, project, store):
        response = client.post("/api/project/plugins/auth-clerk", json={"options": {"theme": "dark"}})

        assert response.status_code == 200
        assert response.json()["plugin"] == "auth-clerk"
        options = store.load().plugins["auth-clerk"].options
        assert options["theme"] == "dark"
        assert options["sign_in_url"] == "/sign-in"

    def test_add_reports_unlocked_rules_and_integrations(self, client, project):
        client.post("/api/project/plugins/auth-clerk")

        data = client.post("/api/project/plugins/api-trpc").json()

        assert [r["rule"] for r in data["rules"]] == ["auth-api-middleware"]
        assert data["integrations"] == [{
            "source_plugin": "auth-clerk",
            "target_plugin": "api-trpc",
            "type": "middleware",
            "files": ["src/server/trpc/context.ts"],
        }]
        assert data["post_install"]

    def test_add_installs_dependencies(self, client, project, store):
        data = client.post("/api/project/plugins/auth-better").json()

        assert data["installed_dependencies"] == ["db-drizzle"]
        assert store.load().enabled_plugins() == ["db-drizzle", "auth-better"]

    def test_add_conflict(self, client, project, store):
        client.post("/api/project/plugins/auth-clerk")
        before = store.path.read_text(encoding="utf-8")

        response = client.post("/api/project/plugins/auth-authjs")

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "PLUGIN_CONFLICT"
        assert store.path.read_text(encoding="utf-8") == before

    def test_add_invalid_options(self, client, project, store):
        response = client.post("/api/project/plugins/api-trpc", json={"options": {"transformer": "bogus"}})

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "CONFIG_INVALID"
        assert store.load().plugins == {}

    def test_add_unknown_plugin(self, client, project):
        response = client.post("/api/project/plugins/api-missing")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "PLUGIN_NOT_FOUND"

    def test_remove_blocked_by_dependents(self, client, project):
        client.post("/api/project/plugins/auth-better")

        response = client.delete("/api/project/plugins/db-drizzle")

        assert response.status_code == 409
        assert response.json()["detail"]["details"]["dependents"] == ["auth-better"]

    def test_remove(self, client, project, store):
        client.post("/api/project/plugins/cms-sanity")

        response = client.delete("/api/project/plugins/cms-sanity")

        assert response.status_code == 200
        assert store.load().plugins == {}

    def test_validate_endpoints(self, client, project):
        client.post("/api/project/plugins/auth-clerk")

        add_check = client.get("/api/project/plugins/auth-authjs/validate-add").json()
        remove_check = client.get("/api/project/plugins/auth-clerk/validate-remove").json()

        assert add_check["valid"] is False
        assert add_check["errors"][0]["code"] == "PLUGIN_CONFLICT"
        assert remove_check == {"valid": True, "errors": []}

    def test_project_integrations(self, client, project):
        client.post("/api/project/plugins/auth-better")

        matches = client.get("/api/project/integrations").json()["integrations"]

        assert [m["rule"] for m in matches] == ["auth-db-adapter"]
        assert matches[0]["plugins"] == ["auth-better", "db-drizzle"]


class TestApp:
    """The assembled application"""

    def test_root(self):
        from app import app

        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"
