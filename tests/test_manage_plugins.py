"""
Tests for the manage_plugins CLI
"""

import pytest

import manage_plugins
from scaforge.config.loader import ConfigStore
from scaforge.config.types import PluginConfig


def run(tmp_path, *argv):
    manage_plugins.main(["-p", str(tmp_path), *argv])


@pytest.fixture
def project_dir(tmp_path):
    run(tmp_path, "init", "demo")
    return tmp_path


class TestInit:
    """init command"""

    def test_creates_json_config(self, tmp_path):
        run(tmp_path, "init", "demo", "-t", "nuxt")

        config = ConfigStore(tmp_path).load()
        assert config.name == "demo"
        assert config.target.value == "nuxt"

    def test_creates_yaml_config(self, tmp_path):
        run(tmp_path, "init", "demo", "-f", "yaml")

        assert (tmp_path / "scaforge.yaml").exists()
        assert not (tmp_path / "scaforge.json").exists()

    def test_refuses_existing_project(self, project_dir):
        with pytest.raises(SystemExit) as exc_info:
            run(project_dir, "init", "again")
        assert exc_info.value.code == 1


class TestAddRemove:
    """add/remove commands"""

    def test_add_with_options(self, project_dir):
        run(project_dir, "add", "auth-clerk", "-o", "theme=dark")

        options = ConfigStore(project_dir).load().plugins["auth-clerk"].options
        assert options["theme"] == "dark"
        assert options["redirect_url"] == "/dashboard"

    def test_add_installs_dependencies(self, project_dir, capsys):
        run(project_dir, "add", "auth-better")

        assert ConfigStore(project_dir).load().enabled_plugins() == ["db-drizzle", "auth-better"]
        assert "db-drizzle (dependency)" in capsys.readouterr().out

    def test_strict_add_fails_without_dependencies(self, project_dir, capsys):
        with pytest.raises(SystemExit):
            run(project_dir, "add", "auth-better", "--strict")

        assert "PLUGIN_DEPENDENCY_MISSING" in capsys.readouterr().out
        assert ConfigStore(project_dir).load().plugins == {}

    def test_add_conflict(self, project_dir, capsys):
        run(project_dir, "add", "auth-clerk")

        with pytest.raises(SystemExit):
            run(project_dir, "add", "auth-authjs")

        assert "PLUGIN_CONFLICT" in capsys.readouterr().out
        assert ConfigStore(project_dir).load().enabled_plugins() == ["auth-clerk"]

    def test_remove(self, project_dir):
        run(project_dir, "add", "cms-sanity")
        run(project_dir, "remove", "cms-sanity")

        assert ConfigStore(project_dir).load().plugins == {}

    def test_remove_blocked(self, project_dir):
        run(project_dir, "add", "auth-better")

        with pytest.raises(SystemExit):
            run(project_dir, "remove", "db-drizzle")
        assert ConfigStore(project_dir).load().enabled_plugins() == ["db-drizzle", "auth-better"]

    def test_add_without_project(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            run(tmp_path, "add", "cms-sanity")
        assert "CONFIG_NOT_FOUND" in capsys.readouterr().out


class TestChecks:
    """validate, rules and doctor commands"""

    def test_validate_ok(self, project_dir, capsys):
        run(project_dir, "validate", "add", "auth-clerk")
        assert "OK" in capsys.readouterr().out

    def test_validate_failure_exits(self, project_dir):
        with pytest.raises(SystemExit) as exc_info:
            run(project_dir, "validate", "remove", "auth-clerk")
        assert exc_info.value.code == 1

    def test_rules(self, project_dir, capsys):
        run(project_dir, "add", "auth-clerk")
        run(project_dir, "add", "api-trpc")
        capsys.readouterr()

        run(project_dir, "rules")
        assert "auth-api-middleware" in capsys.readouterr().out

    def test_doctor_reports_inconsistent_config(self, project_dir, capsys):
        store = ConfigStore(project_dir)
        config = store.load()
        config.plugins["auth-better"] = PluginConfig(enabled=True)
        store.save(config)

        with pytest.raises(SystemExit):
            run(project_dir, "doctor")
        assert "db-drizzle" in capsys.readouterr().out

    @pytest.mark.parametrize("symmetric", [False, True])
    def test_doctor_follows_conflict_policy(self, project_dir, capsys, monkeypatch, catalog, make_plugin, symmetric):
        catalog.register(make_plugin("test-a"))
        catalog.register(make_plugin("test-b", conflicts=["test-a"]))
        monkeypatch.setattr(manage_plugins, "build_catalog", lambda: catalog)
        monkeypatch.setattr(manage_plugins, "SYMMETRIC_CONFLICTS", symmetric)

        store = ConfigStore(project_dir)
        config = store.load()
        config.plugins["test-a"] = PluginConfig(enabled=True)
        config.plugins["test-b"] = PluginConfig(enabled=True)
        store.save(config)
        capsys.readouterr()

        with pytest.raises(SystemExit):
            run(project_dir, "doctor")

        out = capsys.readouterr().out
        assert 'Plugin "test-b" conflicts' in out
        assert ('Plugin "test-a" conflicts' in out) is symmetric


class TestParseOptions:
    """key=value parsing"""

    def test_json_and_string_values(self):
        assert manage_plugins.parse_options(["a=1", "b=true", "c=text", 'd={"x": 2}']) == {
            "a": 1,
            "b": True,
            "c": "text",
            "d": {"x": 2},
        }

    def test_malformed_pair(self):
        with pytest.raises(SystemExit):
            manage_plugins.parse_options(["novalue"])
