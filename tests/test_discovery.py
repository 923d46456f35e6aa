"""Tests for plugin discovery."""

import os

import pytest

from plugdock import Application, Options
from plugdock.plugins.discovery import (
    PACKAGE_STORE,
    discover_installed_plugins,
    discover_plugins,
    is_plugin,
    load_package_info,
)


class TestIsPlugin:
    """Keyword matching on parsed package metadata."""

    @pytest.mark.parametrize("keyword", ["plugdockplugin", "plugdock-plugin", "plugdock-theme"])
    def test_recognized_keywords(self, keyword):
        assert is_plugin({"project": {"keywords": [keyword]}})

    def test_keywords_are_case_insensitive(self):
        assert is_plugin({"project": {"keywords": ["PLUGDOCK-PLUGIN"]}})
        assert is_plugin({"project": {"keywords": ["PlugDock-Theme"]}})

    def test_any_keyword_may_match(self):
        assert is_plugin({"project": {"keywords": ["markdown", "plugdock-plugin"]}})

    def test_other_keywords(self):
        assert not is_plugin({"project": {"keywords": ["other"]}})

    def test_no_substring_matching(self):
        assert not is_plugin({"project": {"keywords": ["plugdock-plugins"]}})
        assert not is_plugin({"project": {"keywords": ["my-plugdock-plugin"]}})

    @pytest.mark.parametrize(
        "info",
        [
            {},
            {"project": {}},
            {"project": {"keywords": "plugdock-plugin"}},
            {"project": {"keywords": ["plugdock-plugin", 1]}},
            {"project": "plugdock-plugin"},
            {"keywords": ["plugdock-plugin"]},
            [],
            None,
        ],
    )
    def test_malformed_metadata(self, info):
        assert not is_plugin(info)


class TestLoadPackageInfo:
    """Reading pyproject.toml files."""

    def test_parses_toml(self, tmp_path, app, log_events):
        info_file = tmp_path / "pyproject.toml"
        info_file.write_text('[project]\nkeywords = ["plugdock-plugin"]\n', encoding="utf-8")

        assert load_package_info(app.logger, str(info_file)) == {"project": {"keywords": ["plugdock-plugin"]}}
        assert log_events("error") == []

    def test_invalid_toml_logs_error(self, tmp_path, app, log_events):
        info_file = tmp_path / "pyproject.toml"
        info_file.write_text("[project\nkeywords = [", encoding="utf-8")

        assert load_package_info(app.logger, str(info_file)) == {}
        assert log_events("error") == [f"Could not parse {info_file}"]


class TestDiscoverInstalledPlugins:
    """Walking package stores from a directory up to the filesystem root."""

    def test_keyword_scenarios(self, project, store, make_package, app, log_events):
        included = make_package(store, "alpha", keywords=["plugdock-plugin"])
        upper = make_package(store, "beta", keywords=["PLUGDOCK-PLUGIN"])
        make_package(store, "gamma", keywords=["other"])
        make_package(store, "delta", keywords=None)
        make_package(store, "epsilon", info="[project\nkeywords = [")

        result = discover_installed_plugins(app.logger, str(project))

        assert result == [str(included), str(upper)]
        assert log_events("error") == [f"Could not parse {store / 'epsilon' / 'pyproject.toml'}"]

    def test_scoped_packages(self, project, store, make_package, app):
        scoped = make_package(store, "@acme/widgets")
        make_package(store, "@acme/other", keywords=["unrelated"])
        plain = make_package(store, "zulu")

        result = discover_installed_plugins(app.logger, str(project))

        assert result == [str(scoped), str(plain)]

    def test_scope_directory_itself_is_a_candidate(self, project, store, make_package, app):
        scope = store / "@acme"
        scope.mkdir()
        (scope / "pyproject.toml").write_text('[project]\nkeywords = ["plugdock-plugin"]\n', encoding="utf-8")
        child = make_package(store, "@acme/widgets")

        result = discover_installed_plugins(app.logger, str(project))

        assert result == [str(child), str(scope)]

    def test_walks_up_to_parent_stores(self, tmp_path, project, store, make_package, app):
        inner = make_package(store, "inner")
        outer = make_package(tmp_path / PACKAGE_STORE, "outer")
        nested = project / "docs" / "api"
        nested.mkdir(parents=True)

        result = discover_installed_plugins(app.logger, str(nested))

        assert result == [str(inner), str(outer)]

    def test_defaults_to_working_directory(self, store, make_package, app):
        plugin = make_package(store, "alpha")

        assert discover_installed_plugins(app.logger) == [str(plugin)]

    def test_store_that_is_a_file_is_ignored(self, tmp_path, app):
        root = tmp_path / "lonely"
        root.mkdir()
        (root / PACKAGE_STORE).write_text("not a directory", encoding="utf-8")

        assert discover_installed_plugins(app.logger, str(root)) == []

    def test_missing_metadata_is_silent(self, project, store, make_package, app, log_events):
        make_package(store, "plain", keywords=None)

        assert discover_installed_plugins(app.logger, str(project)) == []
        assert log_events("error") == []


class TestDiscoverPlugins:
    """The application-level entry point."""

    def test_discovers_when_option_not_set(self, store, make_package, app):
        plugin = make_package(store, "alpha")

        assert discover_plugins(app) == [str(plugin)]

    def test_explicit_plugin_list_skips_filesystem(self, store, make_package, monkeypatch):
        make_package(store, "alpha")
        options = Options()
        options.set_value("plugin", ["/does/not/exist", "some_module"])
        app = Application(options)

        def forbidden(*args, **kwargs):
            raise AssertionError("filesystem must not be touched")

        monkeypatch.setattr(os, "listdir", forbidden)
        monkeypatch.setattr(os.path, "isdir", forbidden)
        monkeypatch.setattr(os.path, "exists", forbidden)

        assert discover_plugins(app) == ["/does/not/exist", "some_module"]

    def test_explicit_empty_list_disables_discovery(self, store, make_package):
        make_package(store, "alpha")
        options = Options()
        options.set_value("plugin", [])

        assert discover_plugins(Application(options)) == []
