"""Tests for tsconfig loading and environment settings."""

import os

import pytest

from scaffold.config import (
    DEFAULT_EXCLUDE_DIRS,
    ResolverConfig,
    find_config_file,
    load_jsonc,
    load_resolver_config,
    load_settings,
)


# ── 1. JSONC ─────────────────────────────────────────────────────────────

def test_jsonc_comments_and_trailing_commas(tmp_path):
    path = tmp_path / "tsconfig.json"
    path.write_text(
        '{\n'
        '  // line comment\n'
        '  "compilerOptions": {\n'
        '    /* block\n       comment */\n'
        '    "baseUrl": "./src",\n'
        '    "paths": { "@/*": ["./*",], },\n'
        '  },\n'
        '}\n',
        encoding="utf-8",
    )
    data = load_jsonc(str(path))
    assert data["compilerOptions"]["baseUrl"] == "./src"
    assert data["compilerOptions"]["paths"] == {"@/*": ["./*"]}


def test_jsonc_keeps_comment_markers_inside_strings(tmp_path):
    path = tmp_path / "x.json"
    path.write_text('{"url": "http://example.com/*x*/", "s": "a,}"}', encoding="utf-8")
    data = load_jsonc(str(path))
    assert data["url"] == "http://example.com/*x*/"
    assert data["s"] == "a,}"


def test_jsonc_rejects_non_object(tmp_path):
    path = tmp_path / "x.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_jsonc(str(path))


# ── 2. Discovery ─────────────────────────────────────────────────────────

def test_find_config_file_searches_ancestors(tmp_path):
    (tmp_path / "tsconfig.json").write_text("{}", encoding="utf-8")
    nested = tmp_path / "packages" / "app"
    nested.mkdir(parents=True)
    assert find_config_file(str(nested)) == str(tmp_path / "tsconfig.json")


# ── 3. Resolver config ───────────────────────────────────────────────────

def test_no_tsconfig_defaults_to_workspace_base_url(make_workspace):
    root = make_workspace({"a.ts": ""})
    config = load_resolver_config(root)
    assert config.base_url == os.path.abspath(root)
    assert config.paths == {}
    assert config.config_file is None


def test_base_url_and_paths(make_workspace):
    root = make_workspace({
        "tsconfig.json": '{"compilerOptions": {"baseUrl": "src", "paths": {"@/*": ["*"]}}}',
    })
    config = load_resolver_config(root)
    assert config.base_url == os.path.join(root, "src")
    assert config.paths == {"@/*": ["*"]}
    assert config.paths_base == os.path.join(root, "src")
    assert config.config_file == os.path.join(root, "tsconfig.json")


def test_paths_without_base_url_use_config_dir(make_workspace):
    root = make_workspace({
        "tsconfig.json": '{"compilerOptions": {"paths": {"~/*": ["./src/*"]}}}',
    })
    config = load_resolver_config(root)
    assert config.base_url is None
    assert config.paths_base == root


def test_extends_chain_child_overrides(make_workspace):
    root = make_workspace({
        "configs/base.json": (
            '{"compilerOptions": {"baseUrl": "..", "paths": {"@old/*": ["old/*"]}}}'
        ),
        "tsconfig.json": (
            '{"extends": "./configs/base", '
            '"compilerOptions": {"paths": {"@new/*": ["new/*"]}}}'
        ),
    })
    config = load_resolver_config(root)
    # baseUrl is relative to the config that declared it
    assert config.base_url == root
    assert config.paths == {"@new/*": ["new/*"]}
    assert config.paths_base == root


def test_extends_cycle_terminates(make_workspace):
    root = make_workspace({
        "a.json": '{"extends": "./tsconfig.json", "compilerOptions": {"baseUrl": "a"}}',
        "tsconfig.json": '{"extends": "./a.json"}',
    })
    config = load_resolver_config(root)
    assert config.base_url == os.path.join(root, "a")


def test_package_extends_is_ignored(make_workspace):
    root = make_workspace({
        "tsconfig.json": '{"extends": "@tsconfig/node18/tsconfig.json", "compilerOptions": {"baseUrl": "."}}',
    })
    config = load_resolver_config(root)
    assert config.base_url == root


def test_malformed_tsconfig_falls_back_to_default(make_workspace):
    root = make_workspace({"tsconfig.json": '{"compilerOptions": {'})
    config = load_resolver_config(root)
    assert config == ResolverConfig.default(root)


def test_paths_with_two_wildcards_fall_back_to_default(make_workspace):
    root = make_workspace({
        "tsconfig.json": '{"compilerOptions": {"paths": {"@/*/*": ["src/*"]}}}',
    })
    config = load_resolver_config(root)
    assert config == ResolverConfig.default(root)


def test_paths_declaration_order_preserved(make_workspace):
    root = make_workspace({
        "tsconfig.json": (
            '{"compilerOptions": {"baseUrl": ".", "paths": '
            '{"@z/*": ["z/*"], "@a/*": ["a/*"], "@m/*": ["m1/*", "m2/*"]}}}'
        ),
    })
    config = load_resolver_config(root)
    assert list(config.paths) == ["@z/*", "@a/*", "@m/*"]
    assert config.paths["@m/*"] == ["m1/*", "m2/*"]


# ── 4. Settings ──────────────────────────────────────────────────────────

def test_settings_defaults(monkeypatch):
    for name in ("SCAFFOLD_DEBOUNCE_MS", "SCAFFOLD_EXCLUDE_DIRS",
                 "SCAFFOLD_STATE_DIR", "SCAFFOLD_LOAD_BEARING_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.debounce_ms == 500
    assert settings.exclude_dirs == DEFAULT_EXCLUDE_DIRS
    assert settings.state_dir == "~/.scaffold"
    assert settings.load_bearing_limit == 20


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SCAFFOLD_DEBOUNCE_MS", "50")
    monkeypatch.setenv("SCAFFOLD_EXCLUDE_DIRS", "node_modules, dist ,build")
    monkeypatch.setenv("SCAFFOLD_LOAD_BEARING_LIMIT", "5")
    settings = load_settings()
    assert settings.debounce_ms == 50
    assert settings.exclude_dirs == frozenset({"node_modules", "dist", "build"})
    assert settings.load_bearing_limit == 5


def test_invalid_numeric_setting_uses_default(monkeypatch):
    monkeypatch.setenv("SCAFFOLD_DEBOUNCE_MS", "soon")
    monkeypatch.setenv("SCAFFOLD_LOAD_BEARING_LIMIT", "-3")
    settings = load_settings()
    assert settings.debounce_ms == 500
    assert settings.load_bearing_limit == 20
