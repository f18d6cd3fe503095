"""
Tests for decktool.config: layering, env overrides and path resolution.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from decktool.config import (
    DEFAULT_TOOLCHAIN,
    apply_env_overrides,
    expand_path,
    get_config_path,
    get_default_config,
    load_config,
    merge_configs,
    resolve_config,
    resolve_go_bin,
)
from decktool.exit_codes import ConfigError


class TestDefaults:
    """Tests for the compiled-in defaults."""

    def test_default_sections(self):
        config = get_default_config()
        for section in ("paths", "tools", "workspace", "examples", "repositories", "logging"):
            assert section in config
        assert config["workspace"]["go_version"] == "1.25"

    def test_default_repository_layout(self, deck_config, work_dir):
        repos = deck_config.repos
        assert repos["deckviz"].directory == str(work_dir / ".data" / "deckviz")
        assert repos["dubois"].directory == str(work_dir / ".data" / "dubois-data-portraits")
        assert repos["deckfonts"].directory == str(work_dir / ".fonts")
        assert repos["deck"].directory == str(work_dir / ".src" / "deck")
        assert repos["ebcanvas"].branch == "main"
        assert repos["giftsh"].branch == "main"
        assert repos["deck"].url == "https://github.com/ajstarks/deck.git"
        assert repos["dubois"].url == "https://github.com/ajstarks/dubois-data-portraits.git"

    def test_dubois_uses_blob_filter(self, deck_config):
        assert deck_config.repos["dubois"].filter == ["--filter=blob:none"]
        assert deck_config.repos["deckviz"].filter == []

    def test_every_directory_is_absolute(self, deck_config):
        for repo in deck_config.repos.values():
            assert Path(repo.directory).is_absolute()
        for path in deck_config.cache_dirs():
            assert path.is_absolute()

    def test_data_and_code_split(self, deck_config):
        data = [r.name for r in deck_config.data_repos()]
        code = [r.name for r in deck_config.code_repos()]
        assert data == ["deckviz", "dubois", "deckfonts"]
        assert code == ["deck", "decksh", "ebcanvas", "giocanvas", "giftsh", "gift"]

    def test_fonts_repo_is_not_an_example_source(self, deck_config):
        assert sorted(deck_config.example_sources()) == ["deckviz", "dubois"]

    def test_repo_name_by_dir(self, deck_config):
        assert deck_config.repo_name_by_dir("dubois-data-portraits") == "dubois"
        assert deck_config.repo_name_by_dir("deckviz") == "deckviz"
        assert deck_config.repo_name_by_dir("nope") is None

    def test_ui_binaries_are_native_only(self):
        ui = [spec for spec in DEFAULT_TOOLCHAIN if spec.requires_ui]
        assert {spec.name for spec in ui} == {"ebdeck", "gcdeck"}
        for spec in ui:
            assert not spec.wasm_support
            assert not spec.wasi_support


class TestRepositoryEnvOverrides:
    """Tests for <NAME>_* environment overrides."""

    def test_dir_override_is_made_absolute(self, clean_env, raw_config, work_dir, monkeypatch):
        monkeypatch.setenv("DUBOIS_DIR", "custom/dubois")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.repos["dubois"].directory == str(work_dir / "custom" / "dubois")

    def test_branch_and_url(self, clean_env, raw_config, monkeypatch):
        monkeypatch.setenv("DECKVIZ_BRANCH", "dev")
        monkeypatch.setenv("DECKVIZ_REPO", "https://example.com/deckviz.git")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.repos["deckviz"].branch == "dev"
        assert config.repos["deckviz"].url == "https://example.com/deckviz.git"

    def test_depth_zero_means_full_history(self, clean_env, raw_config, monkeypatch):
        monkeypatch.setenv("DECK_DEPTH", "0")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.repos["deck"].depth == 0

    def test_non_integer_depth_is_ignored(self, clean_env, raw_config, monkeypatch):
        monkeypatch.setenv("DECK_DEPTH", "deep")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.repos["deck"].depth == 1

    def test_sparse_and_filter_lists(self, clean_env, raw_config, monkeypatch):
        monkeypatch.setenv("DUBOIS_SPARSE", "plate01 plate02")
        monkeypatch.setenv("DUBOIS_FILTER", "--filter=tree:0 --no-tags")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.repos["dubois"].sparse == ["plate01", "plate02"]
        assert config.repos["dubois"].filter == ["--filter=tree:0", "--no-tags"]

    def test_tool_overrides(self, clean_env, raw_config, monkeypatch):
        monkeypatch.setenv("GO", "/opt/go/bin/go")
        monkeypatch.setenv("GIT", "/usr/local/bin/git")
        monkeypatch.setenv("GH", "gh2")
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.go_cmd == "/opt/go/bin/go"
        assert config.git_cmd == "/usr/local/bin/git"
        assert config.gh_cmd == "gh2"


class TestFonts:
    """Tests for the DECKFONTS setting."""

    def test_defaults_to_fonts_repo(self, deck_config, work_dir):
        assert deck_config.deckfonts == work_dir / ".fonts"
        assert deck_config.child_env() == {"DECKFONTS": str(work_dir / ".fonts")}

    def test_env_override(self, clean_env, raw_config, tmp_path, monkeypatch):
        fonts = tmp_path / "my-fonts"
        monkeypatch.setenv("DECKFONTS", str(fonts))
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.child_env() == {"DECKFONTS": str(fonts)}

    def test_user_fonts_are_not_a_cache_dir(self, clean_env, raw_config, tmp_path, work_dir, monkeypatch):
        monkeypatch.setenv("DECKFONTS", str(tmp_path / "my-fonts"))
        config = resolve_config(raw_config, resolve_bin_dir=False)
        assert config.cache_dirs() == [
            work_dir / ".data",
            work_dir / ".src",
            work_dir / ".dist",
            work_dir / ".fonts",
        ]


class TestConfigFile:
    """Tests for config file loading and merging."""

    def test_no_file_gives_defaults(self, clean_env):
        assert load_config() == get_default_config()

    def test_default_path(self, clean_env):
        assert get_config_path() == clean_env / ".decktool" / "config.json"

    def test_decktool_config_env(self, clean_env, tmp_path, monkeypatch):
        path = tmp_path / "deck.json"
        path.write_text(json.dumps({"workspace": {"go_version": "1.24"}}))
        monkeypatch.setenv("DECKTOOL_CONFIG", str(path))

        assert get_config_path() == path
        config = load_config()
        assert config["workspace"]["go_version"] == "1.24"
        assert config["tools"]["go"] == "go"

    def test_yaml_file(self, clean_env):
        config_dir = clean_env / ".decktool"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            "examples:\n  default_source: dubois\nrepositories:\n  deck:\n    branch: develop\n"
        )

        config = load_config()
        assert config["examples"]["default_source"] == "dubois"
        assert config["repositories"]["deck"]["branch"] == "develop"
        # merged, not replaced
        assert config["repositories"]["decksh"]["branch"] == "master"

    def test_toml_file(self, clean_env):
        config_dir = clean_env / ".decktool"
        config_dir.mkdir()
        (config_dir / "config.toml").write_text('[tools]\ngh = "/opt/gh"\n')

        assert load_config()["tools"]["gh"] == "/opt/gh"

    def test_invalid_file_raises(self, clean_env):
        config_dir = clean_env / ".decktool"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{not json")

        with pytest.raises(ConfigError):
            load_config()

    def test_merge_configs_is_recursive(self):
        merged = merge_configs({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 5}, "e": 6})
        assert merged == {"a": {"b": 1, "c": 5}, "d": 3, "e": 6}

    def test_section_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DECKTOOL_WORKSPACE_GO_VERSION", "1.24")
        monkeypatch.setenv("DECKTOOL_EXAMPLES_DEFAULT_SOURCE", "dubois")
        config = apply_env_overrides(get_default_config())
        assert config["workspace"]["go_version"] == "1.24"
        assert config["examples"]["default_source"] == "dubois"

    def test_config_file_feeds_resolution(self, clean_env, work_dir):
        config_dir = clean_env / ".decktool"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({
            "paths": {"base_dir": str(work_dir), "dist_dir": "out"},
        }))

        config = resolve_config(resolve_bin_dir=False)
        assert config.dist_dir == work_dir / "out"
        assert config.config_path == config_dir / "config.json"

    def test_logging_level_applies_once(self, raw_config):
        logger = logging.getLogger("decktool")
        previous = logger.level
        logger.setLevel(logging.NOTSET)
        try:
            raw_config["logging"]["level"] = "warning"
            resolve_config(raw_config, resolve_bin_dir=False)
            assert logger.level == logging.WARNING

            raw_config["logging"]["level"] = "ERROR"
            resolve_config(raw_config, resolve_bin_dir=False)
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(previous)


class TestPaths:
    """Tests for path helpers."""

    def test_expand_path_empty(self):
        with pytest.raises(ConfigError):
            expand_path("  ")

    def test_expand_path_home(self, clean_env):
        assert expand_path("~/decks") == clean_env / "decks"

    def test_expand_path_relative_to_base(self, tmp_path):
        assert expand_path("a/../b", tmp_path) == tmp_path / "b"


class TestGoBin:
    """Tests for Go bin directory resolution."""

    def test_gobin_wins(self, tmp_path):
        values = {"GOBIN": str(tmp_path / "gobin"), "GOPATH": "/ignored"}
        with patch("decktool.config._go_env", side_effect=lambda go, key: values[key]):
            assert resolve_go_bin("go") == tmp_path / "gobin"

    def test_first_gopath_entry(self, tmp_path):
        values = {"GOBIN": "", "GOPATH": f"{tmp_path / 'one'}:{tmp_path / 'two'}"}
        with patch("decktool.config._go_env", side_effect=lambda go, key: values[key]):
            assert resolve_go_bin("go") == tmp_path / "one" / "bin"

    def test_home_fallback(self, clean_env):
        with patch("decktool.config._go_env", return_value=""):
            assert resolve_go_bin("go") == clean_env / "go" / "bin"

    def test_no_home_is_fatal(self):
        with patch("decktool.config._go_env", return_value=""), \
             patch("decktool.config.Path.home", side_effect=RuntimeError("no home")):
            with pytest.raises(ConfigError):
                resolve_go_bin("go")
