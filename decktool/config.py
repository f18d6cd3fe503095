#!/usr/bin/env python3

import os
import json
import subprocess
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import logging
import sys

import yaml

from .domain.binary import BinarySpec
from .domain.repository import RepositorySpec
from .exit_codes import ConfigError

# Configure logging
_log_handler = logging.StreamHandler(sys.stderr)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[_log_handler]
)
logger = logging.getLogger("decktool")

# Cache directory names, relative to the base directory
DATA_DIR = ".data"
SRC_DIR = ".src"
DIST_DIR = ".dist"
FONTS_DIR = ".fonts"

FONTS_ENV = "DECKFONTS"
FONTS_REPO = "deckfonts"
DEFAULT_URL_TEMPLATE = "https://github.com/ajstarks/{dir}.git"

ENV_PREFIX = "DECKTOOL_"
CONFIG_ENV = "DECKTOOL_CONFIG"
CONFIG_SUFFIXES = (".json", ".toml", ".yaml", ".yml")

DEFAULT_TOOLCHAIN = [
    # decksh tools
    BinarySpec("decksh", "github.com/ajstarks/decksh/cmd/decksh", "decksh", wasm_support=True, wasi_support=True),
    BinarySpec("dshfmt", "github.com/ajstarks/decksh/cmd/dshfmt", "decksh", wasm_support=True, wasi_support=True),
    BinarySpec("dshlint", "github.com/ajstarks/decksh/cmd/dshlint", "decksh", wasm_support=True, wasi_support=True),
    # deck tools
    BinarySpec("pdfdeck", "github.com/ajstarks/deck/cmd/pdfdeck", "deck", wasm_support=True, wasi_support=True),
    BinarySpec("pngdeck", "github.com/ajstarks/deck/cmd/pngdeck", "deck", wasm_support=True, wasi_support=True),
    BinarySpec("svgdeck", "github.com/ajstarks/deck/cmd/svgdeck", "deck", wasm_support=True, wasi_support=True),
    # gift tools
    BinarySpec("gift", "github.com/ajstarks/gift", "gift", wasm_support=True, wasi_support=True),
    BinarySpec("giftsh", "github.com/ajstarks/giftsh", "giftsh", wasm_support=True, wasi_support=True),
    # UI apps (native only)
    BinarySpec("ebdeck", "github.com/ajstarks/ebcanvas/ebdeck", "ebcanvas", requires_ui=True),
    BinarySpec("gcdeck", "github.com/ajstarks/giocanvas/gcdeck", "giocanvas", requires_ui=True),
]


def get_config_path():
    """Locate the config file.

    An existing file named by DECKTOOL_CONFIG wins. Otherwise the first
    non-empty config.{json,toml,yaml,yml} under ~/.decktool is used, falling
    back to ~/.decktool/config.json.
    """
    explicit = os.environ.get(CONFIG_ENV)
    if explicit and Path(explicit).exists():
        return Path(explicit)

    config_dir = Path.home() / '.decktool'
    for suffix in CONFIG_SUFFIXES:
        candidate = config_dir / f'config{suffix}'
        if candidate.exists() and candidate.stat().st_size > 0:
            return candidate
    return config_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "paths": {
            "base_dir": ".",
            "data_dir": DATA_DIR,
            "src_dir": SRC_DIR,
            "dist_dir": DIST_DIR,
            "fonts_dir": FONTS_DIR,
        },
        "tools": {
            "go": "go",
            "git": "git",
            "gh": "gh",
        },
        "workspace": {
            "go_version": "1.25",
        },
        "examples": {
            "default_source": "deckviz",
            "script_ext": ".dsh",
            "output_ext": ".xml",
            "lint_tool": "dshlint",
            "render_tool": "decksh",
            "viewer": "ebdeck",
        },
        "repositories": {
            # Data repositories (example content)
            "deckviz": {"dir": "deckviz", "branch": "master", "data": True},
            "dubois": {
                "dir": "dubois-data-portraits",
                "branch": "master",
                "data": True,
                "filter": "--filter=blob:none",
            },
            FONTS_REPO: {"dir": "deckfonts", "branch": "master", "data": True},
            # Code repositories (buildable tool sources)
            "deck": {"branch": "master"},
            "decksh": {"branch": "master"},
            "ebcanvas": {"branch": "main"},
            "giocanvas": {"branch": "master"},
            "giftsh": {"branch": "main"},
            "gift": {"branch": "master"},
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
    }


def _read_config_file(path: Path) -> dict:
    suffix = path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(path, 'rb') as f:
                return tomllib.load(f)
        with open(path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                return yaml.safe_load(f) or {}
            return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {path}: {e}") from e


def load_config():
    """Defaults, then the config file if one exists, then DECKTOOL_* overrides."""
    config = get_default_config()
    config_path = get_config_path()
    if config_path.exists():
        config = merge_configs(config, _read_config_file(config_path))
    return apply_env_overrides(config)


def merge_configs(base_config, override_config):
    """Return ``base_config`` with ``override_config`` layered on top.

    Nested sections merge key by key. Any other value replaces the base one.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def _coerce_env_value(value: str):
    lowered = value.lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    return value


def _longest_key(section: dict, words: List[str]) -> Optional[str]:
    """Section key whose underscore-separated words prefix ``words`` most fully."""
    found = None
    for key in section:
        key_words = key.split('_')
        if words[:len(key_words)] == key_words and (found is None or len(key_words) > len(found.split('_'))):
            found = key
    return found


def apply_env_overrides(config):
    """
    Apply DECKTOOL_<SECTION>_<KEY> environment variables to ``config``.

    Keys may themselves contain underscores, so DECKTOOL_WORKSPACE_GO_VERSION
    sets ``workspace.go_version``. Variables naming no existing key are ignored.
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV:
            continue

        words = env_key[len(ENV_PREFIX):].lower().split('_')
        section = config
        while words:
            key = _longest_key(section, words)
            if key is None:
                break
            words = words[len(key.split('_')):]
            if not words:
                section[key] = _coerce_env_value(value)
            elif isinstance(section[key], dict):
                section = section[key]
            else:
                break

    return config


def getenv_default(key: str, fallback: str) -> str:
    value = os.environ.get(key, "")
    return value if value else fallback


def getenv_int(key: str, fallback: int) -> int:
    value = os.environ.get(key, "")
    if value:
        try:
            return int(value)
        except ValueError:
            logger.debug(f"Ignoring non-integer {key}={value!r}")
    return fallback


def expand_path(path: str, base: Optional[Path] = None) -> Path:
    """Expand ``~`` and make ``path`` absolute (relative to ``base`` or cwd)."""
    if not path or not str(path).strip():
        raise ConfigError("path is empty")
    p = Path(str(path).strip()).expanduser()
    if not p.is_absolute():
        p = (base or Path.cwd()) / p
    return Path(os.path.normpath(p))


def _split_fields(raw) -> List[str]:
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw if str(item).strip()]
    return str(raw).split()


def _go_env(go_cmd: str, key: str) -> str:
    try:
        result = subprocess.run(
            [go_cmd, "env", key],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return ""
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def resolve_go_bin(go_cmd: str) -> Path:
    """Locate the directory ``go install`` writes binaries into.

    GOBIN wins, then the first GOPATH entry, then ~/go/bin.
    """
    gobin = _go_env(go_cmd, "GOBIN")
    if gobin:
        return expand_path(gobin)

    gopath = _go_env(go_cmd, "GOPATH")
    if not gopath:
        try:
            home = Path.home()
        except RuntimeError as e:
            raise ConfigError("unable to determine GOBIN; set GOBIN or GOPATH") from e
        return home / "go" / "bin"

    first = gopath.split(os.pathsep)[0]
    if not first:
        raise ConfigError("GOPATH is empty; set GOBIN explicitly")
    return expand_path(first) / "bin"


@dataclass
class DeckConfig:
    """Fully resolved configuration shared by every service."""
    base_dir: Path
    data_dir: Path
    src_dir: Path
    dist_dir: Path
    fonts_dir: Path
    deckfonts: Optional[Path] = None
    go_cmd: str = "go"
    git_cmd: str = "git"
    gh_cmd: str = "gh"
    go_bin_dir: Optional[Path] = None
    go_version: str = "1.25"
    default_source: str = "deckviz"
    script_ext: str = ".dsh"
    output_ext: str = ".xml"
    lint_tool: str = "dshlint"
    render_tool: str = "decksh"
    viewer: str = "ebdeck"
    repos: Dict[str, RepositorySpec] = field(default_factory=dict)
    toolchain: List[BinarySpec] = field(default_factory=lambda: list(DEFAULT_TOOLCHAIN))
    config_path: Optional[Path] = None

    def data_repos(self) -> List[RepositorySpec]:
        return [r for r in self.repos.values() if r.is_data]

    def code_repos(self) -> List[RepositorySpec]:
        return [r for r in self.repos.values() if not r.is_data]

    def example_sources(self) -> Dict[str, RepositorySpec]:
        """Data repositories that hold examples (everything but fonts)."""
        return {
            name: repo for name, repo in self.repos.items()
            if repo.is_data and name != FONTS_REPO
        }

    def repo_name_by_dir(self, dir_name: str) -> Optional[str]:
        for name, repo in self.repos.items():
            if Path(repo.directory).name == dir_name:
                return name
        return None

    def child_env(self) -> Dict[str, str]:
        """Environment overlay for deck tool invocations."""
        return {FONTS_ENV: str(self.deckfonts or self.fonts_dir)}

    def cache_dirs(self) -> List[Path]:
        return [self.data_dir, self.src_dir, self.dist_dir, self.fonts_dir]

    def to_dict(self) -> Dict[str, object]:
        return {
            'config_path': str(self.config_path) if self.config_path else None,
            'paths': {
                'base_dir': str(self.base_dir),
                'data_dir': str(self.data_dir),
                'src_dir': str(self.src_dir),
                'dist_dir': str(self.dist_dir),
                'fonts_dir': str(self.fonts_dir),
                'deckfonts': str(self.deckfonts) if self.deckfonts else None,
                'go_bin_dir': str(self.go_bin_dir) if self.go_bin_dir else None,
            },
            'tools': {'go': self.go_cmd, 'git': self.git_cmd, 'gh': self.gh_cmd},
            'workspace': {'go_version': self.go_version},
            'examples': {
                'default_source': self.default_source,
                'script_ext': self.script_ext,
                'output_ext': self.output_ext,
                'lint_tool': self.lint_tool,
                'render_tool': self.render_tool,
                'viewer': self.viewer,
            },
            'repositories': {name: repo.to_dict() for name, repo in self.repos.items()},
            'toolchain': [spec.to_dict() for spec in self.toolchain],
        }


def _build_repo(name: str, settings: dict, paths: dict) -> RepositorySpec:
    """Create a RepositorySpec from config settings plus <NAME>_* env overrides."""
    upper = name.upper()
    is_data = bool(settings.get("data", False))
    dir_name = settings.get("dir") or name

    if name == FONTS_REPO:
        default_dir = paths["fonts_dir"]
    elif is_data:
        default_dir = os.path.join(paths["data_dir"], dir_name)
    else:
        default_dir = os.path.join(paths["src_dir"], dir_name)

    return RepositorySpec(
        name=name,
        url=getenv_default(f"{upper}_REPO", settings.get("url") or DEFAULT_URL_TEMPLATE.format(dir=dir_name)),
        directory=getenv_default(f"{upper}_DIR", settings.get("path") or default_dir),
        branch=getenv_default(f"{upper}_BRANCH", settings.get("branch", "master")),
        depth=getenv_int(f"{upper}_DEPTH", int(settings.get("depth", 1))),
        filter=_split_fields(getenv_default(f"{upper}_FILTER", "") or settings.get("filter")),
        sparse=_split_fields(getenv_default(f"{upper}_SPARSE", "") or settings.get("sparse")),
        is_data=is_data,
    )


def resolve_config(raw: Optional[dict] = None, resolve_bin_dir: bool = True) -> DeckConfig:
    """Build the finalized DeckConfig.

    Every repository directory, cache directory and the fonts directory
    is absolute on return.
    """
    if raw is None:
        raw = load_config()

    paths = raw.get("paths", {})
    tools = raw.get("tools", {})
    examples = raw.get("examples", {})

    base_dir = expand_path(paths.get("base_dir") or ".")

    def _cache(key: str, default: str) -> Path:
        return expand_path(paths.get(key) or default, base_dir)

    cfg = DeckConfig(
        base_dir=base_dir,
        data_dir=_cache("data_dir", DATA_DIR),
        src_dir=_cache("src_dir", SRC_DIR),
        dist_dir=_cache("dist_dir", DIST_DIR),
        fonts_dir=_cache("fonts_dir", FONTS_DIR),
        go_cmd=getenv_default("GO", tools.get("go", "go")),
        git_cmd=getenv_default("GIT", tools.get("git", "git")),
        gh_cmd=getenv_default("GH", tools.get("gh", "gh")),
        go_version=str(raw.get("workspace", {}).get("go_version", "1.25")),
        default_source=examples.get("default_source", "deckviz"),
        script_ext=examples.get("script_ext", ".dsh"),
        output_ext=examples.get("output_ext", ".xml"),
        lint_tool=examples.get("lint_tool", "dshlint"),
        render_tool=examples.get("render_tool", "decksh"),
        viewer=examples.get("viewer", "ebdeck"),
    )
    config_path = get_config_path()
    if config_path.exists():
        cfg.config_path = config_path

    resolved_paths = {
        "data_dir": str(cfg.data_dir),
        "src_dir": str(cfg.src_dir),
        "fonts_dir": str(cfg.fonts_dir),
    }
    for name, settings in raw.get("repositories", {}).items():
        repo = _build_repo(name, settings or {}, resolved_paths)
        repo.directory = str(expand_path(repo.directory, base_dir))
        cfg.repos[name] = repo

    fonts_env = os.environ.get(FONTS_ENV, "").strip()
    if fonts_env:
        cfg.deckfonts = expand_path(fonts_env, base_dir)
    elif FONTS_REPO in cfg.repos:
        cfg.deckfonts = Path(cfg.repos[FONTS_REPO].directory)
    else:
        cfg.deckfonts = cfg.fonts_dir

    if resolve_bin_dir:
        cfg.go_bin_dir = resolve_go_bin(cfg.go_cmd)

    apply_logging_settings(raw.get("logging", {}))

    logger.debug(f"Resolved configuration with {len(cfg.repos)} repositories")
    return cfg


def set_log_level(level) -> None:
    """Adjust the decktool logger (used by --verbose)."""
    logger.setLevel(level)


def apply_logging_settings(settings: dict) -> None:
    """Apply the config file's ``logging`` section.

    The level only applies while the logger has none of its own, so
    --verbose keeps DEBUG.
    """
    level = settings.get("level")
    if level and logger.level == logging.NOTSET:
        logger.setLevel(str(level).upper())
    fmt = settings.get("format")
    if fmt:
        _log_handler.setFormatter(logging.Formatter(fmt))
