"""
Shared fixtures for decktool tests.
"""

import os

import pytest

from decktool.config import get_default_config, resolve_config

REPO_NAMES = ["deckviz", "dubois", "deckfonts", "deck", "decksh",
              "ebcanvas", "giocanvas", "giftsh", "gift"]
REPO_SUFFIXES = ["REPO", "DIR", "BRANCH", "DEPTH", "FILTER", "SPARSE"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolated HOME with every decktool-related override removed."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))

    for key in list(os.environ):
        if key.startswith("DECKTOOL_"):
            monkeypatch.delenv(key)
    for key in ("GO", "GIT", "GH", "DECKFONTS", "GOBIN", "GOPATH", "SHELL"):
        monkeypatch.delenv(key, raising=False)
    for name in REPO_NAMES:
        for suffix in REPO_SUFFIXES:
            monkeypatch.delenv(f"{name.upper()}_{suffix}", raising=False)
    return home


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def raw_config(work_dir):
    raw = get_default_config()
    raw["paths"]["base_dir"] = str(work_dir)
    return raw


@pytest.fixture
def deck_config(clean_env, raw_config):
    """Resolved configuration rooted in a temporary work directory."""
    return resolve_config(raw_config, resolve_bin_dir=False)


def drain(steps):
    """Collect the messages a service generator yields plus its return value."""
    messages = []
    while True:
        try:
            messages.append(next(steps))
        except StopIteration as stop:
            return messages, stop.value
