"""
decktool - Helper CLI for deck examples.

Fetches example and tool repositories, builds the deck binaries for native,
WASM and WASI targets, renders examples, and publishes release bundles
through the GitHub CLI.

Quick Start:
    from decktool.config import resolve_config
    from decktool.services import ExampleService

    config = resolve_config()
    service = ExampleService(config)
    for progress in service.run_examples(["deckviz/fire"]):
        print(progress)

Domain Objects:
    RepositorySpec - Data or code repository to clone
    BinarySpec - Tool binary and the targets it supports
    BuildTarget / BuildResult - Build matrix entries and outcomes
    ExampleRef - (source, name) reference to an example
"""

__version__ = "0.1.0"

from .config import DeckConfig, resolve_config
from .domain import BinarySpec, BuildResult, BuildTarget, ExampleRef, RepositorySpec

__all__ = [
    "__version__",
    "DeckConfig",
    "resolve_config",
    "RepositorySpec",
    "BinarySpec",
    "BuildTarget",
    "BuildResult",
    "ExampleRef",
]
