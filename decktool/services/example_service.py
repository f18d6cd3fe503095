"""
Example runner service for decktool.

Resolves example references to directories inside the data repositories,
lints and renders their scripts, and opens the result in the viewer.
Used by `examples`, `run` and `view`.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Generator, Iterable, List

from ..config import DATA_DIR, DeckConfig
from ..domain.binary import BuildTarget, build_filename
from ..domain.example import ExampleRef
from ..exit_codes import CommandError, CommandFailedError, ConfigError, DependencyError
from ..utils import list_subdirectories, run_command

logger = logging.getLogger(__name__)


class ExampleService:
    """
    Service for listing, rendering and viewing examples.

    Every deck tool runs with DECKFONTS pointing at the fonts directory,
    passed as a per-child environment overlay.

    Example:
        service = ExampleService(config)
        for progress in service.run_examples(["deckviz/fire"]):
            print(progress)

        outputs = service.last_result  # {"deckviz/fire": ".../fire.xml"}
    """

    def __init__(self, config: DeckConfig):
        self.config = config
        self.last_result: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Reference parsing
    # ------------------------------------------------------------------

    def parse_example(self, raw: str) -> ExampleRef:
        """
        Split ``raw`` into (source, name).

        Accepts ``source/name``, a bare ``name`` (default source), a
        repository directory name in place of the source
        (``dubois-data-portraits/plate01``) and a leading ``.data/`` prefix.
        """
        default = self.config.default_source
        raw = (raw or "").strip()
        if not raw:
            return ExampleRef(default, "")

        prefix = DATA_DIR + "/"
        if raw.startswith(prefix):
            raw = raw[len(prefix):]

        if "/" not in raw:
            return ExampleRef(default, raw)

        source, name = raw.split("/", 1)
        name = name.strip()
        repo_name = self.config.repo_name_by_dir(source) if source else None
        if repo_name:
            return ExampleRef(repo_name, name)
        return ExampleRef(source or default, name)

    def normalize(self, raw: str) -> str:
        return str(self.parse_example(raw))

    def example_dir(self, ref: ExampleRef) -> Path:
        sources = self.config.example_sources()
        if ref.source not in sources:
            raise ConfigError(f"unknown example source {ref.source!r}")
        return sources[ref.source].path / ref.name

    def script_path(self, ref: ExampleRef) -> Path:
        return self.example_dir(ref) / f"{ref.name}{self.config.script_ext}"

    def output_path(self, ref: ExampleRef) -> Path:
        return self.example_dir(ref) / f"{ref.name}{self.config.output_ext}"

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def examples_by_source(self) -> Dict[str, List[str]]:
        return {
            name: list_subdirectories(repo.path)
            for name, repo in self.config.example_sources().items()
        }

    def list_examples(self) -> List[str]:
        """All examples as sorted ``source/name`` strings."""
        return sorted(
            f"{source}/{name}"
            for source, names in self.examples_by_source().items()
            for name in names
        )

    def complete(self, incomplete: str) -> List[str]:
        """Shell completion candidates for an example argument."""
        groups = self.examples_by_source()
        suggestions = set()

        if "/" in incomplete:
            source, partial = incomplete.split("/", 1)
            for name in groups.get(source, []):
                if name.startswith(partial):
                    suggestions.add(f"{source}/{name}")
        else:
            lower = incomplete.lower()
            for source, names in groups.items():
                prefix = f"{source}/"
                if not incomplete or prefix.lower().startswith(lower):
                    suggestions.add(prefix)
                for name in names:
                    candidate = f"{source}/{name}"
                    if candidate.lower().startswith(lower) or name.lower().startswith(lower):
                        suggestions.add(candidate)
                        if source == self.config.default_source:
                            suggestions.add(name)

        return sorted(suggestions)

    # ------------------------------------------------------------------
    # Tool resolution and invocation
    # ------------------------------------------------------------------

    def resolve_binary(self, name: str) -> Path:
        """
        Locate a deck tool.

        Search order: the dist directory (built or downloaded), PATH, then
        the Go bin directory.
        """
        dist_path = self.config.dist_dir / build_filename(name, BuildTarget.NATIVE)
        if dist_path.is_file():
            return dist_path

        found = shutil.which(name)
        if found:
            return Path(found)

        go_bin = self.config.go_bin_dir
        if go_bin and (go_bin / name).is_file():
            return go_bin / name

        raise DependencyError(
            name,
            f"Looked in {self.config.dist_dir}, PATH and {go_bin}; run 'decktool ensure' or 'decktool dev-build'",
        )

    def lint(self, directory: Path, script: str) -> None:
        tool = self.resolve_binary(self.config.lint_tool)
        run_command([tool, script], cwd=directory, env=self.config.child_env(),
                    context=f"{self.config.lint_tool} {script}")

    def render(self, directory: Path, script: str, output: Path) -> None:
        """Run the render tool on ``script`` with stdout captured into ``output``."""
        tool = self.resolve_binary(self.config.render_tool)
        directory.mkdir(parents=True, exist_ok=True)
        with open(output, "w") as out:
            run_command([tool, script], cwd=directory, env=self.config.child_env(),
                        stdout=out, context=f"{self.config.render_tool} {script}")

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    def run_examples(self, examples: Iterable[str]) -> Generator[str, None, Dict[str, str]]:
        """
        Lint and render each example.

        Missing scripts are skipped with a warning; tool failures abort.

        Yields:
            Progress messages

        Returns:
            Mapping of normalized reference to rendered output path

        Raises:
            CommandFailedError: if nothing was rendered
        """
        results: Dict[str, str] = {}
        self.last_result = results

        for raw in examples:
            ref = self.parse_example(raw)
            directory = self.example_dir(ref)
            script = self.script_path(ref)
            if not script.is_file():
                yield f"⚠ Skipping {ref}: {script} not found"
                continue

            yield f"Linting {directory}/{script.name}"
            self.lint(directory, script.name)

            output = self.output_path(ref)
            yield f"Rendering {script.name} -> {output}"
            self.render(directory, script.name, output)
            results[str(ref)] = str(output)

        if not results:
            raise CommandFailedError("no examples rendered")
        return results

    def view(self, raw: str) -> Generator[str, None, Path]:
        """Render one example, then open it in the viewer from its own directory."""
        results = yield from self.run_examples([raw])
        key = self.normalize(raw)
        if key not in results:
            raise CommandError(f"rendered output not found for {raw!r}")

        output = Path(results[key])
        directory = self.example_dir(self.parse_example(raw))
        viewer = self.resolve_binary(self.config.viewer)
        yield f"Opening {output} in {self.config.viewer}"
        # relative asset references resolve against the example directory
        run_command([viewer, output], cwd=directory, env=self.config.child_env(),
                    context=f"{self.config.viewer} {output.name}")
        return output
