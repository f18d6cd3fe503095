"""
Binary build service for decktool.

Builds the configured binaries for native, WASM and WASI targets.
Used by `dev-build` and `dev-release`.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional

from ..config import DeckConfig
from ..domain.binary import ALL_TARGETS, BinarySpec, BuildResult, BuildTarget, build_filename
from ..exit_codes import CommandError, UnsupportedTargetError
from ..infra.go_toolchain import GoToolchain

logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Results of a best-effort build matrix."""
    results: List[BuildResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status == "success")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status == "skipped")

    def to_dict(self) -> Dict[str, int]:
        return {
            'succeeded': self.succeeded,
            'failed': self.failed,
            'skipped': self.skipped,
        }


def check_support(spec: BinarySpec, target: BuildTarget) -> None:
    """Raise UnsupportedTargetError if ``spec`` cannot target ``target``."""
    if not spec.supports(target):
        raise UnsupportedTargetError(f"{target.label} not supported (requires {spec.requirement})")


class BuildService:
    """
    Service that drives ``go build`` across the binary × target matrix.

    Example:
        service = BuildService(config)
        for progress in service.build_all([BuildTarget.NATIVE]):
            print(progress)

        summary = service.last_result
        print(f"{summary.failed} builds failed")
    """

    def __init__(self, config: DeckConfig, toolchain: Optional[GoToolchain] = None):
        self.config = config
        self.go = toolchain or GoToolchain(config.go_cmd)
        self.last_result: Optional[BuildSummary] = None

    def build_binary(
        self,
        spec: BinarySpec,
        target: BuildTarget,
        output_dir: Optional[Path] = None,
    ) -> BuildResult:
        """
        Build one binary for one target.

        Never raises for build problems: unsupported targets and failed
        builds come back as a BuildResult carrying the error.
        """
        try:
            check_support(spec, target)
        except UnsupportedTargetError as e:
            return BuildResult(spec.name, target, error=str(e), unsupported=True)

        output_dir = Path(output_dir or self.config.dist_dir)
        filename = build_filename(spec.name, target)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            # go runs from the source cache, so the output must be absolute
            out_path = (output_dir / filename).resolve()
            self.go.build(spec.package, out_path, cwd=self.config.src_dir, env=target.build_env())
        except (CommandError, OSError) as e:
            return BuildResult(spec.name, target, error=f"build failed: {e}")

        return BuildResult(spec.name, target, path=str(out_path))

    def build_all(
        self,
        targets: Iterable[BuildTarget] = ALL_TARGETS,
        output_dir: Optional[Path] = None,
    ) -> Generator[str, None, BuildSummary]:
        """
        Build every configured binary for every requested target.

        One failing pair never stops the remaining pairs.

        Yields:
            Progress messages

        Returns:
            BuildSummary with one result per (binary, target)
        """
        targets = list(targets)
        summary = BuildSummary()
        self.last_result = summary

        for spec in self.config.toolchain:
            for target in targets:
                if spec.supports(target):
                    yield f"Building {spec.name} for {target}..."
                result = self.build_binary(spec, target, output_dir)
                summary.results.append(result)
                if result.ok:
                    yield f"✓ Built {Path(result.path).name}"
                elif not result.unsupported:
                    logger.debug(f"{spec.name} ({target}): {result.error}")

        return summary
