"""
Release publishing and fetching service for decktool.

Downloads the latest native binaries from the project's GitHub releases and
publishes the contents of the dist directory as a new release.
Used by `ensure`, `run`, `view` and `dev-release`.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Generator, List, Optional, Tuple

from ..config import DeckConfig
from ..domain.binary import BuildTarget, build_filename
from ..exit_codes import CommandError
from ..infra.release_client import ReleaseClient

logger = logging.getLogger(__name__)


@dataclass
class DownloadSummary:
    """What the release fetch did for each native binary."""
    tag: str = ""
    release_time: Optional[datetime] = None
    downloaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass
class ReleaseInfo:
    """A release created by `publish`."""
    version: str
    prerelease: bool
    files: List[Path]
    repo: str = ""

    @property
    def url(self) -> str:
        return f"https://github.com/{self.repo}/releases/tag/{self.version}"


def needs_download(path: Path, release_time: Optional[datetime]) -> bool:
    """
    Decide whether ``path`` must be (re)downloaded.

    Without a release timestamp everything is downloaded. Otherwise a local
    file is kept when its mtime is at least the release time. This is a
    freshness heuristic, not an integrity check.
    """
    if release_time is None:
        return True
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        return True
    if release_time.tzinfo is None:
        release_time = release_time.replace(tzinfo=timezone.utc)
    local_time = datetime.fromtimestamp(mtime, tz=timezone.utc)
    return local_time < release_time


def generate_version(now: Optional[datetime] = None) -> str:
    """Timestamp-derived version, e.g. dev-20251029-143052."""
    now = now or datetime.now()
    return f"dev-{now.strftime('%Y%m%d-%H%M%S')}"


def resolve_version(version: Optional[str], prerelease: bool,
                    now: Optional[datetime] = None) -> Tuple[str, bool]:
    """Explicit version as given; a generated version is always a prerelease."""
    version = (version or "").strip()
    if not version:
        return generate_version(now), True
    return version, prerelease


def count_by_target(files: List[Path]) -> Dict[str, int]:
    counts = {"native": 0, "wasm": 0, "wasi": 0}
    for f in files:
        if f.name.endswith("-wasm.wasm"):
            counts["wasm"] += 1
        elif f.name.endswith("-wasi.wasm"):
            counts["wasi"] += 1
        else:
            counts["native"] += 1
    return counts


def release_notes(version: str, prerelease: bool, repo: str, files: List[Path],
                  now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    release_type = "Development Release" if prerelease else "Release"
    counts = count_by_target(files)
    sample = next((f.name for f in files if not f.name.endswith(".wasm")), "decksh")
    return (
        f"## {release_type}\n\n"
        f"Automated build created on {now.strftime('%Y-%m-%d %H:%M:%S')}\n\n"
        f"### Binaries\n\n"
        f"Includes {len(files)} binaries: {counts['native']} native, "
        f"{counts['wasm']} WASM, {counts['wasi']} WASI\n\n"
        f"### Quick Start\n\n"
        f"Download and run a binary:\n"
        f"```bash\n"
        f"wget https://github.com/{repo}/releases/download/{version}/{sample}\n"
        f"chmod +x {sample}\n"
        f"./{sample} --help\n"
        f"```\n\n"
        f"For WASM binaries, use with a WebAssembly runtime like wasmtime or wasmer.\n"
    )


class ReleaseService:
    """
    Service for fetching and publishing release binaries.

    Example:
        service = ReleaseService(config)
        for progress in service.download_latest():
            print(progress)

        summary = service.last_download
    """

    def __init__(self, config: DeckConfig, client: Optional[ReleaseClient] = None):
        self.config = config
        self.client = client or ReleaseClient(config.gh_cmd)
        self.last_download: Optional[DownloadSummary] = None
        self.last_release: Optional[ReleaseInfo] = None

    def download_latest(self) -> Generator[str, None, DownloadSummary]:
        """
        Download native binaries for this host from the latest release.

        Yields:
            Progress messages

        Returns:
            DownloadSummary
        """
        self.client.require()
        summary = DownloadSummary()
        self.last_download = summary

        yield "Checking for latest release..."
        summary.tag = self.client.latest_release_tag()
        yield f"Latest release: {summary.tag}"

        summary.release_time = self.client.release_created_at(summary.tag)
        if summary.release_time is None:
            yield "No release timestamp available, downloading all binaries..."

        dist = self.config.dist_dir
        dist.mkdir(parents=True, exist_ok=True)

        for spec in self.config.toolchain:
            filename = build_filename(spec.name, BuildTarget.NATIVE)
            dest = dist / filename

            if not needs_download(dest, summary.release_time):
                yield f"✓ {filename} is up to date (local is newer)"
                summary.skipped.append(filename)
                continue
            if dest.exists():
                yield f"⟳ {filename} needs update (release is newer)"

            yield f"Downloading {filename}..."
            self.client.download(summary.tag, filename, dist)
            os.chmod(dest, 0o755)
            summary.downloaded.append(filename)
            yield f"✓ Downloaded {filename}"

        if summary.downloaded:
            yield f"✓ Downloaded {len(summary.downloaded)} binaries ({len(summary.skipped)} up to date)"
        elif summary.skipped:
            yield "All binaries are up to date"

        return summary

    def release_files(self) -> List[Path]:
        """Every regular file in the dist directory, sorted by name."""
        dist = self.config.dist_dir
        if not dist.is_dir():
            return []
        return sorted(p for p in dist.iterdir() if p.is_file())

    def ensure_authenticated(self) -> Generator[str, None, None]:
        if not self.client.is_authenticated():
            yield "Please authenticate with GitHub:"
            self.client.login()

    def publish(self, version: Optional[str] = None,
                prerelease: bool = False) -> Generator[str, None, ReleaseInfo]:
        """
        Create a release holding every file in the dist directory.

        Yields:
            Progress messages

        Returns:
            ReleaseInfo for the created release
        """
        self.client.require()
        yield from self.ensure_authenticated()

        files = self.release_files()
        if not files:
            raise CommandError(f"no binaries found in {self.config.dist_dir} (run dev-build first)")

        version, prerelease = resolve_version(version, prerelease)
        repo = self.client.repo_name()
        info = ReleaseInfo(version=version, prerelease=prerelease, files=files, repo=repo)
        self.last_release = info

        release_type = "Development Release" if prerelease else "Release"
        yield f"Creating release {version}..."
        self.client.create_release(
            version,
            files,
            title=f"{release_type} {version}",
            notes=release_notes(version, prerelease, repo, files),
            prerelease=prerelease,
        )
        yield f"✓ Release {version} created with {len(files)} binaries"
        yield f"View at: {info.url}"
        return info
