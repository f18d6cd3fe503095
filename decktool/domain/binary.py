"""
Binary and build domain objects for decktool.

Provides the build matrix types: which binaries exist, which targets they
can be built for, and what happened when they were built. Output filenames
are load-bearing because release download matches them exactly.
"""

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class BuildTarget(Enum):
    """Build flavors for a binary."""
    NATIVE = "native"
    WASM = "wasm"    # browser-embeddable
    WASI = "wasi"    # sandboxed host

    def build_env(self) -> Dict[str, str]:
        """GOOS/GOARCH overrides for this target (empty for native)."""
        if self is BuildTarget.WASM:
            return {"GOOS": "js", "GOARCH": "wasm"}
        if self is BuildTarget.WASI:
            return {"GOOS": "wasip1", "GOARCH": "wasm"}
        return {}

    @property
    def label(self) -> str:
        return self.value.upper()

    def __str__(self) -> str:
        return self.value


ALL_TARGETS = (BuildTarget.NATIVE, BuildTarget.WASM, BuildTarget.WASI)

_GOOS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
}

_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def host_platform() -> Tuple[str, str]:
    """Return the host (os, arch) pair using Go's naming."""
    goos = _GOOS.get(sys.platform)
    if goos is None:
        # freebsd13, openbsd7, ...
        goos = sys.platform.rstrip("0123456789")
    machine = platform.machine().lower()
    goarch = _GOARCH.get(machine, machine)
    return goos, goarch


def build_filename(name: str, target: BuildTarget,
                   goos: Optional[str] = None, goarch: Optional[str] = None) -> str:
    """
    Build the output filename for a binary and target.

    Native binaries embed the host os/arch (``decksh-linux-amd64``,
    ``decksh-windows-amd64.exe``); WASM and WASI use fixed suffixes
    (``decksh-wasm.wasm``, ``decksh-wasi.wasm``).
    """
    if target is BuildTarget.WASM:
        return f"{name}-wasm.wasm"
    if target is BuildTarget.WASI:
        return f"{name}-wasi.wasm"

    if goos is None or goarch is None:
        host_os, host_arch = host_platform()
        goos = goos or host_os
        goarch = goarch or host_arch
    ext = ".exe" if goos == "windows" else ""
    return f"{name}-{goos}-{goarch}{ext}"


@dataclass(frozen=True)
class BinarySpec:
    """A tool binary decktool knows how to build."""
    name: str
    package: str  # Go import path
    repo: str     # logical name of the code repository providing it
    wasm_support: bool = False
    wasi_support: bool = False
    requires_ui: bool = False

    def supports(self, target: BuildTarget) -> bool:
        if target is BuildTarget.WASM:
            return self.wasm_support
        if target is BuildTarget.WASI:
            return self.wasi_support
        return True

    @property
    def requirement(self) -> str:
        return "UI/graphics" if self.requires_ui else "platform support"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'package': self.package,
            'repo': self.repo,
            'wasm': self.wasm_support,
            'wasi': self.wasi_support,
            'requires_ui': self.requires_ui,
        }


@dataclass
class BuildResult:
    """
    Outcome of building one (binary, target) pair.

    Exactly one of ``path`` and ``error`` is set. ``unsupported`` marks an
    error that comes from the static capability check rather than a build.
    """
    binary: str
    target: BuildTarget
    path: Optional[str] = None
    error: Optional[str] = None
    unsupported: bool = False

    def __post_init__(self):
        if bool(self.path) == bool(self.error):
            raise ValueError("BuildResult needs exactly one of path or error")
        if self.unsupported and not self.error:
            raise ValueError("unsupported BuildResult must carry an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if self.ok:
            return "success"
        return "skipped" if self.unsupported else "failed"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'binary': self.binary,
            'target': self.target.value,
            'status': self.status,
        }
        if self.path:
            result['path'] = self.path
        if self.error:
            result['error'] = self.error
        return result
