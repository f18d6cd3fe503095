"""
Repository domain object for decktool.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List


@dataclass
class RepositorySpec:
    """
    A git repository decktool clones into its cache.

    Data repositories hold example content (scripts, assets, fonts);
    code repositories hold tool sources that join the build workspace.

    Attributes:
        name: Logical name, also the prefix of its env overrides (DUBOIS_DIR, ...)
        url: Remote URL
        directory: Local checkout directory (absolute once configuration is resolved)
        branch: Branch to track
        depth: Clone/fetch depth; 0 or less means full history
        filter: Extra clone/fetch arguments such as --filter=blob:none
        sparse: Sparse-checkout paths (empty = full checkout)
        is_data: True for example/data repositories
    """
    name: str
    url: str
    directory: str
    branch: str = "master"
    depth: int = 1
    filter: List[str] = field(default_factory=list)
    sparse: List[str] = field(default_factory=list)
    is_data: bool = False

    @property
    def path(self) -> Path:
        return Path(self.directory)

    @property
    def dir_name(self) -> str:
        return self.path.name

    @property
    def kind(self) -> str:
        return "data" if self.is_data else "code"

    def is_cloned(self) -> bool:
        """Check whether the local directory holds git metadata."""
        return (self.path / ".git").exists()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'name': self.name,
            'url': self.url,
            'dir': self.directory,
            'branch': self.branch,
            'depth': self.depth,
            'filter': list(self.filter),
            'sparse': list(self.sparse),
            'kind': self.kind,
        }
