"""
Example reference domain object for decktool.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExampleRef:
    """An example named by its source repository and directory name."""
    source: str
    name: str

    def __str__(self) -> str:
        return f"{self.source}/{self.name}"
