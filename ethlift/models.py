"""Core data models shared by the remapping, flatten, and diff layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, NamedTuple, Optional, Tuple


class ParsedLegacyRemapping(NamedTuple):
    import_alias: str
    library_name: str
    library_path: str


@dataclass(frozen=True)
class RemappingEntry:
    """A single ``alias -> path`` substitution rule."""
    alias: str
    target_path: str
    context: Optional[str] = None

    def __post_init__(self):
        if not self.alias:
            raise ValueError("Remapping alias must not be empty")

    def __str__(self) -> str:
        prefix = f"{self.context}:" if self.context else ""
        return f"{prefix}{self.alias}={self.target_path}"


@dataclass(frozen=True)
class ProjectConfig:
    """Everything the flattener needs; built once per run."""
    sources: Path
    root: Path
    remappings: Tuple[RemappingEntry, ...] = ()


@dataclass(frozen=True)
class ContractIdentity:
    chain_id: int
    address: str


@dataclass(frozen=True)
class DiffLine:
    kind: Literal["context", "add", "remove"]
    text: str
    missing_newline: bool = False


@dataclass(frozen=True)
class DiffHunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[DiffLine, ...] = ()


@dataclass(frozen=True)
class DiffResult:
    """Ordered hunks between two texts. Rendering artifact only."""
    hunks: Tuple[DiffHunk, ...] = field(default_factory=tuple)
    from_label: str = "local"
    to_label: str = "remote"

    @property
    def has_changes(self) -> bool:
        return bool(self.hunks)

    @property
    def additions(self) -> int:
        """Number of added lines across all hunks."""
        return sum(1 for h in self.hunks for line in h.lines if line.kind == "add")

    @property
    def removals(self) -> int:
        """Number of removed lines across all hunks."""
        return sum(1 for h in self.hunks for line in h.lines if line.kind == "remove")
