"""Solidity project layout: import resolution and source flattening.

:class:`ProjectPaths` knows where a project's sources live and how its
import aliases map onto the filesystem. ``flatten`` walks the import graph
from an entry file and inlines every imported file in place of its import
statement, each file exactly once.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Tuple

from .models import ProjectConfig, RemappingEntry

logger = logging.getLogger(__name__)

IMPORT_RE = re.compile(
    r"""
    \bimport\s+
    (?:
        (?P<q1>["'])(?P<direct>.+?)(?P=q1)(?:\s+as\s+\w+)?
      |
        (?:\*\s*as\s+\w+|\{[^}]*\}|\w+(?:\s+as\s+\w+)?)
        \s+from\s+
        (?P<q2>["'])(?P<aliased>.+?)(?P=q2)
    )
    \s*;
    """,
    re.VERBOSE,
)
LEXICAL_RE = re.compile(
    r"""'(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|(?P<comment>//[^\n]*|/\*.*?\*/)""",
    re.DOTALL,
)
SPDX_RE = re.compile(r"^[ \t]*//[ \t]*SPDX-License-Identifier:[^\n]*\n?", re.MULTILINE)
PRAGMA_RE = re.compile(r"^[ \t]*pragma\s+solidity\b[^;]*;[ \t]*\n?", re.MULTILINE)
BLANK_RUN_RE = re.compile(r"\n{3,}")


class ProjectPathsError(Exception):
    """Base error for project layout and flatten failures."""


class ImportResolutionError(ProjectPathsError):
    def __init__(self, import_path: str, importer: Path):
        self.import_path = import_path
        self.importer = importer
        super().__init__(f"Unable to resolve import '{import_path}' from {importer}")


def _comment_spans(content: str) -> List[Tuple[int, int]]:
    # string literals are matched too so that "//" or "/*" inside them is skipped
    return [m.span("comment") for m in LEXICAL_RE.finditer(content) if m.group("comment")]


def _inside(pos: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


def find_imports(content: str) -> List[Tuple[int, int, str]]:
    """Return ``(start, end, import_path)`` for each live import statement."""
    comments = _comment_spans(content)
    found = []
    for match in IMPORT_RE.finditer(content):
        if _inside(match.start(), comments):
            continue
        found.append((match.start(), match.end(), match.group("direct") or match.group("aliased")))
    return found


@dataclass(frozen=True)
class ProjectPaths:
    """Filesystem layout of a Solidity project."""
    root: Path
    sources: Path
    remappings: Tuple[RemappingEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_project_config(cls, config: ProjectConfig) -> "ProjectPaths":
        return cls(root=config.root, sources=config.sources, remappings=tuple(config.remappings))

    def _source_id(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def apply_remappings(self, import_path: str, importer: Path) -> Optional[str]:
        """Rewrite ``import_path`` with the best matching remapping.

        The longest context wins, then the longest alias; among equal
        candidates the first declared rule is used. Returns ``None`` when
        no rule applies.
        """
        importer_id = self._source_id(importer)
        best: Optional[Tuple[Tuple[int, int], RemappingEntry]] = None
        for entry in self.remappings:
            if entry.context and not importer_id.startswith(entry.context):
                continue
            if not import_path.startswith(entry.alias):
                continue
            rank = (len(entry.context or ""), len(entry.alias))
            if best is None or rank > best[0]:
                best = (rank, entry)

        if best is None:
            return None
        entry = best[1]
        return entry.target_path + import_path[len(entry.alias):]

    def resolve_import(self, import_path: str, importer: Path) -> Path:
        """Map an import string found in ``importer`` to an existing file."""
        if import_path.startswith("./") or import_path.startswith("../"):
            candidates = [importer.parent / import_path]
        else:
            remapped = self.apply_remappings(import_path, importer)
            if remapped is not None:
                remapped_path = Path(remapped)
                candidates = [remapped_path if remapped_path.is_absolute() else self.root / remapped_path]
            else:
                candidates = [self.root / import_path, self.sources / import_path]

        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        raise ImportResolutionError(import_path, importer)

    def flatten(self, target: Path) -> str:
        """Inline all imports reachable from ``target`` into one source.

        Raises:
            ProjectPathsError: If an import cannot be resolved.
            OSError: If a source file cannot be read.
        """
        entry = target if target.is_absolute() else self.root / target
        if not entry.is_file():
            raise ProjectPathsError(f"File not found: {entry}")

        imported: Set[Path] = set()
        flattened = self._flatten_node(entry.resolve(), imported, is_child=False)
        logger.debug("Flattened %s from %d file(s)", entry, len(imported))
        return BLANK_RUN_RE.sub("\n\n", flattened).strip() + "\n"

    def _flatten_node(self, path: Path, imported: Set[Path], is_child: bool) -> str:
        if path in imported:
            return ""
        imported.add(path)
        content = path.read_text(encoding="utf-8")

        edits: List[Tuple[int, int, str]] = []
        for start, end, import_path in find_imports(content):
            resolved = self.resolve_import(import_path, path)
            logger.debug("%s imports %s -> %s", self._source_id(path), import_path, resolved)
            edits.append((start, end, self._flatten_node(resolved, imported, is_child=True).strip()))

        if is_child:
            comments = _comment_spans(content)
            edits.extend((m.start(), m.end(), "") for m in SPDX_RE.finditer(content))
            edits.extend(
                (m.start(), m.end(), "")
                for m in PRAGMA_RE.finditer(content)
                if not _inside(m.start(), comments)
            )

        pieces = []
        cursor = 0
        for start, end, replacement in sorted(edits):
            if start < cursor:
                continue
            pieces.append(content[cursor:start])
            pieces.append(replacement)
            cursor = end
        pieces.append(content[cursor:])
        return "".join(pieces)
