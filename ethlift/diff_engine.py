"""DiffEngine for comparing flattened local sources with remote ones."""

from __future__ import annotations

import difflib
from typing import List

import typer
from .models import DiffHunk, DiffLine, DiffResult

NO_NEWLINE_MARKER = "\\ No newline at end of file"

_PREFIXES = {"context": " ", "add": "+", "remove": "-"}
_COLORS = {"+": "green", "-": "red", "@": "cyan"}


def _split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, keeping line endings."""
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _unified_range(start: int, count: int) -> str:
    if count == 1:
        return f"{start}"
    if not count:
        start -= 1
    return f"{start},{count}"


class DiffEngine:
    """Computes and renders line-level unified diffs."""

    def __init__(self, context_lines: int = 3, from_label: str = "local", to_label: str = "remote"):
        """Initialize DiffEngine.

        Args:
            context_lines: Unchanged lines kept around each change.
            from_label: Header name for the local side.
            to_label: Header name for the remote side.
        """
        self.context_lines = context_lines
        self.from_label = from_label
        self.to_label = to_label

    def create_diff(self, local: str, remote: str) -> DiffResult:
        """Create a diff turning ``local`` into ``remote``.

        The result depends only on the two inputs.
        """
        a = _split_lines(local)
        b = _split_lines(remote)
        matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)

        hunks = []
        for group in matcher.get_grouped_opcodes(self.context_lines):
            i1, i2 = group[0][1], group[-1][2]
            j1, j2 = group[0][3], group[-1][4]
            lines: List[DiffLine] = []
            for tag, a1, a2, b1, b2 in group:
                if tag == "equal":
                    lines.extend(self._line("context", line) for line in a[a1:a2])
                    continue
                if tag in ("replace", "delete"):
                    lines.extend(self._line("remove", line) for line in a[a1:a2])
                if tag in ("replace", "insert"):
                    lines.extend(self._line("add", line) for line in b[b1:b2])
            hunks.append(
                DiffHunk(
                    old_start=i1 + 1,
                    old_count=i2 - i1,
                    new_start=j1 + 1,
                    new_count=j2 - j1,
                    lines=tuple(lines),
                )
            )

        return DiffResult(hunks=tuple(hunks), from_label=self.from_label, to_label=self.to_label)

    @staticmethod
    def _line(kind: str, raw: str) -> DiffLine:
        missing_newline = not raw.endswith("\n")
        return DiffLine(kind=kind, text=raw[:-1] if not missing_newline else raw, missing_newline=missing_newline)

    def render_lines(self, result: DiffResult) -> List[str]:
        """Unified diff text of ``result``, one entry per output line."""
        out = [f"--- {result.from_label}", f"+++ {result.to_label}"]
        for hunk in result.hunks:
            out.append(
                f"@@ -{_unified_range(hunk.old_start, hunk.old_count)} "
                f"+{_unified_range(hunk.new_start, hunk.new_count)} @@"
            )
            for line in hunk.lines:
                out.append(f"{_PREFIXES[line.kind]}{line.text}")
                if line.missing_newline:
                    out.append(NO_NEWLINE_MARKER)
        return out

    def format_diff(self, result: DiffResult, color: bool = False) -> str:
        """Render ``result`` as unified diff text.

        With ``color``, additions, removals and hunk headers carry ANSI
        color codes. Line content is never altered, so tabs and carriage
        returns survive as-is.
        """
        lines = self.render_lines(result)
        if not color:
            return "\n".join(lines) + "\n"

        styled = []
        for index, line in enumerate(lines):
            if index < 2:
                styled.append(typer.style(line, bold=True))
            elif line[:1] in _COLORS:
                styled.append(typer.style(line, fg=_COLORS[line[:1]]))
            else:
                styled.append(line)
        return "\n".join(styled) + "\n"

    def echo(self, result: DiffResult, color: bool = True) -> None:
        """Write a rendered diff to stdout."""
        typer.echo(self.format_diff(result, color=color), nl=False, color=color)

    def print_diff(self, local: str, remote: str, color: bool = True) -> DiffResult:
        """Diff ``local`` against ``remote`` and write it to stdout."""
        result = self.create_diff(local, remote)
        self.echo(result, color=color)
        return result
