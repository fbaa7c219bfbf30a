"""Tests for diff computation and rendering."""

import pytest

from ethlift.diff_engine import DiffEngine


@pytest.fixture
def engine() -> DiffEngine:
    return DiffEngine()


def test_identical_inputs_have_no_hunks(engine: DiffEngine):
    result = engine.create_diff("a\nb\n", "a\nb\n")

    assert result.hunks == ()
    assert not result.has_changes
    assert engine.format_diff(result) == "--- local\n+++ remote\n"


def test_single_line_change(engine: DiffEngine):
    result = engine.create_diff("a\n", "b\n")

    assert len(result.hunks) == 1
    kinds = [line.kind for line in result.hunks[0].lines]
    assert kinds == ["remove", "add"]
    assert result.additions == 1
    assert result.removals == 1
    assert engine.format_diff(result) == "--- local\n+++ remote\n@@ -1 +1 @@\n-a\n+b\n"


def test_context_lines(engine: DiffEngine):
    local = "".join(f"line{i}\n" for i in range(1, 11))
    remote = local.replace("line5\n", "line five\n")

    result = engine.create_diff(local, remote)

    assert len(result.hunks) == 1
    hunk = result.hunks[0]
    assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (2, 7, 2, 7)
    assert engine.format_diff(result).splitlines()[2] == "@@ -2,7 +2,7 @@"


def test_distant_changes_split_into_hunks(engine: DiffEngine):
    local = "".join(f"line{i}\n" for i in range(1, 31))
    remote = local.replace("line2\n", "two\n").replace("line28\n", "twenty-eight\n")

    result = engine.create_diff(local, remote)

    assert len(result.hunks) == 2


def test_pure_insertion_header(engine: DiffEngine):
    result = engine.create_diff("", "a\n")

    assert engine.format_diff(result) == "--- local\n+++ remote\n@@ -0,0 +1 @@\n+a\n"


def test_missing_trailing_newline(engine: DiffEngine):
    result = engine.create_diff("a\nb", "a\nb\n")

    rendered = engine.format_diff(result)

    assert "-b\n\\ No newline at end of file\n+b\n" in rendered


def test_deterministic_output(engine: DiffEngine):
    local = "contract A {\n    uint x;\n}\n" * 5
    remote = local.replace("uint x;", "uint256 x;", 2)

    first = engine.format_diff(engine.create_diff(local, remote))
    second = engine.format_diff(engine.create_diff(local, remote))

    assert first == second
    assert engine.create_diff(local, remote) == engine.create_diff(local, remote)


def test_color_rendering(engine: DiffEngine):
    result = engine.create_diff("a\n", "b\n")

    colored = engine.format_diff(result, color=True)

    assert "\x1b[" in colored
    assert "\x1b[31m-a" in colored
    assert "\x1b[32m+b" in colored
    plain = engine.format_diff(result, color=False)
    assert "\x1b[" not in plain


def test_custom_labels():
    engine = DiffEngine(from_label="flattened", to_label="etherscan")

    rendered = engine.format_diff(engine.create_diff("a\n", "a\n"))

    assert rendered == "--- flattened\n+++ etherscan\n"


def test_print_diff_writes_stdout(engine: DiffEngine, capsys):
    result = engine.print_diff("a\n", "b\n", color=False)

    captured = capsys.readouterr()
    assert captured.out == "--- local\n+++ remote\n@@ -1 +1 @@\n-a\n+b\n"
    assert captured.err == ""
    assert result.has_changes


@pytest.mark.parametrize(
    "local, remote, removed, added",
    [
        ("\tuint x;\n", "    uint x;\n", "-\tuint x;", "+    uint x;"),
        ("a\n", "a\r\n", "-a", "+a\r"),
    ],
)
def test_color_keeps_line_content(engine: DiffEngine, local, remote, removed, added):
    colored = engine.format_diff(engine.create_diff(local, remote), color=True)

    assert f"\x1b[31m{removed}\x1b[0m\n" in colored
    assert f"\x1b[32m{added}\x1b[0m\n" in colored
    plain = engine.format_diff(engine.create_diff(local, remote))
    assert plain.splitlines(keepends=True)[3:] == [f"{removed}\n", f"{added}\n"]
