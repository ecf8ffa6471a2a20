"""Workspace sandbox and filesystem operations."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from lumen.errors import InvalidParamsError, PathOutsideWorkspaceError
from lumen.workspace import (
    EditOperation,
    Workspace,
    apply_edit,
    fence_diff,
    unified_diff,
)

pytestmark = pytest.mark.unit


def _write(ws: Workspace, rel: str, content: str) -> Path:
    target = ws.root / rel
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


# =============================================================================
# Sandbox
# =============================================================================


@pytest.mark.parametrize("requested", ["../escape.txt", "a/../../escape.txt", "/etc/passwd"])
def test_resolve_rejects_paths_outside_root(workspace: Workspace, requested: str) -> None:
    with pytest.raises(PathOutsideWorkspaceError, match="Path traversal"):
        workspace.resolve(requested)


def test_resolve_accepts_nested_and_absolute_inside(workspace: Workspace) -> None:
    assert workspace.resolve("a/b.txt") == workspace.root / "a" / "b.txt"
    assert workspace.resolve(str(workspace.root / "c.txt")) == workspace.root / "c.txt"


def test_resolve_rejects_symlink_escape(workspace: Workspace, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (workspace.root / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(PathOutsideWorkspaceError):
        workspace.resolve("link/secret.txt")


def test_resolve_rejects_sibling_with_common_prefix(workspace: Workspace) -> None:
    sibling = workspace.root.parent / (workspace.root.name + "-other")
    sibling.mkdir()

    with pytest.raises(PathOutsideWorkspaceError):
        workspace.resolve(f"../{sibling.name}/file.txt")


def test_resolve_rejects_empty_path(workspace: Workspace) -> None:
    with pytest.raises(InvalidParamsError):
        workspace.resolve("")


# =============================================================================
# Read / write
# =============================================================================


def test_write_then_read(workspace: Workspace) -> None:
    assert workspace.write_file("notes/today.md", "hello") == "Successfully wrote to notes/today.md"
    assert workspace.read_file("notes/today.md") == "hello"


def test_read_missing_file_raises_file_not_found(workspace: Workspace) -> None:
    with pytest.raises(FileNotFoundError):
        workspace.read_file("missing.txt")


def test_read_many_reports_failures_inline(workspace: Workspace) -> None:
    _write(workspace, "a.txt", "alpha")

    result = workspace.read_many(["a.txt", "missing.txt", "../x"])
    sections = result.split("\n---\n")

    assert sections[0] == "a.txt:\nalpha\n"
    assert sections[1].startswith("missing.txt: Error - ")
    assert sections[2].startswith("../x: Error - Path traversal")


# =============================================================================
# Edits
# =============================================================================


def test_apply_edit_replaces_first_exact_occurrence() -> None:
    assert apply_edit("a b a", EditOperation("a", "c")) == "c b a"


def test_apply_edit_whitespace_insensitive_reindents() -> None:
    content = "def f():\n    if x:\n        return 1\n"
    edit = EditOperation("if x:\n    return 1", "if y:\n    return 2")

    assert apply_edit(content, edit) == "def f():\n    if y:\n        return 2\n"


def test_apply_edit_without_match_fails() -> None:
    with pytest.raises(InvalidParamsError, match="Could not find"):
        apply_edit("content", EditOperation("absent", "x"))


def test_edit_file_writes_and_returns_fenced_diff(workspace: Workspace) -> None:
    target = _write(workspace, "src/app.py", "x = 1\ny = 2\n")

    result = workspace.edit_file("src/app.py", [EditOperation("y = 2", "y = 3")])

    assert target.read_text() == "x = 1\ny = 3\n"
    assert result.startswith("```diff\n")
    assert result.endswith("\n```")
    assert "--- src/app.py\toriginal" in result
    assert "-y = 2" in result
    assert "+y = 3" in result


def test_edit_file_dry_run_leaves_file_untouched(workspace: Workspace) -> None:
    target = _write(workspace, "a.txt", "one\n")

    result = workspace.edit_file("a.txt", [EditOperation("one", "two")], dry_run=True)

    assert target.read_text() == "one\n"
    assert "+two" in result


def test_edit_file_normalizes_crlf(workspace: Workspace) -> None:
    target = workspace.root / "win.txt"
    target.write_bytes(b"first\r\nsecond\r\n")

    workspace.edit_file("win.txt", [EditOperation("second", "2nd")])

    assert target.read_bytes() == b"first\n2nd\n"


def test_edit_file_requires_edits(workspace: Workspace) -> None:
    _write(workspace, "a.txt", "x")

    with pytest.raises(InvalidParamsError):
        workspace.edit_file("a.txt", [])


def test_fence_grows_past_backticks_in_diff() -> None:
    diff = unified_diff("a\n", "```\n", "f.md")
    fenced = fence_diff(diff)

    assert fenced.startswith("````diff\n")
    assert fenced.endswith("\n````")


# =============================================================================
# Directories
# =============================================================================


def test_list_directory_marks_entries(workspace: Workspace) -> None:
    _write(workspace, "b.txt", "")
    (workspace.root / "a_dir").mkdir()

    assert workspace.list_directory(".") == "[DIR] a_dir\n[FILE] b.txt"


def test_list_empty_directory(workspace: Workspace) -> None:
    assert workspace.list_directory(".") == "(Directory is empty)"


def test_create_directory_is_idempotent(workspace: Workspace) -> None:
    workspace.create_directory("x/y")
    workspace.create_directory("x/y")

    assert (workspace.root / "x" / "y").is_dir()


def test_directory_tree_lists_directories_first(workspace: Workspace) -> None:
    _write(workspace, "z.txt", "")
    _write(workspace, "pkg/mod.py", "")
    (workspace.root / "empty").mkdir()

    tree = json.loads(workspace.directory_tree("."))

    assert tree == [
        {"name": "empty", "type": "directory", "children": []},
        {
            "name": "pkg",
            "type": "directory",
            "children": [{"name": "mod.py", "type": "file"}],
        },
        {"name": "z.txt", "type": "file"},
    ]


def test_directory_tree_does_not_follow_symlinked_dirs(
    workspace: Workspace, tmp_path: Path
) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("s")
    (workspace.root / "link").symlink_to(outside, target_is_directory=True)

    tree = json.loads(workspace.directory_tree("."))

    assert tree == [{"name": "link", "type": "directory", "children": []}]


def test_move_creates_destination_parents(workspace: Workspace) -> None:
    _write(workspace, "a.txt", "content")

    assert workspace.move("a.txt", "archive/b.txt") == "Successfully moved a.txt to archive/b.txt"
    assert (workspace.root / "archive" / "b.txt").read_text() == "content"
    assert not (workspace.root / "a.txt").exists()


def test_move_rejects_identical_paths(workspace: Workspace) -> None:
    with pytest.raises(InvalidParamsError, match="cannot be the same"):
        workspace.move("a.txt", "a.txt")


def test_move_rejects_escape(workspace: Workspace) -> None:
    _write(workspace, "a.txt", "content")

    with pytest.raises(PathOutsideWorkspaceError):
        workspace.move("a.txt", "../stolen.txt")


# =============================================================================
# Search / info
# =============================================================================


def test_search_matches_names_case_insensitively(workspace: Workspace) -> None:
    _write(workspace, "src/Config.py", "")
    _write(workspace, "docs/config.md", "")
    _write(workspace, "README.md", "")

    assert workspace.search(".", "CONFIG") == "docs/config.md\nsrc/Config.py"


def test_search_honors_exclude_patterns(workspace: Workspace) -> None:
    _write(workspace, "src/config.py", "")
    _write(workspace, "node_modules/config.js", "")

    result = workspace.search(".", "config", exclude_patterns=["node_modules"])

    assert result == "src/config.py"


@pytest.mark.parametrize(
    "pattern", ["**/node_modules/**", "node_modules", "node_modules/", "**/node_modules"]
)
def test_search_excludes_directories_at_any_depth(
    workspace: Workspace, pattern: str
) -> None:
    _write(workspace, "src/index.js", "")
    _write(workspace, "node_modules/pkg/index.js", "")
    _write(workspace, "lib/node_modules/x/index.js", "")

    assert workspace.search(".", "index", exclude_patterns=[pattern]) == "src/index.js"


def test_search_excludes_file_globs_at_any_depth(workspace: Workspace) -> None:
    _write(workspace, "debug.log", "")
    _write(workspace, "logs/debug.log", "")
    _write(workspace, "debug.py", "")

    assert workspace.search(".", "debug", exclude_patterns=["*.log"]) == "debug.py"


def test_search_without_matches(workspace: Workspace) -> None:
    assert workspace.search(".", "nothing") == "No matches found"


def test_stat_reports_file_metadata(workspace: Workspace) -> None:
    target = _write(workspace, "data.bin", "12345")
    os.chmod(target, 0o640)

    info = workspace.stat("data.bin").splitlines()

    assert info[0] == "Path: data.bin"
    assert info[1] == "Type: File"
    assert info[2] == "Size: 5 bytes"
    assert info[3].startswith("Created: ")
    assert info[-1] == "Permissions: 640"


def test_stat_reports_directories(workspace: Workspace) -> None:
    (workspace.root / "d").mkdir()
    assert "Type: Directory" in workspace.stat("d")
