"""Workspace-scoped filesystem operations backing the filesystem tools.

Every public method takes paths relative to the workspace root (absolute
paths are accepted when they resolve inside it) and returns the text handed
back to the client.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import difflib
import json
import logging
import os
from pathlib import Path
import re
import stat as stat_mod
from typing import TYPE_CHECKING, Any

import pathspec

from lumen.errors import InvalidParamsError, PathOutsideWorkspaceError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_LEADING_WS_RE = re.compile(r"^\s*")


@dataclass(frozen=True)
class EditOperation:
    """Replace ``old_text`` with ``new_text``."""

    old_text: str
    new_text: str


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def _leading_ws(line: str) -> str:
    m = _LEADING_WS_RE.match(line)
    return m.group(0) if m else ""


def _reindent(new_text: str, anchor_line: str) -> list[str]:
    """Re-indent *new_text* so its first line sits at the matched block's indent.

    Later lines keep their indentation relative to the first one.
    """
    anchor_indent = _leading_ws(anchor_line)
    new_lines = new_text.split("\n")
    base = len(_leading_ws(new_lines[0]))
    result: list[str] = []
    for line in new_lines:
        if not line.strip():
            result.append("")
            continue
        relative = max(0, len(_leading_ws(line)) - base)
        result.append(anchor_indent + " " * relative + line.lstrip())
    return result


def apply_edit(content: str, edit: EditOperation) -> str:
    """Apply one edit to *content*.

    Exact first-occurrence replacement wins. Otherwise the old text is matched
    line by line ignoring surrounding whitespace, and the replacement is
    re-indented to the matched block.
    """
    old = normalize_line_endings(edit.old_text)
    new = normalize_line_endings(edit.new_text)

    if old in content:
        return content.replace(old, new, 1)

    old_lines = old.split("\n")
    content_lines = content.split("\n")
    for i in range(len(content_lines) - len(old_lines) + 1):
        window = content_lines[i : i + len(old_lines)]
        if all(o.strip() == w.strip() for o, w in zip(old_lines, window)):
            new_lines = _reindent(new, content_lines[i])
            content_lines[i : i + len(old_lines)] = new_lines
            return "\n".join(content_lines)

    raise InvalidParamsError(
        f"Could not find exact or whitespace-insensitive match for edit:\n{edit.old_text}"
    )


def unified_diff(original: str, modified: str, filepath: str) -> str:
    """Unified diff between two texts, labelled with *filepath*."""
    lines = difflib.unified_diff(
        normalize_line_endings(original).splitlines(keepends=True),
        normalize_line_endings(modified).splitlines(keepends=True),
        fromfile=filepath,
        tofile=filepath,
        fromfiledate="original",
        tofiledate="modified",
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in lines)


def fence_diff(diff: str) -> str:
    """Wrap *diff* in a ```diff fence longer than any backtick run inside it."""
    ticks = 3
    while "`" * ticks in diff:
        ticks += 1
    fence = "`" * ticks
    return f"{fence}diff\n{diff}\n{fence}"


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class Workspace:
    """Filesystem sandbox rooted at a directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def resolve(self, requested: str) -> Path:
        """Resolve *requested* against the root; reject escapes.

        Symlinks are resolved before the containment check.
        """
        if not requested:
            raise InvalidParamsError("path must not be empty")
        candidate = (self.root / requested).resolve()
        if not candidate.is_relative_to(self.root):
            raise PathOutsideWorkspaceError(
                f"Path traversal attempt detected: {requested}",
                hint=f"Paths must stay inside {self.root}",
            )
        return candidate

    def relative(self, path: Path) -> str:
        try:
            rel = path.relative_to(self.root)
        except ValueError:
            return str(path)
        return rel.as_posix() or "."

    # -- read / write -----------------------------------------------------

    def read_file(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def read_many(self, paths: Sequence[str]) -> str:
        """Read several files; per-file failures are reported inline."""
        results: list[str] = []
        for requested in paths:
            try:
                target = self.resolve(requested)
                content = target.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError, InvalidParamsError) as e:
                results.append(f"{requested}: Error - {e}")
                continue
            results.append(f"{self.relative(target)}:\n{content}\n")
        return "\n---\n".join(results)

    def write_file(self, path: str, content: str) -> str:
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return f"Successfully wrote to {path}"

    def edit_file(
        self, path: str, edits: Sequence[EditOperation], *, dry_run: bool = False
    ) -> str:
        """Apply *edits* in order and return the fenced unified diff."""
        if not edits:
            raise InvalidParamsError("'edits' must contain at least one edit")
        target = self.resolve(path)
        original = normalize_line_endings(target.read_text(encoding="utf-8"))
        modified = original
        for edit in edits:
            modified = apply_edit(modified, edit)

        diff = unified_diff(original, modified, self.relative(target))
        if not dry_run:
            target.write_text(modified, encoding="utf-8")
        return fence_diff(diff)

    # -- directories --------------------------------------------------------

    def create_directory(self, path: str) -> str:
        self.resolve(path).mkdir(parents=True, exist_ok=True)
        return f"Successfully created directory {path}"

    def list_directory(self, path: str) -> str:
        target = self.resolve(path)
        lines = sorted(
            f"{'[DIR]' if entry.is_dir() else '[FILE]'} {entry.name}"
            for entry in target.iterdir()
        )
        return "\n".join(lines) if lines else "(Directory is empty)"

    def _tree(self, directory: Path) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for child in directory.iterdir():
            if not child.is_dir():
                entries.append({"name": child.name, "type": "file"})
                continue
            node: dict[str, Any] = {"name": child.name, "type": "directory"}
            try:
                real = child.resolve()
                # Symlinked directories pointing outside the root stay leaves.
                if real.is_relative_to(self.root) and not child.is_symlink():
                    node["children"] = self._tree(child)
                else:
                    node["children"] = []
            except OSError as e:
                logger.warning("Skipping tree build in %s: %s", child, e)
                node["children"] = []
            entries.append(node)
        entries.sort(key=lambda e: (e["type"] != "directory", e["name"]))
        return entries

    def directory_tree(self, path: str) -> str:
        """JSON tree: directories first, then files, alphabetically."""
        return json.dumps(self._tree(self.resolve(path)), indent=2)

    def move(self, source: str, destination: str) -> str:
        if source == destination:
            raise InvalidParamsError("Source and destination paths cannot be the same")
        src = self.resolve(source)
        dst = self.resolve(destination)
        dst.parent.mkdir(parents=True, exist_ok=True)
        src.rename(dst)
        return f"Successfully moved {source} to {destination}"

    # -- search / info ------------------------------------------------------

    def search(
        self, path: str, pattern: str, exclude_patterns: Sequence[str] = ()
    ) -> str:
        """Find entries whose name contains *pattern* (case-insensitive).

        *exclude_patterns* use gitignore-style globs matched against the path
        relative to *path*: a bare name matches at any depth and `**` spans
        directories.
        """
        start = self.resolve(path)
        excluded = pathspec.PathSpec.from_lines("gitwildmatch", exclude_patterns)
        needle = pattern.lower()
        results: list[str] = []
        stack = [start]
        while stack:
            current = stack.pop()
            try:
                entries = sorted(os.scandir(current), key=lambda e: e.name)
            except OSError as e:
                logger.warning("Skipping search in %s: %s", current, e)
                continue
            for entry in entries:
                full = Path(entry.path)
                is_dir = entry.is_dir(follow_symlinks=False)
                rel = full.relative_to(start).as_posix()
                if excluded.match_file(rel + "/" if is_dir else rel):
                    continue
                if needle in entry.name.lower():
                    results.append(self.relative(full))
                if is_dir:
                    stack.append(full)
        return "\n".join(sorted(results)) if results else "No matches found"

    def stat(self, path: str) -> str:
        target = self.resolve(path)
        st = target.stat()
        created = getattr(st, "st_birthtime", st.st_ctime)
        kind = "Directory" if stat_mod.S_ISDIR(st.st_mode) else "File"
        return (
            f"Path: {path}\n"
            f"Type: {kind}\n"
            f"Size: {st.st_size} bytes\n"
            f"Created: {_iso(created)}\n"
            f"Modified: {_iso(st.st_mtime)}\n"
            f"Accessed: {_iso(st.st_atime)}\n"
            f"Permissions: {oct(st.st_mode)[-3:]}"
        )
