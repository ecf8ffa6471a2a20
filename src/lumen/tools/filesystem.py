"""Filesystem tools: thin argument adapters over :class:`lumen.workspace.Workspace`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from lumen.tools.base import FilesystemTool
from lumen.workspace import EditOperation

if TYPE_CHECKING:
    from lumen.workspace import Workspace


class PathArgs(BaseModel):
    path: str = Field(description="Path relative to the workspace directory.")


class ReadMultipleFilesArgs(BaseModel):
    paths: list[str] = Field(
        description="File paths to read (relative to the workspace directory)."
    )


class WriteFileArgs(BaseModel):
    path: str = Field(description="Path of the file to write (relative to the workspace).")
    content: str = Field(description="The full content to write to the file.")


class EditOperationArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_text: str = Field(
        alias="oldText", description="Text to search for; may be whitespace-inexact."
    )
    new_text: str = Field(alias="newText", description="Text to replace it with.")


class EditFileArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(description="Path of the file to edit (relative to the workspace).")
    edits: list[EditOperationArgs] = Field(description="Edits applied in order.")
    dry_run: bool = Field(
        default=False,
        alias="dryRun",
        description="Preview changes as a diff without writing the file.",
    )


class MoveArgs(BaseModel):
    source: str = Field(description="Source path (relative to the workspace).")
    destination: str = Field(description="Destination path (relative to the workspace).")


class SearchArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(description="Directory to search from (relative to the workspace).")
    pattern: str = Field(
        min_length=1, description="Case-insensitive text matched against entry names."
    )
    exclude_patterns: list[str] = Field(
        default_factory=list,
        alias="excludePatterns",
        description="Glob patterns to exclude (matched against relative paths and names).",
    )


def _read_file(ws: Workspace, args: PathArgs) -> str:
    return ws.read_file(args.path)


def _read_multiple(ws: Workspace, args: ReadMultipleFilesArgs) -> str:
    return ws.read_many(args.paths)


def _write_file(ws: Workspace, args: WriteFileArgs) -> str:
    return ws.write_file(args.path, args.content)


def _edit_file(ws: Workspace, args: EditFileArgs) -> str:
    edits = [EditOperation(e.old_text, e.new_text) for e in args.edits]
    return ws.edit_file(args.path, edits, dry_run=args.dry_run)


def _create_directory(ws: Workspace, args: PathArgs) -> str:
    return ws.create_directory(args.path)


def _list_directory(ws: Workspace, args: PathArgs) -> str:
    return ws.list_directory(args.path)


def _directory_tree(ws: Workspace, args: PathArgs) -> str:
    return ws.directory_tree(args.path)


def _move(ws: Workspace, args: MoveArgs) -> str:
    return ws.move(args.source, args.destination)


def _search(ws: Workspace, args: SearchArgs) -> str:
    return ws.search(args.path, args.pattern, args.exclude_patterns)


def _stat(ws: Workspace, args: PathArgs) -> str:
    return ws.stat(args.path)


FILESYSTEM_TOOLS: tuple[FilesystemTool, ...] = (
    FilesystemTool(
        name="read_file_content",
        description=(
            "Read the complete contents of a file from the workspace filesystem. "
            "Use this tool to examine a single file within the workspace."
        ),
        args_model=PathArgs,
        run=_read_file,
    ),
    FilesystemTool(
        name="read_multiple_files_content",
        description=(
            "Read the contents of multiple files from the workspace filesystem. "
            "Each file's content is returned with its path; failed reads for "
            "individual files won't stop the entire operation."
        ),
        args_model=ReadMultipleFilesArgs,
        run=_read_multiple,
    ),
    FilesystemTool(
        name="write_file_content",
        description=(
            "Create a new file or completely overwrite an existing file in the "
            "workspace. Parent directories are created as needed."
        ),
        args_model=WriteFileArgs,
        run=_write_file,
    ),
    FilesystemTool(
        name="edit_file_content",
        description=(
            "Make line-based edits to a text file in the workspace. Each edit "
            "replaces an exact or whitespace-insensitive match of oldText with "
            "newText. Returns a git-style diff. Set dryRun to preview."
        ),
        args_model=EditFileArgs,
        run=_edit_file,
    ),
    FilesystemTool(
        name="create_directory",
        description=(
            "Create a directory (and any missing parents) in the workspace. "
            "Succeeds silently if it already exists."
        ),
        args_model=PathArgs,
        run=_create_directory,
    ),
    FilesystemTool(
        name="list_directory_contents",
        description=(
            "List files and directories directly inside a workspace directory, "
            "marking each entry with [FILE] or [DIR]."
        ),
        args_model=PathArgs,
        run=_list_directory,
    ),
    FilesystemTool(
        name="get_directory_tree",
        description=(
            "Get a recursive tree view of files and directories as JSON. Each entry "
            "has 'name', 'type' and, for directories, 'children'."
        ),
        args_model=PathArgs,
        run=_directory_tree,
    ),
    FilesystemTool(
        name="move_file_or_directory",
        description=(
            "Move or rename a file or directory within the workspace. Parent "
            "directories of the destination are created as needed."
        ),
        args_model=MoveArgs,
        run=_move,
    ),
    FilesystemTool(
        name="search_filesystem",
        description=(
            "Recursively search for files and directories whose names contain a "
            "pattern (case-insensitive), skipping excluded glob patterns."
        ),
        args_model=SearchArgs,
        run=_search,
    ),
    FilesystemTool(
        name="get_filesystem_info",
        description=(
            "Retrieve metadata about a file or directory: size, timestamps, type "
            "and permissions."
        ),
        args_model=PathArgs,
        run=_stat,
    ),
)
