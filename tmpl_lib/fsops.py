"""
Thin filesystem helpers used by the generator and the template store.

Each helper converts OS errors into FileSystemError so callers can report
"Failed to <action> '<name>' <kind>: <reason>" and carry on with siblings.
"""
import errno
import os
import shutil
from pathlib import Path
from typing import List

from .errors import FileSystemError


def _subject(path: Path, kind: str = "file") -> str:
    return f"'{path.name}' {kind}"


def list_directory(path: Path) -> List[Path]:
    try:
        return [path / entry for entry in os.listdir(path)]
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(path, "directory"), "open") from e


def read_text(path: Path) -> str:
    # newline="" keeps \r\n and \r exactly as stored
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError.from_os_error(e, _subject(path), "read text from") from e


def create_directories(path: Path) -> None:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(path, "directory"), "create") from e


def create_file(path: Path, exist_ok: bool = False) -> None:
    """Create an empty file; an existing file is an error unless exist_ok."""
    try:
        path.touch(exist_ok=exist_ok)
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(path), "create") from e


def write_text(path: Path, content: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(path), "write text in") from e


def copy_path(source: Path, destination: Path) -> None:
    """Copy a file or a directory tree, refusing to overwrite existing files."""
    kind = "directory" if source.is_dir() else "file"
    try:
        if destination.exists():
            raise FileExistsError(errno.EEXIST, "File exists", str(destination))
        os.makedirs(destination.parent, exist_ok=True)
        if kind == "directory":
            shutil.copytree(source, destination)
        else:
            shutil.copy2(source, destination)
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(source, kind), "copy") from e


def remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        kind = "directory"
    else:
        kind = "file"
    try:
        if kind == "directory":
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise FileSystemError.from_os_error(e, _subject(path, kind), "delete") from e
