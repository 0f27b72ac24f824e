"""Decide what an eval-script result means and write it to disk."""
import os
from enum import Enum
from pathlib import Path
from typing import Any, List, NamedTuple, Optional

from . import fsops
from .errors import EvaluationError, NullOutputPath


class TargetKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"


class OutputTarget(NamedTuple):
    kind: TargetKind
    path: str

    @property
    def name(self) -> str:
        return Path(self.path).name


def resolve_output(value: Any) -> OutputTarget:
    """
    Interpret the value returned by an eval-script.

    None or "" -> NullOutputPath; "a/b/" -> directory target; anything else
    that is a string -> file target.
    """
    if value is None or value == "":
        raise NullOutputPath("No output path was produced")
    if not isinstance(value, str):
        raise EvaluationError(f"Output path must be a string, got {value!r}")
    if value.endswith("/") or value.endswith(os.sep):
        return OutputTarget(TargetKind.DIRECTORY, value)
    return OutputTarget(TargetKind.FILE, value)


def materialize(target: OutputTarget, body: str, base_dir: Optional[Path] = None, force: bool = False) -> List[str]:
    """
    Create the directory or file described by ``target``.

    Relative paths are resolved against ``base_dir`` (the current working
    directory by default). Returns warnings for the caller to report.
    """
    path = Path(base_dir or Path.cwd()) / target.path
    warnings: List[str] = []
    if target.kind is TargetKind.DIRECTORY:
        fsops.create_directories(path)
        if body:
            warnings.append(f"File '{target.name}' content is unused")
        return warnings
    fsops.create_directories(path.parent)
    fsops.create_file(path, exist_ok=force)
    fsops.write_text(path, body)
    return warnings
