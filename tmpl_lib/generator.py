"""
Instantiate a stored template into concrete files and directories.

The template tree is walked in name order. Every file goes through the same
steps: classify its directive lines, resolve the variables it declares, run
its eval-script to get the output path, render the body and write the result.
One RunContext is shared by the whole walk, so a variable asked for in one
file is reused by every later file.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional

from . import fsops
from .console import print_error, print_success, print_warning
from .directives import classify, parse_declarations
from .environment import RunContext
from .errors import EvaluationError, FileSystemError, NullOutputPath
from .evaluator import render_body, run_script
from .output import TargetKind, materialize, resolve_output
from .prompter import Prompter
from .variables import resolve_declarations


class Outcome(Enum):
    CREATED_FILE = "created file"
    CREATED_DIRECTORY = "created directory"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileResult:
    source: Path
    outcome: Outcome
    target: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED


@dataclass
class RunReport:
    context: RunContext
    results: List[FileResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    def by_outcome(self, outcome: Outcome) -> List[FileResult]:
        return [r for r in self.results if r.outcome is outcome]


def _process_file(
    path: Path,
    context: RunContext,
    prompter: Prompter,
    base_dir: Optional[Path],
    force: bool,
) -> FileResult:
    name = path.name
    try:
        directives = classify(fsops.read_text(path))
        resolve_declarations(parse_declarations(directives.declarations), context, prompter, source=name)
        target = resolve_output(run_script(directives.script, context))
        rendered = render_body(directives.body, context)
    except NullOutputPath:
        print_warning(f"No output path for '{name}' file, skipping it")
        return FileResult(path, Outcome.SKIPPED, reason="no output path")
    except FileSystemError as e:
        print_error(str(e))
        return FileResult(path, Outcome.FAILED, reason=e.reason)
    except EvaluationError as e:
        print_error(f"Failed to evaluate '{name}' file: {e}")
        return FileResult(path, Outcome.FAILED, reason=str(e))

    kind = "directory" if target.kind is TargetKind.DIRECTORY else "file"
    try:
        warnings = materialize(target, rendered, base_dir=base_dir, force=force)
    except FileSystemError as e:
        print_error(f"Something went wrong while creating '{target.name}' {kind}! ({e.reason})")
        return FileResult(path, Outcome.FAILED, target=target.path, reason=e.reason)

    if target.kind is TargetKind.DIRECTORY:
        print_success(f"Directory '{target.name}' successfully created")
        outcome = Outcome.CREATED_DIRECTORY
    else:
        print_success(f"File '{target.name}' successfully created")
        outcome = Outcome.CREATED_FILE
    for warning in warnings:
        print_warning(warning)
    return FileResult(path, outcome, target=target.path)


def _process_directory(
    path: Path,
    context: RunContext,
    prompter: Prompter,
    base_dir: Optional[Path],
    force: bool,
    results: List[FileResult],
) -> None:
    try:
        children = sorted(fsops.list_directory(path), key=lambda p: p.name)
    except FileSystemError as e:
        print_error(str(e))
        results.append(FileResult(path, Outcome.FAILED, reason=e.reason))
        return
    _process_children(children, context, prompter, base_dir, force, results)


def _process_children(
    children: List[Path],
    context: RunContext,
    prompter: Prompter,
    base_dir: Optional[Path],
    force: bool,
    results: List[FileResult],
) -> None:
    for child in children:
        if child.is_dir():
            _process_directory(child, context, prompter, base_dir, force, results)
        else:
            results.append(_process_file(child, context, prompter, base_dir, force))


def generate_from_template(
    template_root: Path,
    prompter: Prompter,
    presets: Optional[Mapping[str, Any]] = None,
    base_dir: Optional[Path] = None,
    force: bool = False,
) -> RunReport:
    """
    Instantiate the template stored at ``template_root``.

    - A directory root is walked recursively, children in name order.
    - A single-file root is processed on its own.
    - Output paths are relative to ``base_dir`` (current directory by default).
    - ``presets`` answer declared variables without prompting.

    Failing to read the root raises FileSystemError; any other failure only
    abandons the file or directory concerned and is recorded in the report.
    """
    template_root = Path(template_root)
    context = RunContext(presets=dict(presets or {}))
    report = RunReport(context)

    if template_root.is_dir():
        children = sorted(fsops.list_directory(template_root), key=lambda p: p.name)
        _process_children(children, context, prompter, base_dir, force, report.results)
    elif template_root.exists():
        report.results.append(_process_file(template_root, context, prompter, base_dir, force))
    else:
        raise FileSystemError(f"'{template_root.name}' template", "no such file", "open")
    return report
