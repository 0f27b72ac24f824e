"""
tmpl_lib: create new projects from reusable file/directory templates.

Public API:
- generate_from_template(template_root, prompter, presets=None, base_dir=None, force=False) -> RunReport
- create_template(sources, templates_dir, name=None, remove_sources=False) -> bool
- delete_template(name, templates_dir) -> bool
- list_templates(templates_dir) -> list[str]

A template file may start with a header block:
- ``#name:type`` lines declare variables (boolean, string, int, float or a
  choice set ``[a|b|c]``); each variable is asked for once per run.
- ``!expr`` lines form the eval-script whose value is the output path;
  a path ending in "/" creates a directory, null skips the file.
- ``##`` and ``!!`` escape a literal leading ``#`` or ``!``.
In the body, `expr` spans are replaced by their value and a doubled
backtick produces a literal one.
"""
from .generator import FileResult, Outcome, RunReport, generate_from_template
from .prompter import ConsolePrompter, Prompter
from .store import create_template, delete_template, list_templates

__all__ = [
    "generate_from_template",
    "create_template",
    "delete_template",
    "list_templates",
    "ConsolePrompter",
    "Prompter",
    "FileResult",
    "Outcome",
    "RunReport",
]
