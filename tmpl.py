#!/usr/bin/env python3
import argparse
import os
import sys
from pathlib import Path
from typing import List

from tmpl_lib import (
    ConsolePrompter,
    Outcome,
    create_template,
    delete_template,
    generate_from_template,
    list_templates,
)
from tmpl_lib.config import (
    load_answers,
    load_config,
    merge_presets,
    parse_params,
    resolve_templates_dir,
)
from tmpl_lib.console import print_error, print_info, print_option, print_success, print_warning
from tmpl_lib.errors import ConfigError, FileSystemError, PromptAborted
from tmpl_lib.store import template_path


def _build_parser() -> argparse.ArgumentParser:
    store_option = argparse.ArgumentParser(add_help=False)
    store_option.add_argument(
        "-d",
        "--custom-dir",
        help="Directory where templates are placed (default: $TMPL_HOME, config file, or ~/.tmpl/)",
    )

    parser = argparse.ArgumentParser(
        prog="tmpl",
        description="Create new projects from reusable file and directory templates.",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    new = commands.add_parser(
        "new", parents=[store_option], help="Create a new template from existing sources"
    )
    new.add_argument("files", nargs="+", help="Files or directories the template is created from")
    new.add_argument(
        "-n",
        "--name",
        help="Name of the template; defaults to the name of the first source",
    )
    new.add_argument(
        "-r",
        "--remove-source",
        action="store_true",
        help="Delete the source files after creating the template",
    )

    use = commands.add_parser(
        "use", parents=[store_option], help="Create a new project from a template"
    )
    use.add_argument("name", help="Name of the template")
    use.add_argument(
        "-o",
        "--out",
        default=os.getcwd(),
        help="Directory output paths are relative to (default: current directory)",
    )
    use.add_argument(
        "--answers",
        help="YAML file mapping variable names to answers, used instead of prompting",
    )
    use.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        help="Preset answer for a variable. Repeatable. Accepts key=value or key:value.",
    )
    use.add_argument(
        "--force",
        action="store_true",
        help="Overwrite files that already exist",
    )

    rm = commands.add_parser("rm", parents=[store_option], help="Delete an existing template")
    rm.add_argument("name", help="Name of the template")

    commands.add_parser("ls", parents=[store_option], help="List available templates")
    return parser


def _use(args: argparse.Namespace, templates_dir: Path, config_answers: dict) -> int:
    try:
        file_answers = load_answers(Path(args.answers)) if args.answers else {}
        params = parse_params(args.param)
    except (ConfigError, ValueError) as e:
        print_error(f"Error parsing parameters: {e}")
        return 2

    template = template_path(templates_dir, args.name)
    if not template.exists():
        print_error(f"No such '{args.name}' template!")
        return 1

    print_success(f"Creating new project according to '{args.name}' template...")
    try:
        report = generate_from_template(
            template,
            ConsolePrompter(),
            presets=merge_presets(config_answers, file_answers, params),
            base_dir=Path(args.out),
            force=args.force,
        )
    except FileSystemError as e:
        print_error(f"Generation failed: {e}")
        return 1
    except PromptAborted as e:
        print_error(str(e))
        return 130

    if report.ok:
        print_success("Project successfully created!")
        return 0
    print_error(f"Project created with {len(report.by_outcome(Outcome.FAILED))} failure(s)")
    return 1


def _ls(templates_dir: Path) -> int:
    try:
        templates = list_templates(templates_dir)
    except FileSystemError as e:
        print_error(str(e))
        return 1
    if not templates:
        print_warning("No templates available at this time")
    else:
        print_success("Available templates:")
        for name in templates:
            print_option(f"\t{name}")
    return 0


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        print_error(f"Error loading configuration: {e}")
        return 2
    templates_dir = resolve_templates_dir(args.custom_dir, config)

    if args.command == "new":
        ok = create_template(
            [Path(f) for f in args.files],
            templates_dir,
            name=args.name,
            remove_sources=args.remove_source,
        )
        return 0 if ok else 1
    if args.command == "use":
        return _use(args, templates_dir, config.answers)
    if args.command == "rm":
        return 0 if delete_template(args.name, templates_dir) else 1
    print_info(f"Templates directory: {templates_dir}")
    return _ls(templates_dir)


if __name__ == "__main__":
    raise SystemExit(main())
