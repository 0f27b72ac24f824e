"""
The template store: a directory whose children are stored templates.

Templates are captured by copying existing files or directories under
``<templates_dir>/<name>/`` and are later instantiated by the generator.
"""
from pathlib import Path
from typing import List, Optional, Sequence

from . import fsops
from .console import print_error, print_info, print_success, print_warning
from .errors import FileSystemError


def template_path(templates_dir: Path, name: str) -> Path:
    return Path(templates_dir) / name


def create_template(
    sources: Sequence[Path],
    templates_dir: Path,
    name: Optional[str] = None,
    remove_sources: bool = False,
) -> bool:
    """
    Copy ``sources`` into a new (or existing) template named ``name``.

    When no name is given the first source's file name is used. Existing
    files inside the template are never overwritten. Sources are removed
    afterwards only when ``remove_sources`` is set and every copy succeeded.
    """
    sources = [Path(s) for s in sources]
    if not sources:
        print_error("No source files given")
        return False
    if not name:
        name = sources[0].resolve().name
        print_warning(f"Name is not specified, using {name}")

    target = template_path(templates_dir, name)
    success = True
    for source in sources:
        try:
            fsops.copy_path(source, target / source.resolve().name)
            print_success(f"'{source.name}' successfully copied!")
        except FileSystemError as e:
            print_error(str(e))
            success = False

    if success:
        print_success(f"Successful creating '{name}' template!")
    else:
        print_error(f"Something went wrong while creating '{name}' template!")
        return False

    if remove_sources:
        removed = True
        for source in sources:
            try:
                fsops.remove_path(source)
            except FileSystemError as e:
                print_error(str(e))
                removed = False
        if removed:
            print_success(f"Successful removing '{name}' template sources!")
        else:
            print_error(f"Something went wrong while removing '{name}' sources!")
            return False
    return True


def delete_template(name: str, templates_dir: Path) -> bool:
    target = template_path(templates_dir, name)
    if not target.exists():
        print_error(f"No such '{name}' template!")
        return False
    print_info(f"Deleting '{name}' template...")
    try:
        fsops.remove_path(target)
    except FileSystemError as e:
        print_error(str(e))
        print_error(f"Something went wrong while deleting '{name}' template!")
        return False
    print_success(f"Template '{name}' successfully deleted!")
    return True


def list_templates(templates_dir: Path) -> List[str]:
    """Return the names of stored templates, sorted; a missing store is empty."""
    templates_dir = Path(templates_dir)
    if not templates_dir.exists():
        return []
    return sorted(p.name for p in fsops.list_directory(templates_dir))
