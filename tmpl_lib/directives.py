"""
Directive classification for template files.

A template file starts with an optional header block:

- ``#name:type`` lines declare variables,
- ``!code`` lines form the eval-script that yields the output path.

The first blank line, escaped line (``##`` or ``!!``) or plain line ends the
header; everything from there on is literal body text.
"""
import re
from typing import List, NamedTuple

LINE_PATTERN = re.compile(r".*?(?:\r\n|\r|\n)|.+\Z", re.DOTALL)


class Directives(NamedTuple):
    declarations: str
    script: str
    body: str


class VariableDeclaration(NamedTuple):
    name: str
    type_spec: str


def _split_ending(line: str):
    """Split a line matched by LINE_PATTERN into (content, ending)."""
    if line.endswith("\r\n"):
        return line[:-2], "\r\n"
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1], line[-1]
    return line, ""


def classify(text: str) -> Directives:
    """Split a file's text into declaration buffer, eval-script and literal body."""
    declarations: List[str] = []
    script: List[str] = []
    body: List[str] = []
    read_vars = True
    read_eval = True

    for raw in LINE_PATTERN.findall(text):
        line, ending = _split_ending(raw)
        if not line.strip():
            read_vars = read_eval = False
            body.append(raw)
            continue
        if line.startswith("##"):
            read_vars = read_eval = False
            body.append(line[1:] + ending)
            continue
        if line.startswith("!!"):
            read_vars = read_eval = False
            body.append(line[1:] + ending)
            continue
        if line.startswith("#") and read_vars:
            declarations.append(line[1:].strip())
            continue
        if line.startswith("!") and read_eval:
            read_vars = False
            script.append(line[1:] + "\n")
            continue
        read_vars = read_eval = False
        body.append(raw)

    return Directives("|".join(declarations), "".join(script), "".join(body))


def _split_entries(text: str) -> List[str]:
    # "|" and "," separate entries except inside a [case|case] choice set
    entries: List[str] = []
    current: List[str] = []
    depth = 0
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]" and depth:
            depth -= 1
        if ch in "|," and depth == 0:
            entries.append("".join(current))
            current = []
            continue
        current.append(ch)
    entries.append("".join(current))
    return entries


def parse_declarations(text: str) -> List[VariableDeclaration]:
    """
    Parse the joined declaration buffer into (name, type_spec) pairs.

    Example: "flag:boolean|color:[red|green], count:int" gives three
    declarations. An entry without ":" keeps an empty type spec so the
    resolver can report it.
    """
    result: List[VariableDeclaration] = []
    for entry in _split_entries(text):
        entry = entry.strip()
        if not entry:
            continue
        name, _, type_spec = entry.partition(":")
        result.append(VariableDeclaration(name.strip(), type_spec.strip()))
    return result
