"""
Turn ``#name:type`` declarations into bound values.

Supported types: ``boolean``, ``string``, ``float``, ``int`` and choice sets
written as ``[case|case|...]``. Each variable is asked for once per run;
later declarations of an already bound name are skipped.
"""
import math
import re
from typing import Any, Iterable, List, Optional, Sequence

from .choices import IDENTIFIER
from .console import print_error, print_warning
from .directives import VariableDeclaration
from .environment import RunContext, Value
from .errors import InvalidDeclaration
from .expressions import KEYWORDS
from .prompter import Prompter

NAME_PATTERN = re.compile(r"[A-Za-z_]+")
CHOICE_PATTERN = re.compile(r"\[(.+)\]")
WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+")
INT_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

INVALID_VALUE = "Invalid value! Please try again!"


def humanize(name: str) -> str:
    """projectName -> 'Project Name', HTTPPort -> 'HTTP Port'."""
    words = WORD_PATTERN.findall(name)
    if not words:
        return name
    return " ".join(w[:1].upper() + w[1:] for w in words)


def parse_choice_cases(type_spec: str) -> Optional[List[str]]:
    m = CHOICE_PATTERN.fullmatch(type_spec)
    if not m:
        return None
    cases = [c.strip() for c in m.group(1).split("|")]
    if not all(IDENTIFIER.fullmatch(c) and c not in KEYWORDS for c in cases):
        return None
    return cases


def _parse_boolean(raw: Any) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("y", "yes", "true"):
        return True
    if text in ("n", "no", "false"):
        return False
    return None


def _parse_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not INT_PATTERN.fullmatch(text):
        return None
    return int(text)


def _parse_float(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    text = str(raw).strip()
    if not FLOAT_PATTERN.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def _parse_choice_preset(raw: Any, cases: Sequence[str]) -> Optional[int]:
    if isinstance(raw, str) and raw.strip() in cases:
        return cases.index(raw.strip())
    index = _parse_int(raw)
    if index is not None and 0 <= index < len(cases):
        return index
    return None


def _coerce_preset(type_spec: str, raw: Any, cases: Optional[List[str]]) -> Optional[Any]:
    if type_spec == "boolean":
        return _parse_boolean(raw)
    if type_spec == "string":
        return None if raw is None else str(raw)
    if type_spec == "int":
        return _parse_int(raw)
    if type_spec == "float":
        return _parse_float(raw)
    if cases is not None:
        return _parse_choice_preset(raw, cases)
    return None


def _ask_boolean(prompter: Prompter, label: str) -> bool:
    while True:
        answer = prompter.ask_yes_no(f"Please choose value for '{label}'")
        if answer is not None:
            return answer
        print_error(INVALID_VALUE)


def _ask_string(prompter: Prompter, label: str) -> str:
    while True:
        answer = prompter.ask_text(f"Please choose value for '{label}' [string]")
        if answer is not None:
            return answer
        print_error(INVALID_VALUE)


def _ask_number(prompter: Prompter, label: str, type_spec: str) -> Value:
    parse = _parse_int if type_spec == "int" else _parse_float
    while True:
        answer = prompter.ask_text(f"Please choose value for '{label}' [{type_spec}]")
        value = parse(answer) if answer is not None else None
        if value is not None:
            return value
        print_error(INVALID_VALUE)


def _ask_choice(prompter: Prompter, label: str, cases: Sequence[str]) -> int:
    options = [case.replace("_", "") for case in cases]
    while True:
        answer = prompter.ask_choice(f"Please choose an option for '{label}'", options)
        if answer is not None and 0 <= answer < len(cases):
            return answer
        print_error(INVALID_VALUE)


def _check_type(name: str, type_spec: str, cases: Optional[List[str]], context: RunContext) -> None:
    if cases is not None:
        context.choices.check(name, cases)
    elif type_spec not in ("boolean", "string", "float", "int"):
        raise InvalidDeclaration("unknown type")


def resolve_declarations(
    declarations: Iterable[VariableDeclaration],
    context: RunContext,
    prompter: Prompter,
    source: Optional[str] = None,
) -> List[str]:
    """
    Bind every declared variable that is not bound yet.

    Values come from ``context.presets`` when a valid preset exists, otherwise
    from the prompter. Illegal names, unknown types and choice types that clash
    with an already registered one are reported and left unbound. Returns the names bound by this call, in declaration order.
    """
    bound: List[str] = []
    where = source or "template"
    for name, type_spec in declarations:
        if name in context.env:
            continue
        if not NAME_PATTERN.fullmatch(name):
            print_warning(f"Illegal variable name '{name}'")
            continue
        cases = parse_choice_cases(type_spec)
        try:
            _check_type(name, type_spec, cases, context)
        except InvalidDeclaration as e:
            print_warning(f"Unable to initialize '{name}:{type_spec}' variable in {where}: {e}")
            continue

        label = humanize(name)
        value: Optional[Any] = None
        if name in context.presets:
            value = _coerce_preset(type_spec, context.presets[name], cases)
            if value is None:
                print_warning(f"Ignoring invalid preset value for '{name}': {context.presets[name]!r}")

        if value is None:
            if type_spec == "boolean":
                value = _ask_boolean(prompter, label)
            elif type_spec == "string":
                value = _ask_string(prompter, label)
            elif type_spec in ("float", "int"):
                value = _ask_number(prompter, label, type_spec)
            else:
                value = _ask_choice(prompter, label, cases)

        if cases is not None:
            choice = context.choices.register(name, cases)
            value = choice.symbol(value)
        context.env.bind(name, value)
        bound.append(name)
    return bound
