"""
Enumerated choice types created from ``name:[case|case|...]`` declarations.

A ChoiceType is a registry record rather than a generated class: each case
is addressed by index and label, and values bound to choice variables are
Symbol instances pointing back at their type.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import InvalidDeclaration

IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
NUMBER_TOKEN = re.compile(r"[0-9A-Za-z_.]+")


@dataclass(frozen=True)
class Symbol:
    type_name: str
    index: int
    label: str = field(compare=False)

    @property
    def qualified(self) -> str:
        return f"{self.type_name}.{self.label}"

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class ChoiceType:
    name: str
    cases: Tuple[str, ...]

    def symbol(self, index: int) -> Symbol:
        if not 0 <= index < len(self.cases):
            raise IndexError(f"{self.name} has no case #{index}")
        return Symbol(self.name, index, self.cases[index])

    def case(self, label: str) -> Optional[Symbol]:
        try:
            return self.symbol(self.cases.index(label))
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.name


def type_name_for(variable: str) -> str:
    return variable[:1].upper() + variable[1:]


class ChoiceRegistry:
    """Choice types of one run plus the case label -> qualified symbol table."""

    def __init__(self) -> None:
        self.types: Dict[str, ChoiceType] = {}
        self.substitutions: Dict[str, str] = {}

    def check(self, variable: str, cases: Sequence[str]) -> None:
        """Raise InvalidDeclaration if the type for ``variable`` exists with other cases."""
        choice = self.types.get(type_name_for(variable))
        if choice is not None and choice.cases != tuple(cases):
            raise InvalidDeclaration(
                f"choice type '{choice.name}' is already declared as [{'|'.join(choice.cases)}]"
            )

    def register(self, variable: str, cases: Sequence[str]) -> ChoiceType:
        self.check(variable, cases)
        name = type_name_for(variable)
        choice = self.types.get(name)
        if choice is None:
            choice = ChoiceType(name, tuple(cases))
            self.types[name] = choice
        for case in choice.cases:
            self.substitutions[case] = f"{choice.name}.{case}"
        return choice

    def get(self, type_name: str) -> Optional[ChoiceType]:
        return self.types.get(type_name)

    def substitute(self, text: str) -> str:
        """
        Replace every registered case label in ``text`` with its qualified
        symbol reference.

        Only whole identifier tokens are rewritten. Tokens preceded by a dot
        and the literal parts of double-quoted strings are left alone, while
        code inside ``${...}`` string holes is rewritten like any other code.
        """
        if not self.substitutions:
            return text
        out: List[str] = []
        self._substitute_code(text, 0, out, closing=None)
        return "".join(out)

    def _substitute_code(self, text: str, pos: int, out: List[str], closing: Optional[str]) -> int:
        depth = 0
        n = len(text)
        while pos < n:
            ch = text[pos]
            if ch == '"':
                pos = self._copy_string(text, pos, out)
                continue
            if closing is not None:
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    if depth == 0:
                        return pos
                    depth -= 1
            m = IDENTIFIER.match(text, pos) if (ch.isalpha() or ch == "_") else None
            if m:
                token = m.group(0)
                qualified = self.substitutions.get(token)
                if qualified is not None and not _preceded_by_dot(text, pos):
                    out.append(qualified)
                else:
                    out.append(token)
                pos = m.end()
                continue
            if ch.isdigit():
                # keep number literals like 1e5 intact
                m = NUMBER_TOKEN.match(text, pos)
                out.append(m.group(0))
                pos = m.end()
                continue
            out.append(ch)
            pos += 1
        return pos

    def _copy_string(self, text: str, pos: int, out: List[str]) -> int:
        out.append('"')
        pos += 1
        n = len(text)
        while pos < n:
            ch = text[pos]
            if ch == "\\" and pos + 1 < n:
                out.append(text[pos:pos + 2])
                pos += 2
                continue
            if ch == "$" and text.startswith("${", pos):
                out.append("${")
                pos = self._substitute_code(text, pos + 2, out, closing="}")
                if pos < n:
                    out.append("}")
                    pos += 1
                continue
            out.append(ch)
            pos += 1
            if ch == '"':
                break
        return pos


def _preceded_by_dot(text: str, pos: int) -> bool:
    i = pos - 1
    while i >= 0 and text[i] in " \t":
        i -= 1
    return i >= 0 and text[i] == "."
