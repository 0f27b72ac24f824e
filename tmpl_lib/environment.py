"""Run-scoped state shared by every file of one instantiate run."""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Union

from .choices import ChoiceRegistry, Symbol
from .errors import UnboundVariableReference

Value = Union[bool, int, float, str, Symbol]


class Environment:
    """
    Ordered mapping of variable name -> bound value.

    A name is bound at most once per run; later files reuse the binding
    instead of asking again.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Value] = {}

    def bind(self, name: str, value: Value) -> None:
        if name in self._values:
            raise ValueError(f"Variable '{name}' is already bound")
        self._values[name] = value

    def lookup(self, name: str) -> Value:
        try:
            return self._values[name]
        except KeyError:
            raise UnboundVariableReference(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> Dict[str, Value]:
        return dict(self._values)


@dataclass
class RunContext:
    env: Environment = field(default_factory=Environment)
    choices: ChoiceRegistry = field(default_factory=ChoiceRegistry)
    presets: Mapping[str, Any] = field(default_factory=dict)
