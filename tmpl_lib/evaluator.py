"""
Evaluation of eval-scripts and inline backtick spans.

Both surfaces run against the shared run context and are rewritten by the
choice registry first, so a bare case label such as ``red`` means
``Color.red``. Evaluation only reads the environment; ``val`` bindings of an
eval-script live in a scope that is thrown away after the script returns.
"""
import math
from typing import Any, Callable, Dict, List, Optional

from .choices import ChoiceType, Symbol
from .environment import RunContext
from .errors import EvaluationError, UnboundVariableReference
from .expressions import (
    Binary,
    If,
    Literal,
    Member,
    MethodCall,
    Name,
    Script,
    Template,
    Unary,
    ValDecl,
    parse_expression,
    parse_script,
)


def format_value(value: Any) -> str:
    """Render a value the way it appears in generated text."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Symbol):
        return value.type_name
    if isinstance(value, ChoiceType):
        return f"type {value.name}"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _arith(op: str, left: Any, right: Any) -> Any:
    if op == "+" and (isinstance(left, str) or isinstance(right, str)):
        return format_value(left) + format_value(right)
    if not (_is_number(left) and _is_number(right)):
        raise EvaluationError(
            f"Operator '{op}' cannot be applied to {_type_name(left)} and {_type_name(right)}"
        )
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0 and isinstance(left, int) and isinstance(right, int):
        raise EvaluationError("Division by zero")
    if isinstance(left, int) and isinstance(right, int):
        # integer division truncates toward zero
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        return quotient if op == "/" else left - quotient * right
    if right == 0:
        raise EvaluationError("Division by zero")
    if op == "/":
        return left / right
    return math.fmod(left, right)


def _compare(op: str, left: Any, right: Any) -> bool:
    comparable = (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if isinstance(left, Symbol) and isinstance(right, Symbol) and left.type_name == right.type_name:
        left, right = left.index, right.index
        comparable = True
    if not comparable:
        raise EvaluationError(
            f"Operator '{op}' cannot compare {_type_name(left)} and {_type_name(right)}"
        )
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    if op == ">":
        return left > right
    return left >= right


def _require_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise EvaluationError(f"{what} must be boolean, got {_type_name(value)}")
    return value


STRING_METHODS: Dict[str, Callable[..., Any]] = {
    "uppercase": lambda s: s.upper(),
    "lowercase": lambda s: s.lower(),
    "capitalize": lambda s: s[:1].upper() + s[1:],
    "trim": lambda s: s.strip(),
    "replace": lambda s, old, new: s.replace(old, new),
    "startsWith": lambda s, prefix: s.startswith(prefix),
    "endsWith": lambda s, suffix: s.endswith(suffix),
    "contains": lambda s, part: part in s,
}


class Interpreter:
    """Tree-walking evaluator over the parsed expression language."""

    def __init__(self, context: RunContext) -> None:
        self.context = context
        self.locals: Dict[str, Any] = {}

    def lookup(self, name: str) -> Any:
        if name in self.locals:
            return self.locals[name]
        if name in self.context.env:
            return self.context.env.lookup(name)
        choice = self.context.choices.get(name)
        if choice is not None:
            return choice
        raise UnboundVariableReference(name)

    def run(self, script: Script) -> Any:
        result = None
        for statement in script.statements:
            if isinstance(statement, ValDecl):
                self.locals[statement.name] = self.eval(statement.value)
                result = None
            else:
                result = self.eval(statement)
        return result

    def eval(self, node: Any) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Name):
            return self.lookup(node.name)
        if isinstance(node, Template):
            return "".join(p if isinstance(p, str) else format_value(self.eval(p)) for p in node.parts)
        if isinstance(node, Unary):
            return self._unary(node)
        if isinstance(node, Binary):
            return self._binary(node)
        if isinstance(node, If):
            condition = _require_bool(self.eval(node.condition), "Condition of 'if'")
            if condition:
                return self.eval(node.then)
            return self.eval(node.otherwise) if node.otherwise is not None else None
        if isinstance(node, Member):
            symbol = self._qualified_case(node)
            if symbol is not None:
                return symbol
            return self._member(self.eval(node.target), node.name)
        if isinstance(node, MethodCall):
            return self._call(self.eval(node.target), node.name, [self.eval(a) for a in node.args])
        raise EvaluationError(f"Cannot evaluate {type(node).__name__}")

    def _qualified_case(self, node: Member) -> Optional[Symbol]:
        # Size.small names a case even when the variable Size shadows its type
        if not isinstance(node.target, Name) or node.target.name in self.locals:
            return None
        choice = self.context.choices.get(node.target.name)
        return choice.case(node.name) if choice is not None else None

    def _unary(self, node: Unary) -> Any:
        value = self.eval(node.operand)
        if node.op == "!":
            return not _require_bool(value, "Operand of '!'")
        if not _is_number(value):
            raise EvaluationError(f"Operator '-' cannot be applied to {_type_name(value)}")
        return -value

    def _binary(self, node: Binary) -> Any:
        op = node.op
        if op in ("&&", "||"):
            left = _require_bool(self.eval(node.left), f"Left operand of '{op}'")
            if op == "&&" and not left:
                return False
            if op == "||" and left:
                return True
            return _require_bool(self.eval(node.right), f"Right operand of '{op}'")
        left = self.eval(node.left)
        right = self.eval(node.right)
        if op == "==":
            return _equals(left, right)
        if op == "!=":
            return not _equals(left, right)
        if op in ("<", "<=", ">", ">="):
            return _compare(op, left, right)
        return _arith(op, left, right)

    def _member(self, target: Any, name: str) -> Any:
        if isinstance(target, ChoiceType):
            symbol = target.case(name)
            if symbol is None:
                raise EvaluationError(f"{target.name} has no case '{name}'")
            return symbol
        if isinstance(target, Symbol):
            if name == "name":
                return target.label
            if name == "ordinal":
                return target.index
        if isinstance(target, str) and name == "length":
            return len(target)
        raise EvaluationError(f"Unknown property '{name}' on {_type_name(target)}")

    def _call(self, target: Any, name: str, args: List[Any]) -> Any:
        if name == "toString" and not args:
            return format_value(target)
        method = STRING_METHODS.get(name) if isinstance(target, str) else None
        if method is None:
            raise EvaluationError(f"Unknown method '{name}' on {_type_name(target)}")
        if not all(isinstance(a, str) for a in args):
            raise EvaluationError(f"Arguments of '{name}' must be strings")
        try:
            return method(target, *args)
        except TypeError:
            raise EvaluationError(f"Wrong number of arguments for '{name}'") from None


def evaluate_expression(text: str, context: RunContext) -> Any:
    """Evaluate one inline expression."""
    try:
        node = parse_expression(context.choices.substitute(text))
        return Interpreter(context).eval(node)
    except RecursionError:
        raise EvaluationError("Expression is nested too deeply") from None


def run_script(text: str, context: RunContext) -> Optional[Any]:
    """
    Run an eval-script as a function body and return its value.

    The value of the last expression statement is the result; an empty
    script, or one ending with a ``val`` binding, returns None.
    """
    try:
        script = parse_script(context.choices.substitute(text))
        return Interpreter(context).run(script)
    except RecursionError:
        raise EvaluationError("Script is nested too deeply") from None


def render_body(body: str, context: RunContext) -> str:
    """
    Replace every `expression` span of the body with its evaluated text.

    A doubled backtick outside a span is an escaped literal backtick. A span
    that is still open at the end of the body is an error.
    """
    out: List[str] = []
    span: List[str] = []
    in_span = False
    span_start = 0
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch == "`":
            if not in_span and i + 1 < n and body[i + 1] == "`":
                out.append("`")
                i += 2
                continue
            if in_span:
                out.append(format_value(evaluate_expression("".join(span), context)))
                span = []
            else:
                span_start = i
            in_span = not in_span
        elif in_span:
            span.append(ch)
        else:
            out.append(ch)
        i += 1
    if in_span:
        raise EvaluationError(f"Unterminated expression starting at offset {span_start}")
    return "".join(out)
