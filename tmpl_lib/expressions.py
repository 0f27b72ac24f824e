"""
Lexer, syntax tree and parser for the template expression language.

The language is deliberately small: literals, variable references, member
access on strings and choice symbols, arithmetic, comparison and boolean
operators, ``if (...) a else b`` expressions, string templates and
``val name = expr`` bindings local to one eval-script.
"""
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from .errors import EvaluationError

KEYWORDS = {"true", "false", "null", "if", "else", "val"}

OPERATORS = (
    "==", "!=", "<=", ">=", "&&", "||",
    "+", "-", "*", "/", "%", "<", ">", "!", "=", "(", ")", ",", ".", ";",
)

NUMBER = re.compile(r"\d+(\.\d+)?([eE][+-]?\d+)?")
IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\", "$": "$"}


@dataclass
class Token:
    kind: str  # NUMBER, STRING, IDENT, KEYWORD, OP, NEWLINE, EOF
    value: Any
    pos: int


# ---- Syntax tree ----

@dataclass
class Literal:
    value: Any


@dataclass
class Name:
    name: str


@dataclass
class Template:
    parts: List[Union[str, Any]]


@dataclass
class Member:
    target: Any
    name: str


@dataclass
class MethodCall:
    target: Any
    name: str
    args: List[Any]


@dataclass
class Unary:
    op: str
    operand: Any


@dataclass
class Binary:
    op: str
    left: Any
    right: Any


@dataclass
class If:
    condition: Any
    then: Any
    otherwise: Optional[Any]


@dataclass
class ValDecl:
    name: str
    value: Any


@dataclass
class Script:
    statements: List[Any]


# ---- Lexer ----

def _read_string(source: str, pos: int) -> Tuple[List[Tuple[str, str]], int]:
    """Read a double-quoted string starting at ``pos``; returns (parts, end)."""
    parts: List[Tuple[str, str]] = []
    text: List[str] = []
    i = pos + 1
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == '"':
            if text:
                parts.append(("text", "".join(text)))
            return parts, i + 1
        if ch == "\\":
            if i + 1 >= n or source[i + 1] not in ESCAPES:
                raise EvaluationError(f"Illegal escape in string at position {i}")
            text.append(ESCAPES[source[i + 1]])
            i += 2
            continue
        if ch == "$" and source.startswith("${", i):
            end = _find_hole_end(source, i + 2)
            if text:
                parts.append(("text", "".join(text)))
                text = []
            parts.append(("expr", source[i + 2:end]))
            i = end + 1
            continue
        if ch == "$":
            m = IDENT.match(source, i + 1)
            if m:
                if text:
                    parts.append(("text", "".join(text)))
                    text = []
                parts.append(("name", m.group(0)))
                i = m.end()
                continue
        if ch in "\r\n":
            break
        text.append(ch)
        i += 1
    raise EvaluationError(f"Unterminated string starting at position {pos}")


def _find_hole_end(source: str, pos: int) -> int:
    depth = 0
    i = pos
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == '"':
            _, i = _read_string(source, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    raise EvaluationError(f"Unterminated '${{' in string at position {pos - 2}")


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch in " \t":
            i += 1
            continue
        if ch in "\r\n":
            tokens.append(Token("NEWLINE", None, i))
            i += 1
            continue
        m = NUMBER.match(source, i) if ch in "0123456789" else None
        if m:
            text = m.group(0)
            value: Any = float(text) if (m.group(1) or m.group(2)) else int(text)
            tokens.append(Token("NUMBER", value, i))
            i = m.end()
            continue
        m = IDENT.match(source, i)
        if m:
            word = m.group(0)
            tokens.append(Token("KEYWORD" if word in KEYWORDS else "IDENT", word, i))
            i = m.end()
            continue
        if ch == '"':
            parts, end = _read_string(source, i)
            tokens.append(Token("STRING", parts, i))
            i = end
            continue
        for op in OPERATORS:
            if source.startswith(op, i):
                tokens.append(Token("OP", op, i))
                i += len(op)
                break
        else:
            raise EvaluationError(f"Unexpected character {ch!r} at position {i}")
    tokens.append(Token("EOF", None, n))
    return tokens


# ---- Parser ----

BINARY_LEVELS = (
    ("||",),
    ("&&",),
    ("==", "!="),
    ("<", "<=", ">", ">="),
    ("+", "-"),
    ("*", "/", "%"),
)


class Parser:
    def __init__(self, source: str) -> None:
        self.tokens = tokenize(source)
        self.index = 0
        self.depth = 0  # open parentheses; newlines inside them are ignored

    # token helpers
    def peek(self) -> Token:
        if self.depth:
            self.skip_newlines()
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.peek()
        self.index += 1
        return token

    def skip_newlines(self) -> None:
        while self.tokens[self.index].kind == "NEWLINE":
            self.index += 1

    def at(self, kind: str, value: Any = None) -> bool:
        token = self.peek()
        return token.kind == kind and (value is None or token.value == value)

    def expect(self, kind: str, value: Any = None) -> Token:
        if not self.at(kind, value):
            token = self.peek()
            wanted = value if value is not None else kind.lower()
            raise EvaluationError(f"Expected '{wanted}' at position {token.pos}, found {_describe(token)}")
        return self.advance()

    # grammar
    def parse_script(self) -> Script:
        statements = []
        while True:
            while self.at("NEWLINE") or self.at("OP", ";"):
                self.advance()
            if self.at("EOF"):
                return Script(statements)
            statements.append(self.statement())
            if not (self.at("NEWLINE") or self.at("OP", ";") or self.at("EOF")):
                token = self.peek()
                raise EvaluationError(f"Unexpected {_describe(token)} at position {token.pos}")

    def parse_expression(self) -> Any:
        self.skip_newlines()
        node = self.expression()
        self.skip_newlines()
        if not self.at("EOF"):
            token = self.peek()
            raise EvaluationError(f"Unexpected {_describe(token)} at position {token.pos}")
        return node

    def statement(self) -> Any:
        if self.at("KEYWORD", "val"):
            self.advance()
            name = self.expect("IDENT").value
            self.expect("OP", "=")
            self.skip_newlines()
            return ValDecl(name, self.expression())
        return self.expression()

    def expression(self) -> Any:
        return self.binary(0)

    def binary(self, level: int) -> Any:
        if level == len(BINARY_LEVELS):
            return self.unary()
        node = self.binary(level + 1)
        while self.peek().kind == "OP" and self.peek().value in BINARY_LEVELS[level]:
            op = self.advance().value
            self.skip_newlines()
            node = Binary(op, node, self.binary(level + 1))
        return node

    def unary(self) -> Any:
        if self.at("OP", "!") or self.at("OP", "-"):
            op = self.advance().value
            return Unary(op, self.unary())
        return self.postfix()

    def postfix(self) -> Any:
        node = self.primary()
        while True:
            # allow chained calls to continue on the next line: ".trim()"
            save = self.index
            self.skip_newlines()
            if not self.at("OP", "."):
                self.index = save
                return node
            self.advance()
            name = self.expect("IDENT").value
            if self.at("OP", "("):
                node = MethodCall(node, name, self.arguments())
            else:
                node = Member(node, name)

    def arguments(self) -> List[Any]:
        self.expect("OP", "(")
        self.depth += 1
        args = []
        if not self.at("OP", ")"):
            args.append(self.expression())
            while self.at("OP", ","):
                self.advance()
                args.append(self.expression())
        self.expect("OP", ")")
        self.depth -= 1
        return args

    def primary(self) -> Any:
        token = self.advance()
        if token.kind == "NUMBER":
            return Literal(token.value)
        if token.kind == "STRING":
            return self.template(token)
        if token.kind == "IDENT":
            return Name(token.value)
        if token.kind == "KEYWORD":
            if token.value == "true":
                return Literal(True)
            if token.value == "false":
                return Literal(False)
            if token.value == "null":
                return Literal(None)
            if token.value == "if":
                return self.if_expression()
        if token.kind == "OP" and token.value == "(":
            self.depth += 1
            node = self.expression()
            self.expect("OP", ")")
            self.depth -= 1
            return node
        raise EvaluationError(f"Unexpected {_describe(token)} at position {token.pos}")

    def if_expression(self) -> If:
        self.expect("OP", "(")
        self.depth += 1
        condition = self.expression()
        self.expect("OP", ")")
        self.depth -= 1
        self.skip_newlines()
        then = self.expression()
        save = self.index
        self.skip_newlines()
        if self.at("KEYWORD", "else"):
            self.advance()
            self.skip_newlines()
            return If(condition, then, self.expression())
        self.index = save
        return If(condition, then, None)

    def template(self, token: Token) -> Any:
        parts: List[Any] = []
        for kind, text in token.value:
            if kind == "text":
                parts.append(text)
            elif kind == "name":
                parts.append(Name(text))
            else:
                parts.append(Parser(text).parse_expression())
        if all(isinstance(p, str) for p in parts):
            return Literal("".join(parts))
        return Template(parts)


def _describe(token: Token) -> str:
    if token.kind == "EOF":
        return "end of input"
    if token.kind == "NEWLINE":
        return "line break"
    if token.kind == "STRING":
        return "string"
    return f"'{token.value}'"


def parse_expression(source: str) -> Any:
    return Parser(source).parse_expression()


def parse_script(source: str) -> Script:
    return Parser(source).parse_script()
