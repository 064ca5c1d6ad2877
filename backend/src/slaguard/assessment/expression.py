"""
Constraint expression engine for guarantee terms.

Supports:
- Logical operators (&&, ||, !)
- Comparisons (==, !=, <, <=, >, >=)
- Arithmetic (+, -, *, /, %)
- Numeric, string and boolean literals
- Plain identifiers and [bracketed names] as variables
"""

from __future__ import annotations

import numbers
import operator
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, Optional


class ExpressionError(Exception):
    """Base class for constraint expression failures."""


class ParseError(ExpressionError):
    """Raised when a constraint is not a syntactically valid expression."""


class EvaluationError(ExpressionError):
    """Raised when a parsed constraint cannot produce a boolean."""


_TOKEN_RE = re.compile(
    r"""
    (?P<number>\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)
    |(?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
    |(?P<bracket>\[[^\]]+\])
    |(?P<ident>[A-Za-z_][A-Za-z0-9_.]*)
    |(?P<op>&&|\|\||==|!=|>=|<=|>|<|!|\+|-|\*|/|%|\(|\))
    """,
    re.VERBOSE,
)

_COMPARISONS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

_ARITHMETIC: Dict[str, Callable[[Any, Any], Any]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
}


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any
    position: int


def tokenize(text: str) -> List[Token]:
    """Split expression text into tokens."""
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _TOKEN_RE.match(text, pos)
        if not match:
            raise ParseError(f"Unexpected character {text[pos]!r} at position {pos}")
        kind = match.lastgroup
        raw = match.group(kind)
        if kind == "number":
            value: Any = float(raw) if any(c in raw for c in ".eE") else int(raw)
            tokens.append(Token("literal", value, pos))
        elif kind == "string":
            tokens.append(Token("literal", re.sub(r"\\(.)", r"\1", raw[1:-1]), pos))
        elif kind == "bracket":
            tokens.append(Token("name", raw[1:-1].strip(), pos))
        elif kind == "ident":
            if raw in ("true", "false"):
                tokens.append(Token("literal", raw == "true", pos))
            else:
                tokens.append(Token("name", raw, pos))
        else:
            tokens.append(Token("op", raw, pos))
        pos = match.end()
    return tokens


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _describe(value: Any) -> str:
    return f"{value!r} ({type(value).__name__})"


@dataclass(frozen=True)
class _Literal:
    value: Any

    def evaluate(self, params: Mapping[str, Any]) -> Any:
        return self.value


@dataclass(frozen=True)
class _Name:
    name: str

    def evaluate(self, params: Mapping[str, Any]) -> Any:
        try:
            return params[self.name]
        except KeyError:
            raise EvaluationError(f"No parameter '{self.name}' found") from None


@dataclass(frozen=True)
class _Unary:
    op: str
    operand: Any

    def evaluate(self, params: Mapping[str, Any]) -> Any:
        value = self.operand.evaluate(params)
        if self.op == "!":
            if not isinstance(value, bool):
                raise EvaluationError(f"Operator '!' expects a boolean, got {_describe(value)}")
            return not value
        if not _is_number(value):
            raise EvaluationError(f"Operator '-' expects a number, got {_describe(value)}")
        return -value


@dataclass(frozen=True)
class _Binary:
    op: str
    left: Any
    right: Any

    def evaluate(self, params: Mapping[str, Any]) -> Any:
        if self.op in ("&&", "||"):
            return self._logical(params)

        left = self.left.evaluate(params)
        right = self.right.evaluate(params)

        if self.op in ("==", "!="):
            return _COMPARISONS[self.op](left, right)

        if self.op in _COMPARISONS:
            comparable = (_is_number(left) and _is_number(right)) or (
                isinstance(left, str) and isinstance(right, str)
            )
            if not comparable:
                raise EvaluationError(
                    f"Cannot compare {_describe(left)} {self.op} {_describe(right)}"
                )
            return _COMPARISONS[self.op](left, right)

        if self.op == "+" and isinstance(left, str) and isinstance(right, str):
            return left + right
        if not (_is_number(left) and _is_number(right)):
            raise EvaluationError(
                f"Operator '{self.op}' expects numbers, got {_describe(left)} and {_describe(right)}"
            )
        try:
            return _ARITHMETIC[self.op](left, right)
        except ZeroDivisionError:
            raise EvaluationError(f"Division by zero in '{self.op}'") from None

    def _logical(self, params: Mapping[str, Any]) -> bool:
        left = self.left.evaluate(params)
        if not isinstance(left, bool):
            raise EvaluationError(f"Operator '{self.op}' expects booleans, got {_describe(left)}")
        if self.op == "&&" and not left:
            return False
        if self.op == "||" and left:
            return True
        right = self.right.evaluate(params)
        if not isinstance(right, bool):
            raise EvaluationError(f"Operator '{self.op}' expects booleans, got {_describe(right)}")
        return right


class _Parser:
    """Recursive descent parser; one instance per expression text."""

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0
        self.names: List[str] = []

    def parse(self):
        if not self.tokens:
            raise ParseError("Empty expression")
        node = self._or()
        if self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            raise ParseError(f"Unexpected token {token.value!r} at position {token.position}")
        return node

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _accept(self, *ops: str) -> Optional[str]:
        token = self._peek()
        if token is not None and token.kind == "op" and token.value in ops:
            self.pos += 1
            return token.value
        return None

    def _or(self):
        node = self._and()
        while self._accept("||"):
            node = _Binary("||", node, self._and())
        return node

    def _and(self):
        node = self._comparison()
        while self._accept("&&"):
            node = _Binary("&&", node, self._comparison())
        return node

    def _comparison(self):
        node = self._additive()
        op = self._accept(*_COMPARISONS)
        if op:
            node = _Binary(op, node, self._additive())
        return node

    def _additive(self):
        node = self._multiplicative()
        while True:
            op = self._accept("+", "-")
            if not op:
                return node
            node = _Binary(op, node, self._multiplicative())

    def _multiplicative(self):
        node = self._unary()
        while True:
            op = self._accept("*", "/", "%")
            if not op:
                return node
            node = _Binary(op, node, self._unary())

    def _unary(self):
        op = self._accept("!", "-")
        if op:
            return _Unary(op, self._unary())
        return self._primary()

    def _primary(self):
        token = self._peek()
        if token is None:
            raise ParseError(f"Unexpected end of expression '{self.text}'")
        if token.kind == "literal":
            self.pos += 1
            return _Literal(token.value)
        if token.kind == "name":
            self.pos += 1
            if token.value not in self.names:
                self.names.append(token.value)
            return _Name(token.value)
        if self._accept("("):
            node = self._or()
            if not self._accept(")"):
                raise ParseError(f"Unbalanced parenthesis in '{self.text}'")
            return node
        raise ParseError(f"Unexpected token {token.value!r} at position {token.position}")


class Expression:
    """A parsed, reusable constraint expression."""

    def __init__(self, text: str, root, names: List[str]):
        self.text = text
        self._root = root
        self._names = tuple(names)

    @classmethod
    def parse(cls, text: str) -> "Expression":
        """Parse expression text, reusing a previous parse of the same text."""
        return _parse_cached(text)

    def variables(self) -> List[str]:
        """Referenced variable names in order of first appearance."""
        return list(self._names)

    def evaluate(self, params: Mapping[str, Any]) -> bool:
        missing = [name for name in self._names if name not in params]
        if missing:
            raise EvaluationError(
                f"No parameter {', '.join(repr(m) for m in missing)} found for '{self.text}'"
            )
        result = self._root.evaluate(params)
        if not isinstance(result, bool):
            raise EvaluationError(f"Expression '{self.text}' is not boolean: {_describe(result)}")
        return result

    def __repr__(self) -> str:
        return f"Expression({self.text!r})"


@lru_cache(maxsize=512)
def _parse_cached(text: str) -> Expression:
    parser = _Parser(text, tokenize(text))
    root = parser.parse()
    return Expression(text, root, parser.names)


def evaluate(expression_text: str, variables: Mapping[str, Any]) -> bool:
    """Parse and evaluate a constraint against variable values."""
    return Expression.parse(expression_text).evaluate(variables)
