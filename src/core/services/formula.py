"""
Sandboxed arithmetic formula evaluator.

Evaluates user-supplied cost formulas such as
``materialCost * 0.05 + max(fabricationCost, 100)`` without executing code.

Grammar (recursive descent)::

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := ("+" | "-") unary | primary
    primary := NUMBER | NAME | NAME "(" expr ("," expr)* ")" | "(" expr ")"

Function names may carry a ``Math.`` prefix (``Math.round(total)``).
"""

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from src.core.exceptions import FormulaError

_TOKEN_RE = re.compile(
    r"""
    (?P<number>\d+\.?\d*|\.\d+)
    |(?P<name>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)
    |(?P<op>[-+*/(),])
    |(?P<space>\s+)
    """,
    re.VERBOSE,
)


def _round_half_up(value: float) -> float:
    # Math.round semantics: halves round towards +infinity
    return float(math.floor(value + 0.5))


@dataclass(frozen=True)
class _Function:
    call: Callable[..., float]
    min_args: int
    max_args: int | None


FUNCTIONS: dict[str, _Function] = {
    "round": _Function(_round_half_up, 1, 1),
    "floor": _Function(lambda x: float(math.floor(x)), 1, 1),
    "ceil": _Function(lambda x: float(math.ceil(x)), 1, 1),
    "abs": _Function(lambda x: float(abs(x)), 1, 1),
    "min": _Function(lambda *args: float(min(args)), 1, None),
    "max": _Function(lambda *args: float(max(args)), 1, None),
}


@dataclass(frozen=True)
class _Token:
    kind: str  # "number", "name" or "op"
    text: str


def tokenize(formula: str) -> list[_Token]:
    """Split a formula into number, name and operator tokens."""
    tokens: list[_Token] = []
    pos = 0
    while pos < len(formula):
        match = _TOKEN_RE.match(formula, pos)
        if match is None:
            raise FormulaError(formula, f"invalid character '{formula[pos]}' at {pos}")
        kind = match.lastgroup
        if kind != "space":
            tokens.append(_Token(kind, match.group()))  # type: ignore[arg-type]
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, formula: str, variables: Mapping[str, float]):
        self._formula = formula
        self._variables = variables
        self._tokens = tokenize(formula)
        self._pos = 0

    def parse(self) -> float:
        if not self._tokens:
            raise self._error("empty expression")
        value = self._expr()
        if self._pos < len(self._tokens):
            raise self._error(f"unexpected token '{self._tokens[self._pos].text}'")
        return value

    def _error(self, reason: str) -> FormulaError:
        return FormulaError(self._formula, reason)

    def _peek(self) -> _Token | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of expression")
        self._pos += 1
        return token

    def _expect(self, text: str) -> None:
        token = self._next()
        if token.text != text:
            raise self._error(f"expected '{text}' but found '{token.text}'")

    def _at_op(self, *ops: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "op" and token.text in ops

    def _expr(self) -> float:
        value = self._term()
        while self._at_op("+", "-"):
            op = self._next().text
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._at_op("*", "/"):
            op = self._next().text
            right = self._unary()
            if op == "/":
                if right == 0:
                    raise self._error("division by zero")
                value = value / right
            else:
                value = value * right
        return value

    def _unary(self) -> float:
        if self._at_op("-"):
            self._next()
            return -self._unary()
        if self._at_op("+"):
            self._next()
            return self._unary()
        return self._primary()

    def _primary(self) -> float:
        token = self._next()

        if token.kind == "number":
            return float(token.text)

        if token.kind == "op":
            if token.text != "(":
                raise self._error(f"unexpected token '{token.text}'")
            value = self._expr()
            self._expect(")")
            return value

        # Name: function call or variable
        if self._at_op("("):
            return self._call(token.text)

        if token.text not in self._variables:
            raise self._error(f"unknown variable '{token.text}'")
        return float(self._variables[token.text])

    def _call(self, name: str) -> float:
        func_name = name.removeprefix("Math.")
        func = FUNCTIONS.get(func_name)
        if func is None:
            raise self._error(f"unknown function '{name}'")

        self._expect("(")
        args = [self._expr()]
        while self._at_op(","):
            self._next()
            args.append(self._expr())
        self._expect(")")

        if len(args) < func.min_args or (func.max_args is not None and len(args) > func.max_args):
            raise self._error(f"wrong number of arguments for '{func_name}'")
        return func.call(*args)


def evaluate_formula(formula: str | None, variables: Mapping[str, float]) -> float:
    """
    Evaluate a formula against named variables.

    A missing or blank formula evaluates to 0.

    Raises:
        FormulaError: the formula is malformed, references an unknown
            name, divides by zero or does not produce a finite number.
    """
    if formula is None or not formula.strip():
        return 0.0

    result = _Parser(formula, variables).parse()
    if not math.isfinite(result):
        raise FormulaError(formula, "result is not a finite number")
    return result
