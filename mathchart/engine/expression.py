"""Restricted single-variable expression compiler.

Expressions are tokenized, parsed by a recursive-descent parser into a small
tagged AST and evaluated by closures built from that tree. Nothing is ever
handed to ``eval``: identifiers outside the whitelist are rejected while
tokenizing, so a compiled function can only touch ``x``, numeric literals,
arithmetic and the functions listed in ``_FUNCTIONS``.

Evaluation is total over floats. Division by zero, ``log``/``sqrt`` outside
their domain and overflow yield ``nan`` or ``inf`` instead of raising, and
callers treat those samples as undefined.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

DEFAULT_MAX_LENGTH = 400
MAX_NESTING_DEPTH = 64

_UNICODE_REPLACEMENTS = {
    "−": "-",
    "–": "-",
    "—": "-",
    "×": "*",
    "÷": "/",
    "·": "*",
    "∙": "*",
    "⁄": "/",
    "π": "pi",
    "√": "sqrt",
}

_SUPERSCRIPT_MAP = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
    "⁺": "+",
    "⁻": "-",
}

_TOKEN_REGEX = re.compile(
    r"\s*(?:"
    r"(?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)"
    r"|(?P<op>\*\*|[-+*/^(),])"
    r")"
)


class CompileError(ValueError):
    """Raised when an expression cannot be compiled."""


class InvalidTokenError(CompileError):
    """Raised for identifiers or characters outside the allowed grammar."""

    def __init__(self, token: str, position: int) -> None:
        super().__init__("Invalid token '{}' at position {}".format(token, position))
        self.token = token
        self.position = position


class ExpressionSyntaxError(CompileError):
    """Raised when tokens do not form a well-structured expression."""


class EmptyExpressionError(CompileError):
    """Raised by the parser for blank input; ``compile_expression`` absorbs it."""


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Num:
    value: float


@dataclass(frozen=True)
class Var:
    name: str = "x"


@dataclass(frozen=True)
class Neg:
    operand: "Node"


@dataclass(frozen=True)
class BinOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    name: str
    args: Tuple["Node", ...]


Node = Union[Num, Var, Neg, BinOp, Call]


# ---------------------------------------------------------------------------
# Total float operations
# ---------------------------------------------------------------------------


def _divide(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _power(base: float, exponent: float) -> float:
    if math.isnan(base) or math.isnan(exponent):
        return math.nan
    if base == 0.0 and exponent < 0:
        return math.inf
    if base < 0 and math.isfinite(exponent) and not float(exponent).is_integer():
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and int(exponent) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        return math.nan


def _guarded(func: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(value: float) -> float:
        if math.isnan(value):
            return math.nan
        try:
            return float(func(value))
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan

    return wrapper


def _ln(value: float) -> float:
    if value == 0.0:
        return -math.inf
    if value < 0 or math.isnan(value):
        return math.nan
    return math.log(value)


def _log10(value: float) -> float:
    if value == 0.0:
        return -math.inf
    if value < 0 or math.isnan(value):
        return math.nan
    return math.log10(value)


def _log2(value: float) -> float:
    if value == 0.0:
        return -math.inf
    if value < 0 or math.isnan(value):
        return math.nan
    return math.log2(value)


def _sqrt(value: float) -> float:
    if value < 0 or math.isnan(value):
        return math.nan
    return math.sqrt(value)


def _floor(value: float) -> float:
    return float(math.floor(value)) if math.isfinite(value) else value


def _ceil(value: float) -> float:
    return float(math.ceil(value)) if math.isfinite(value) else value


_FUNCTIONS: Dict[str, Callable[..., float]] = {
    "sin": _guarded(math.sin),
    "cos": _guarded(math.cos),
    "tan": _guarded(math.tan),
    "exp": _guarded(math.exp),
    "ln": _ln,
    "log": _log10,
    "sqrt": _sqrt,
    "abs": abs,
    "floor": _floor,
    "ceil": _ceil,
}

# ``Math.*`` names as written by the chart layer; ``Math.log`` is the natural log.
_QUALIFIED_FUNCTIONS: Dict[str, Callable[..., float]] = {
    "Math.sin": _FUNCTIONS["sin"],
    "Math.cos": _FUNCTIONS["cos"],
    "Math.tan": _FUNCTIONS["tan"],
    "Math.exp": _FUNCTIONS["exp"],
    "Math.log": _ln,
    "Math.log10": _log10,
    "Math.log2": _log2,
    "Math.sqrt": _sqrt,
    "Math.abs": abs,
    "Math.floor": _floor,
    "Math.ceil": _ceil,
    "Math.pow": _power,
}

_CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "Math.PI": math.pi,
    "Math.E": math.e,
}

_ARITY: Dict[str, int] = {"Math.pow": 2}

_BINARY: Dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
    "^": _power,
}

VARIABLE = "x"


def is_known_name(name: str) -> bool:
    return name == VARIABLE or name in _CONSTANTS or name in _FUNCTIONS or name in _QUALIFIED_FUNCTIONS


def _lookup_function(name: str) -> Optional[Callable[..., float]]:
    return _FUNCTIONS.get(name) or _QUALIFIED_FUNCTIONS.get(name)


# ---------------------------------------------------------------------------
# Tokenizer and parser
# ---------------------------------------------------------------------------


def normalize_math_unicode(expression: str) -> str:
    if not expression:
        return expression

    for source, target in _UNICODE_REPLACEMENTS.items():
        expression = expression.replace(source, target)

    result_chars = []
    i = 0
    while i < len(expression):
        char = expression[i]
        if char in _SUPERSCRIPT_MAP:
            superscript_tokens = []
            while i < len(expression) and expression[i] in _SUPERSCRIPT_MAP:
                superscript_tokens.append(_SUPERSCRIPT_MAP[expression[i]])
                i += 1
            result_chars.append("^" + "".join(superscript_tokens))
            continue

        result_chars.append(char)
        i += 1

    return "".join(result_chars)


def tokenize(expression: str) -> List[Tuple[str, str, int]]:
    """Splits normalized text into ``(kind, text, position)`` tokens."""
    tokens: List[Tuple[str, str, int]] = []
    position = 0
    length = len(expression)
    while position < length:
        if expression[position].isspace():
            position += 1
            continue
        match = _TOKEN_REGEX.match(expression, position)
        if match is None or match.end() == position:
            raise InvalidTokenError(expression[position], position)
        kind = match.lastgroup or ""
        text = match.group(kind)
        start = match.start(kind)
        if kind == "name" and not is_known_name(text):
            raise InvalidTokenError(text, start)
        if kind == "op" and text == "**":
            text = "^"
        tokens.append((kind, text, start))
        position = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: List[Tuple[str, str, int]]) -> None:
        self._tokens = tokens
        self._index = 0
        self._depth = 0

    def _peek(self) -> Optional[Tuple[str, str, int]]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _accept(self, *ops: str) -> Optional[str]:
        token = self._peek()
        if token is not None and token[0] == "op" and token[1] in ops:
            self._index += 1
            return token[1]
        return None

    def _expect(self, op: str) -> None:
        if self._accept(op) is None:
            token = self._peek()
            found = token[1] if token else "end of input"
            raise ExpressionSyntaxError("Expected '{}' but found '{}'".format(op, found))

    def parse(self) -> Node:
        if not self._tokens:
            raise EmptyExpressionError("Expression is empty.")
        node = self._expression()
        token = self._peek()
        if token is not None:
            raise ExpressionSyntaxError("Unexpected '{}' at position {}".format(token[1], token[2]))
        return node

    def _expression(self) -> Node:
        node = self._term()
        while True:
            op = self._accept("+", "-")
            if op is None:
                return node
            node = BinOp(op, node, self._term())

    def _term(self) -> Node:
        node = self._unary()
        while True:
            op = self._accept("*", "/")
            if op is None:
                return node
            node = BinOp(op, node, self._unary())

    def _unary(self) -> Node:
        # Every parenthesis, sign and exponent level passes through here.
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            raise ExpressionSyntaxError("Expression is nested deeper than {} levels.".format(MAX_NESTING_DEPTH))
        try:
            if self._accept("-"):
                return Neg(self._unary())
            if self._accept("+"):
                return self._unary()
            return self._power()
        finally:
            self._depth -= 1

    def _power(self) -> Node:
        base = self._atom()
        if self._accept("^"):
            return BinOp("^", base, self._unary())
        return base

    def _atom(self) -> Node:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError("Unexpected end of expression.")
        kind, text, position = token
        self._index += 1

        if kind == "number":
            return Num(float(text))
        if kind == "name":
            return self._name(text, position)
        if text == "(":
            node = self._expression()
            self._expect(")")
            return node
        raise ExpressionSyntaxError("Unexpected '{}' at position {}".format(text, position))

    def _name(self, name: str, position: int) -> Node:
        if name == VARIABLE:
            return Var(name)
        if name in _CONSTANTS:
            return Num(_CONSTANTS[name])

        if not self._accept("("):
            raise ExpressionSyntaxError("Function '{}' at position {} requires arguments.".format(name, position))
        args: List[Node] = []
        if not self._accept(")"):
            args.append(self._expression())
            while self._accept(","):
                args.append(self._expression())
            self._expect(")")
        expected = _ARITY.get(name, 1)
        if len(args) != expected:
            raise ExpressionSyntaxError(
                "Function '{}' expects {} argument(s), got {}.".format(name, expected, len(args))
            )
        return Call(name, tuple(args))


def parse_expression(expression: str, max_length: int = DEFAULT_MAX_LENGTH) -> Node:
    """Parses expression text into an AST.

    Raises:
        EmptyExpressionError: If the text is blank.
        InvalidTokenError: If the text contains a character or identifier outside the grammar.
        ExpressionSyntaxError: If the tokens are not a well-formed expression.
        CompileError: If the text exceeds ``max_length``.
    """
    normalized = normalize_math_unicode((expression or "").strip())
    if len(normalized) > max_length:
        raise CompileError("Expression exceeds max length of {} characters.".format(max_length))
    return _Parser(tokenize(normalized)).parse()


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _build(node: Node) -> Callable[[float], float]:
    if isinstance(node, Num):
        value = node.value
        return lambda x: value
    if isinstance(node, Var):
        return lambda x: x
    if isinstance(node, Neg):
        operand = _build(node.operand)
        return lambda x: -operand(x)
    if isinstance(node, BinOp):
        left = _build(node.left)
        right = _build(node.right)
        op = _BINARY[node.op]
        return lambda x: op(left(x), right(x))
    if isinstance(node, Call):
        func = _lookup_function(node.name)
        if func is None:
            raise InvalidTokenError(node.name, -1)
        args = [_build(arg) for arg in node.args]
        if len(args) == 1:
            only = args[0]
            return lambda x: float(func(only(x)))
        return lambda x: float(func(*(arg(x) for arg in args)))
    raise ExpressionSyntaxError("Unsupported expression component.")


class CompiledExpression:
    """Callable ``f(x)`` backed by a parsed expression tree."""

    def __init__(self, source: str, tree: Optional[Node]) -> None:
        self.source = source
        self.tree = tree
        self._func = _build(tree) if tree is not None else (lambda x: 0.0)

    def __call__(self, x: float) -> float:
        return self._func(float(x))

    def __repr__(self) -> str:
        return "CompiledExpression({!r})".format(self.source)


def compile_expression(expression: str, max_length: int = DEFAULT_MAX_LENGTH) -> CompiledExpression:
    """Compiles expression text into a total ``float -> float`` function.

    Blank input compiles to the constant-zero function.

    Raises:
        InvalidTokenError: For identifiers or characters outside the whitelist.
        ExpressionSyntaxError: For malformed expressions.
    """
    try:
        tree: Optional[Node] = parse_expression(expression, max_length=max_length)
    except EmptyExpressionError:
        tree = None
    return CompiledExpression(expression or "", tree)


def zero_function(expression: str = "") -> CompiledExpression:
    return CompiledExpression(expression, None)
