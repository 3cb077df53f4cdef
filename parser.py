import logging
import os
import re
from enum import Enum
from typing import Callable, NamedTuple, Optional

import numpy as np

from errors import ExprSyntaxError, InternalError, LexError

logger = logging.getLogger(__name__)


def env_flag(name):
    """True if environment variable `name` is set to anything but 0/false/no/off."""
    return os.getenv(name, "").strip().lower() not in {"", "0", "false", "no", "off"}


# Default for `tokenize(..., strict=None)`: raise on unknown characters
# instead of skipping them.
STRICT = env_flag("RPN_STRICT")


class Kind(Enum):
    VARIABLE = "variable"
    CONSTANT = "constant"
    ADD = "+"
    SUB = "-"
    MULT = "*"
    DIV = "/"
    POW = "^"
    REM = "%"
    OPEN_BRACKET = "("
    CLOSED_BRACKET = ")"


OPERANDS = frozenset([Kind.VARIABLE, Kind.CONSTANT])
BRACKETS = frozenset([Kind.OPEN_BRACKET, Kind.CLOSED_BRACKET])


class Token(NamedTuple):
    kind: Kind
    text: Optional[str] = None

    def __str__(self):
        return self.text if self.text is not None else self.kind.value


class Op(NamedTuple):
    kind: Kind
    symbol: str
    prec: int
    fun: Callable

    def __call__(self, *args):
        return self.fun(*args)

    def __repr__(self):
        return f"op({self.symbol!r:})"


# One line per precedence level, loosest first. Every operator is
# left-associative, `^` included.
OP_GROUPS = """
add+ subtract-
multiply* divide/ fmod%
power^
""".strip()
OPS = {
    Kind(o): Op(Kind(o), o, prec, getattr(np, fun))
    for prec, op_groups in enumerate(OP_GROUPS.split("\n"), 1)
    for [(fun, o)] in map(re.compile(r"^(\w+)(\W)$").findall, op_groups.split())
}


def precedence(token):
    if (op := OPS.get(token.kind)) is None:
        raise InternalError(f"precedence requested for non-operator {token!r}")
    return op.prec


TOKEN_RE = re.compile(
    r"([0-9]+)|([A-Za-z][A-Za-z0-9_]*)|([-+*/^%()])|(\s+)|(.)", re.DOTALL
)


def tokenize(text, strict=None):
    """Split `text` into a list of tokens, in source order.

    Whitespace is always ignored. Any other character that can't start a
    token is skipped as well, unless `strict` (default: `STRICT`) is set, in
    which case it raises `LexError`.

    >>> [str(tok) for tok in tokenize("ab_1*(20+c)")]
    ['ab_1', '*', '(', '20', '+', 'c', ')']
    >>> [str(tok) for tok in tokenize("2.5")]
    ['2', '5']
    >>> tokenize("2.5", strict=True)
    Traceback (most recent call last):
    ...
    errors.LexError: unexpected character '.' at position 1
    """
    if strict is None:
        strict = STRICT
    tokens = []
    for m in TOKEN_RE.finditer(text):
        num, name, sym, _, other = m.groups()
        if num:
            tok = Token(Kind.CONSTANT, num)
        elif name:
            tok = Token(Kind.VARIABLE, name)
        elif sym:
            tok = Token(Kind(sym), sym)
        elif other:
            if strict:
                raise LexError(other, m.start())
            logger.debug("skipping %r at position %d", other, m.start())
            continue
        else:
            continue
        logger.debug("token %s", tok)
        tokens.append(tok)
    return tokens


def to_postfix(tokens):
    """Reorder infix `tokens` into postfix (reverse polish) order.

    >>> " ".join(map(str, to_postfix(tokenize("a+b*c"))))
    'a b c * +'
    >>> " ".join(map(str, to_postfix(tokenize("2^3^2"))))
    '2 3 ^ 2 ^'
    """
    out = []
    ops = []
    for tok in tokens:
        if tok.kind in OPERANDS:
            out.append(tok)
        elif tok.kind is Kind.OPEN_BRACKET:
            ops.append(tok)
        elif tok.kind is Kind.CLOSED_BRACKET:
            while ops and ops[-1].kind is not Kind.OPEN_BRACKET:
                out.append(ops.pop())
            if not ops:
                raise ExprSyntaxError("mismatched parentheses: unmatched ')'")
            ops.pop()
        else:
            prec = precedence(tok)
            while (
                ops
                and ops[-1].kind is not Kind.OPEN_BRACKET
                and precedence(ops[-1]) >= prec
            ):
                out.append(ops.pop())
            ops.append(tok)
    while ops:
        if (tok := ops.pop()).kind is Kind.OPEN_BRACKET:
            raise ExprSyntaxError("mismatched parentheses: unclosed '('")
        out.append(tok)
    logger.debug("postfix: %s", " ".join(map(str, out)))
    return out


convert = to_postfix
