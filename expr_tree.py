"""Expression trees built from postfix token sequences.

A tree is immutable once built and can be solved any number of times against
different variable bindings. Arithmetic is done in IEEE doubles (numpy
float64) throughout, so e.g. division by zero gives inf or nan instead of
raising:

>>> tree = build(to_postfix(tokenize("(3 + a) * 2 / (b - 5) ^ 2 ^ 3")))
>>> tree.solve({"a": 4, "b": 7})
0.21875
>>> tree.var_count
2
>>> build(to_postfix(tokenize("1/(a-a)"))).solve({"a": 1, "b": 2})
inf
"""
import logging
from typing import NamedTuple, Optional

import numpy as np

from errors import ArityError, ExprSyntaxError, InternalError, InvalidToken, MissingVariable
from parser import BRACKETS, OPERANDS, OPS, Kind, Token, to_postfix, tokenize

logger = logging.getLogger(__name__)


def walk(node):
    """Yield the nodes below `node` (itself included) in post-order.

    Uses an explicit stack: a chain like `1+1+...+1` is as deep as it is long.
    """
    stack = [(node, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or node.left is None:
            yield node
        else:
            stack += [(node, True), (node.right, False), (node.left, False)]


class Node(NamedTuple):
    token: Token
    left: Optional["Node"] = None
    right: Optional["Node"] = None

    def solve(self, bindings):
        values = []
        for node in walk(self):
            kind = node.token.kind
            if kind is Kind.CONSTANT:
                values.append(np.float64(float(node.token.text)))
            elif kind is Kind.VARIABLE:
                if (name := node.token.text) not in bindings:
                    raise MissingVariable(name)
                values.append(np.asarray(bindings[name], dtype=np.float64))
            elif (op := OPS.get(kind)) is None:
                raise InternalError(f"{kind.name} token on an inner tree node")
            else:
                b = values.pop()
                values.append(op(values.pop(), b))
        (ans,) = values
        return ans


def free_vars(node):
    """Return the distinct variable names used below `node`.

    >>> sorted(free_vars(build(to_postfix(tokenize("b*a+a"))).root))
    ['a', 'b']
    """
    return frozenset(n.token.text for n in walk(node) if n.token.kind is Kind.VARIABLE)


def postorder(node):
    return (n.token for n in walk(node))


class Tree(NamedTuple):
    root: Node
    # Number of variable leaves, repeats included.
    var_count: int

    @property
    def variables(self):
        return free_vars(self.root)

    def postfix(self):
        return list(postorder(self.root))

    def solve(self, bindings=None):
        """Evaluate the tree with variables looked up in `bindings`.

        `bindings` must hold at least as many entries as the tree has variable
        leaves (otherwise `ArityError`), and every variable reached must be
        bound (otherwise `MissingVariable`).
        """
        got = 0 if bindings is None else len(bindings)
        if self.var_count > got:
            raise ArityError(self.var_count, got)
        with np.errstate(all="ignore"):
            return float(self.root.solve(bindings or {}))

    def evaluator(self, name="f"):
        """Return a function (named `name`) that evaluates the tree.

        The returned function takes the free variables in alphabetical order.
        Arguments can be numpy arrays, in which case the tree is evaluated
        element-wise.

        >>> f = build(to_postfix(tokenize("a+2*b^3"))).evaluator()
        >>> f(0.5, 1.0)
        2.5
        >>> f(np.array([0.0, 1.0]), 1.0)
        array([2., 3.])
        """
        arg_names = sorted(self.variables)

        def f(*args):
            if len(args) != len(arg_names):
                raise ArityError(len(arg_names), len(args))
            with np.errstate(all="ignore"):
                ans = self.root.solve(dict(zip(arg_names, args)))
            return ans if np.ndim(ans) else float(ans)

        f.__name__ = name
        return f


def build(postfix):
    """Build a `Tree` from a postfix token sequence."""
    stack = []
    var_count = 0
    for tok in postfix:
        if tok.kind in BRACKETS:
            raise InvalidToken(tok)
        if tok.kind in OPERANDS:
            var_count += tok.kind is Kind.VARIABLE
            stack.append(Node(tok))
            continue
        if len(stack) < 2:
            raise ExprSyntaxError(f"not enough operands for {tok}")
        right = stack.pop()
        left = stack.pop()
        stack.append(Node(tok, left, right))
    if len(stack) != 1:
        raise ExprSyntaxError(
            f"invalid postfix expression: {len(stack)} subexpressions left, expected 1"
        )
    (root,) = stack
    logger.debug("built tree with %d variable leaves", var_count)
    return Tree(root, var_count)
