"""Evaluate infix arithmetic expressions from the command line.

    $ rpn-calc "(3 + a) * 2 / (b - 5) ^ 2 ^ 3" a=4 b=7
    0.21875

Set DEBUG=1 in the environment to log tokens and postfix order, and
RPN_STRICT=1 (or pass --strict) to reject characters the tokenizer doesn't
know instead of skipping them.
"""
import argparse
import logging
import sys

from errors import ExprError
from expr_tree import build
from parser import env_flag, to_postfix, tokenize

logger = logging.getLogger(__name__)

DEBUG = env_flag("DEBUG")

DEMO_EXPR = "(3 + a) * 2 / (b - 5) ^ 2 ^ 3"
DEMO_BINDINGS = {"a": 4.0, "b": 7.0}


def evaluate(text, bindings=None, strict=None):
    """Tokenize, parse and solve `text` in one go.

    >>> evaluate("7 % 4 * x", {"x": 2})
    6.0
    """
    return build(to_postfix(tokenize(text, strict=strict))).solve(bindings)


def binding(s):
    name, sep, value = s.partition("=")
    if not sep or not name.isidentifier():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {s!r}")
    try:
        return name, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None


def main(argv=None):
    ap = argparse.ArgumentParser(prog="rpn-calc", description=__doc__.split("\n")[0])
    ap.add_argument("expr", nargs="?", help=f"expression (default: {DEMO_EXPR!r})")
    ap.add_argument("bindings", nargs="*", type=binding, metavar="NAME=VALUE")
    ap.add_argument("--strict", action="store_true", default=None)
    ap.add_argument("--postfix", action="store_true", help="also print the postfix form")
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    if args.expr is None:
        expr, bindings = DEMO_EXPR, DEMO_BINDINGS
    else:
        expr, bindings = args.expr, dict(args.bindings)
    try:
        tree = build(to_postfix(tokenize(expr, strict=args.strict)))
        if args.postfix:
            print(" ".join(map(str, tree.postfix())))
        print(tree.solve(bindings))
    except ExprError as e:
        logger.debug("failed to evaluate %r", expr, exc_info=True)
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
