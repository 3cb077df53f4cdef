"""Errors raised while lexing, parsing and evaluating expressions.

All of them derive from `ExprError` (itself a `ValueError`), so callers can
either catch everything at once or dispatch on the concrete class.
"""


class ExprError(ValueError):
    kind = "ExprError"


class LexError(ExprError):
    """A character that no tokenizer rule accepts (strict mode only)."""

    kind = "LexError"

    def __init__(self, char, pos):
        super().__init__(f"unexpected character {char!r} at position {pos}")
        self.char = char
        self.pos = pos


class ExprSyntaxError(ExprError):
    """Unbalanced parentheses, or postfix that doesn't reduce to one tree."""

    kind = "SyntaxError"


class InvalidToken(ExprError):
    kind = "InvalidToken"

    def __init__(self, token):
        super().__init__(f"{token.kind.name} token cannot appear in a postfix sequence")
        self.token = token


class MissingVariable(ExprError):
    kind = "MissingVariable"

    def __init__(self, name):
        super().__init__(f"no value bound for variable {name!r}")
        self.name = name


class ArityError(ExprError):
    kind = "ArityError"

    def __init__(self, expected, got):
        super().__init__(f"expected at least {expected} variable values, got {got}")
        self.expected = expected
        self.got = got


class InternalError(ExprError):
    """An invariant of an earlier stage was broken; a bug, not bad input."""

    kind = "InternalError"
