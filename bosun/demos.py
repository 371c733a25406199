"""
Arithmetic demo commands, registered by shells created with demos=True.

addf, subf, multiplyf and divf fold every positional number left to right
and reply with a float; evalf evaluates one arithmetic expression.
"""
import ast
import functools
import operator

from .commands import command

USAGE = "[value] ..."

NOT_ENOUGH = "You must provide at least two numbers to %s!"
NOT_NUMBERS = "You must provide all numbers as floats/integers!"
ZERO_DIVISION = "You cannot divide by zero!"
NO_EXPRESSION = "You must provide an expression to evaluate!"
BAD_EXPRESSION = "You must provide a valid arithmetic expression!"

_binary = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_unary = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

# largest integer power, in bits, accepted by **
MAX_BITS = 8192


def _fold(event, verb, reducer, label):
    values = event.input.args.split(" ")
    if len(values) <= 1:
        return event.replyln(NOT_ENOUGH % verb)
    try:
        numbers = [float(value) for value in values]
    except ValueError:
        return event.replyln(NOT_NUMBERS)
    try:
        result = functools.reduce(reducer, numbers)
    except ZeroDivisionError:
        return event.replyln(ZERO_DIVISION)
    event.replyln(f"{label}: {result}")


def evaluate(expression, /):
    """
    Evaluate an arithmetic expression without eval().

    Supports int and float literals, + - * / // % **, unary signs and
    parentheses. Anything else raises ValueError, as does an integer power
    wider than MAX_BITS; a malformed expression raises SyntaxError and a
    float result out of range raises OverflowError.
    """
    return _evaluate(ast.parse(expression.strip(), mode="eval").body)


def _evaluate(node):
    match node:
        case ast.Constant(value=bool()):
            raise ValueError("booleans are not numbers")
        case ast.Constant(value=int() | float() as value):
            return value
        case ast.UnaryOp(op=op, operand=operand) if type(op) in _unary:
            return _unary[type(op)](_evaluate(operand))
        case ast.BinOp(left=left, op=ast.Pow(), right=right):
            base, exponent = _evaluate(left), _evaluate(right)
            if isinstance(base, int) and base.bit_length() * abs(exponent) > MAX_BITS:
                raise ValueError("power wider than %d bits" % MAX_BITS)
            return base ** exponent
        case ast.BinOp(left=left, op=op, right=right) if type(op) in _binary:
            return _binary[type(op)](_evaluate(left), _evaluate(right))
        case _:
            raise ValueError("unsupported expression %s" % type(node).__name__)


@command(aliases=("additionf", "af"), usage=USAGE)
def addf(event):
    """Adds as many floats as provided together."""
    _fold(event, "add together", operator.add, "Sum")


@command(aliases=("evaluatef", "ef"), usage="[expression]")
def evalf(event):
    """Evaluates an arithmetic expression."""
    if not (expression := event.input.args):
        return event.replyln(NO_EXPRESSION)
    try:
        result = f"Result: {evaluate(expression)}"
    except ZeroDivisionError:
        return event.replyln(ZERO_DIVISION)
    except (SyntaxError, ValueError, OverflowError):
        return event.replyln(BAD_EXPRESSION)
    event.replyln(result)


@command(aliases=("subtractf", "subtractionf", "sf"), usage=USAGE)
def subf(event):
    """Subtracts as many floats as provided from the first one."""
    _fold(event, "subtract", operator.sub, "Difference")


@command(aliases=("mf", "mulf"), usage=USAGE)
def multiplyf(event):
    """Multiplies as many floats as provided together."""
    _fold(event, "multiply together", operator.mul, "Product")


@command(aliases=("dividef", "divisionf", "df"), usage=USAGE)
def divf(event):
    """Divides the first float by every other float provided."""
    _fold(event, "divide", operator.truediv, "Quotient")


COMMANDS = (
    addf,
    evalf,
    subf,
    multiplyf,
    divf,
)

__all__ = (
    "COMMANDS",
    "evaluate",
    "addf",
    "evalf",
    "subf",
    "multiplyf",
    "divf",
)
