__all__ = ["parse_scalar", "parse_substitution", "make_number"]

from contextvars import ContextVar
from fractions import Fraction

from parsita import ParseError, ParserContext, lit, opt, reg, rep, rep1sep, repsep
from parsita.util import splat
from returns import result

from ._exceptions import RuleError, ZeroDenominatorError
from .scalar import Numeric, Scalar, Symbols, add, multiply, negate, subtract
from .substitution import Substitution

_symbols: ContextVar[Symbols] = ContextVar("symbols")


def make_number(numerator: int, denominator: list[int]) -> Numeric:
    match denominator:
        case []:
            return Numeric(Fraction(numerator))
        case [0]:
            raise ZeroDenominatorError(numerator)
        case [value]:
            return Numeric(Fraction(numerator, value))


def make_sum(first, rest):
    value = first
    for op, term in rest:
        match op:
            case "+":
                value = add(value, term)
            case "-":
                value = subtract(value, term)
    return value


class ScalarParsers(ParserContext, whitespace=r"[ \t]*"):
    name = reg(r"[A-Za-z][A-Za-z0-9_]*")
    integer = reg(r"[0-9]+") > int
    number = integer & opt("/" >> integer) > splat(make_number)

    variable = name > (lambda x: _symbols.get()[x])

    parentheses = "(" >> expression << ")"  # noqa: F821
    factor = number | variable | parentheses

    product = rep1sep(factor, "*") > (lambda x: multiply(*x))
    term = opt(lit("-")) & product > splat(lambda sign, x: negate(x) if sign else x)
    expression = term & rep(lit("+", "-") & product) > splat(make_sum)

    rule = factor << "=" & expression > tuple
    substitution = repsep(rule, "\n") << opt(lit("\n")) > Substitution


def _parse(parser, text: str, symbols: Symbols | None):
    token = _symbols.set(Symbols() if symbols is None else symbols)
    try:
        return parser.parse(text)
    finally:
        _symbols.reset(token)


def parse_scalar(
    text: str, symbols: Symbols | None = None
) -> result.Result[Scalar, ParseError | ZeroDenominatorError]:
    """Parse the rendering of a scalar.

    Args:
        text: Text such as `5/8 * x - (m + n)`.
        symbols: Table resolving variable names. Each parse gets a fresh table when omitted.
    """
    try:
        return _parse(ScalarParsers.expression, text, symbols)
    except ZeroDenominatorError as e:
        return result.Failure(e)


def parse_substitution(
    text: str, symbols: Symbols | None = None
) -> result.Result[Substitution, ParseError | ZeroDenominatorError | RuleError]:
    """Parse one `variable = replacement` rule per line."""
    try:
        return _parse(ScalarParsers.substitution, text, symbols)
    except (ZeroDenominatorError, RuleError) as e:
        return result.Failure(e)
