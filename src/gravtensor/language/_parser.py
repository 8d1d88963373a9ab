__all__ = ["parse_equation", "parse_equations"]

from fractions import Fraction
from functools import reduce

from parsita import ParseError, ParserContext, lit, opt, reg, rep, rep1sep
from parsita.util import splat
from returns import result

from ..expression import IndexMismatchError, Indices, ZeroDenominatorError
from ..generator import CoefficientKey
from ._exceptions import LineError
from .ast import (
    Add,
    Builtin,
    Coefficient,
    Expression,
    Multiply,
    Negate,
    Number,
    Subtract,
    Symmetrize,
)


def make_number(numerator: int, denominator: list[int]) -> Number:
    match denominator:
        case []:
            return Number(Fraction(numerator))
        case [0]:
            raise ZeroDenominatorError(numerator)
        case [value]:
            return Number(Fraction(numerator, value))


def make_coefficient(name, l, ld, r, rd, no, indices):  # noqa: E741
    key = CoefficientKey(name, l, ld, r, rd, exchange_symmetry=len(no) == 0)
    match indices:
        case []:
            names = Indices.roman(key.order).names
        case [names]:
            pass
    if len(names) != key.order:
        raise IndexMismatchError(Indices.roman(key.order).names, names)
    key, names = key.canonicalize(names)
    return Coefficient(key, names)


def make_expression(first, rest):
    value = first
    for op, term in rest:
        match op:
            case "+":
                value = Add(value, term)
            case "-":
                value = Subtract(value, term)
    return value


class EquationParsers(ParserContext, whitespace=r"[ \t]*"):
    name = reg(r"[A-Za-z][A-Za-z0-9_]*")
    index = reg(r"[A-Za-z]")
    integer = reg(r"[0-9]+") > int

    number = integer & opt("/" >> integer) > splat(make_number)

    indices = "{" >> rep(index) << "}" > tuple

    coefficient = (
        lit("#<") >> name
        & ":" >> integer
        & ":" >> integer
        & ":" >> integer
        & ":" >> integer
        & opt(":" >> lit("no"))
        & opt(":" >> indices)
        << ">"
        > splat(make_coefficient)
    )

    builtin = lit("Gamma", "Epsilon", "Delta") & "(" >> indices << ")" > splat(Builtin)
    symmetrize = (
        lit("Symmetrize") >> "(" >> expression & "," >> indices << ")"  # noqa: F821
        > splat(lambda expression, indices: Symmetrize(expression, indices))
    )
    antisymmetrize = (
        lit("AntiSymmetrize") >> "(" >> expression & "," >> indices << ")"  # noqa: F821
        > splat(lambda expression, indices: Symmetrize(expression, indices, anti=True))
    )
    function = builtin | symmetrize | antisymmetrize

    parentheses = "(" >> expression << ")"  # noqa: F821
    negation = "-" >> factor > Negate  # noqa: F821
    factor = number | coefficient | function | parentheses | negation

    term = rep1sep(factor, "*") > (lambda x: reduce(Multiply, x))
    expression = term & rep(lit("+", "-") & term) > splat(make_expression)


def parse_equation(
    string: str,
) -> result.Result[Expression, ParseError | ZeroDenominatorError | IndexMismatchError]:
    try:
        return EquationParsers.expression.parse(string)
    except (ZeroDenominatorError, IndexMismatchError) as e:
        return result.Failure(e)


def parse_equations(text: str) -> result.Result[list[tuple[str, Expression]], LineError]:
    """Parse one equation per line.

    Everything after `//` is a comment and blank lines are skipped.

    Returns:
        The source text and parsed expression of every equation, or the first line that fails.
    """
    equations = []
    for number, line in enumerate(text.splitlines(), 1):
        source = line.split("//", 1)[0].strip()
        if source == "":
            continue
        match parse_equation(source):
            case result.Failure(error):
                return result.Failure(LineError(number, error))
            case result.Success(expression):
                equations.append((source, expression))
    return result.Success(equations)
