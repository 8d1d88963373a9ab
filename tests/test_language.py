from fractions import Fraction

import pytest
from parsita import ParseError

from gravtensor.expression import IndexMismatchError, ZeroDenominatorError
from gravtensor.generator import CoefficientKey, coefficient
from gravtensor.language import LineError, ast, parse_equation, parse_equations


@pytest.mark.parametrize(
    ("string", "expected"),
    [
        ("2", ast.Number(2)),
        ("1/2", ast.Number(Fraction(1, 2))),
        ("Gamma({ab})", ast.Builtin("Gamma", ("a", "b"))),
        ("Epsilon({a b c})", ast.Builtin("Epsilon", ("a", "b", "c"))),
        (
            "#<lambda:0:0:2:0>",
            ast.Coefficient(CoefficientKey("lambda", 0, 0, 2, 0), ("a", "b")),
        ),
        (
            "#<C:1:0:1:0:{cd}>",
            ast.Coefficient(CoefficientKey("C", 1, 0, 1, 0), ("c", "d")),
        ),
        (
            "#<C:1:0:1:0:no>",
            ast.Coefficient(CoefficientKey("C", 1, 0, 1, 0, exchange_symmetry=False), ("a", "b")),
        ),
        (
            "-Gamma({ab})",
            ast.Negate(ast.Builtin("Gamma", ("a", "b"))),
        ),
        (
            "Gamma({ab}) * Gamma({cd}) - 2",
            ast.Subtract(
                ast.Multiply(ast.Builtin("Gamma", ("a", "b")), ast.Builtin("Gamma", ("c", "d"))),
                ast.Number(2),
            ),
        ),
        (
            "Symmetrize(Gamma({ab}), {ab})",
            ast.Symmetrize(ast.Builtin("Gamma", ("a", "b")), ("a", "b")),
        ),
        (
            "AntiSymmetrize(Delta({ab}), {ab})",
            ast.Symmetrize(ast.Builtin("Delta", ("a", "b")), ("a", "b"), anti=True),
        ),
    ],
)
def test_parse_equation(string, expected):
    assert parse_equation(string).unwrap() == expected


def test_coefficient_blocks_are_canonicalized():
    actual = parse_equation("#<C:2:0:1:0:{xyz}>").unwrap()

    assert actual == ast.Coefficient(CoefficientKey("C", 1, 0, 2, 0), ("z", "x", "y"))
    assert actual.deparse() == "#<C:1:0:2:0:{zxy}>"


def test_coefficient_blocks_without_exchange_symmetry():
    actual = parse_equation("#<C:2:0:1:0:no:{xyz}>").unwrap()

    assert actual.key == CoefficientKey("C", 2, 0, 1, 0, exchange_symmetry=False)
    assert actual.deparse() == "#<C:2:0:1:0:no:{xyz}>"


@pytest.mark.parametrize(
    "string",
    [
        "#<lambda:0:0:2:0> - #<xi:0:0:2:0>",
        "Gamma({ab}) * (Gamma({cd}) + Gamma({dc}))",
        "-(Gamma({ab}) - Gamma({ba}))",
        "Symmetrize(#<C:1:1:0:0:{ab}>, {ab}) + 1/2 * Gamma({ab})",
    ],
)
def test_deparse_round_trip(string):
    expression = parse_equation(string).unwrap()

    assert parse_equation(expression.deparse()).unwrap() == expression


def test_coefficients_in_order_of_appearance():
    expression = parse_equation("#<b:0:0:2:0> + #<a:0:0:2:0> - 2 * #<b:0:0:2:0:{ba}>").unwrap()

    assert expression.coefficients() == (
        CoefficientKey("b", 0, 0, 2, 0),
        CoefficientKey("a", 0, 0, 2, 0),
    )


@pytest.mark.parametrize("string", ["", "Gamma", "Gamma({ab}) +", "#<C:1:0:1>", "Foo({ab})", "(2"])
def test_syntax_error(string):
    assert isinstance(parse_equation(string).failure(), ParseError)


def test_wrong_index_count():
    assert isinstance(parse_equation("#<C:1:0:1:0:{abc}>").failure(), IndexMismatchError)


def test_zero_denominator():
    assert isinstance(parse_equation("1/0 * Gamma({ab})").failure(), ZeroDenominatorError)


def test_evaluate_builtins():
    expression = parse_equation("2 * Gamma({ab}) * Epsilon({cde})").unwrap()

    assert expression.evaluate({}).deparse() == "2 * \\gamma_{ab}\\epsilon_{cde}"


def test_evaluate_symmetrize():
    expression = parse_equation("AntiSymmetrize(Gamma({ab}), {ab})").unwrap()

    assert expression.evaluate({}).deparse() == "1/2 * (\\gamma_{ab} - \\gamma_{ba})"


def test_evaluate_coefficient_renames_indices():
    key = CoefficientKey("lambda", 0, 0, 2, 0)
    tensors = {key: coefficient(0, 0, 2, 0, prefix="lambda")}
    expression = parse_equation("#<lambda:0:0:2:0:{cd}> * Gamma({ab})").unwrap()

    assert expression.evaluate(tensors).deparse() == "lambda_1 * \\gamma_{cd}\\gamma_{ab}"


def test_evaluate_mismatched_indices():
    expression = parse_equation("Gamma({ab}) + Gamma({cd})").unwrap()

    with pytest.raises(IndexMismatchError):
        expression.evaluate({})


def test_parse_equations():
    text = "// Metric terms\n#<a:0:0:2:0> - Gamma({ab})  // trailing\n\n   \nGamma({cd})\n"

    equations = parse_equations(text).unwrap()

    assert [source for source, _ in equations] == ["#<a:0:0:2:0> - Gamma({ab})", "Gamma({cd})"]
    assert equations[1][1] == ast.Builtin("Gamma", ("c", "d"))


def test_parse_no_equations():
    assert parse_equations("// nothing\n\n").unwrap() == []


def test_parse_equations_reports_line():
    error = parse_equations("Gamma({ab})\n\n// comment\nGamma({ab}) +\n").failure()

    assert isinstance(error, LineError)
    assert error.line == 4
    assert isinstance(error.error, ParseError)
    assert str(error).startswith("Expected a valid equation on line 4")
