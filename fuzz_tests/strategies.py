from fractions import Fraction

import hypothesis.strategies as st

from gravtensor.expression import Numeric, Symbols, add, multiply, subtract
from gravtensor.generator import CoefficientKey
from gravtensor.language import ast

symbols = Symbols()
variable_pool = [symbols[name] for name in ["x", "y", "z", "e_1", "e_2"]]

fractions = st.builds(
    Fraction, st.integers(min_value=-12, max_value=12), st.integers(min_value=1, max_value=6)
)
scalars = st.deferred(
    lambda: st.sampled_from(variable_pool)
    | st.builds(Numeric, fractions)
    | st.builds(add, scalars, scalars)
    | st.builds(subtract, scalars, scalars)
    | st.builds(multiply, scalars, scalars)
)

matrices = st.integers(min_value=0, max_value=5).flatmap(
    lambda columns: st.lists(
        st.lists(fractions, min_size=columns, max_size=columns), max_size=5
    )
)

letters = st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
names = st.from_regex(r"[A-Za-z][A-Za-z0-9_]*", fullmatch=True)
block_sizes = st.integers(min_value=0, max_value=2)


@st.composite
def coefficients(draw) -> ast.Coefficient:
    key = CoefficientKey(
        draw(names),
        draw(block_sizes),
        draw(block_sizes),
        draw(block_sizes),
        draw(block_sizes),
        draw(st.booleans()),
    )
    indices = tuple(draw(st.lists(letters, min_size=key.order, max_size=key.order)))
    key, indices = key.canonicalize(indices)
    return ast.Coefficient(key, indices)


index_lists = st.builds(tuple, st.lists(letters, min_size=1, max_size=4))
builtins = st.builds(ast.Builtin, st.sampled_from(["Gamma", "Epsilon", "Delta"]), index_lists)
numbers = st.builds(
    ast.Number,
    st.builds(
        Fraction, st.integers(min_value=0, max_value=2**16), st.integers(min_value=1, max_value=9)
    ),
)
expressions = st.deferred(
    lambda: numbers
    | builtins
    | coefficients()
    | st.builds(ast.Symmetrize, expressions, index_lists, st.booleans())
    | st.builds(ast.Negate, expressions)
    | st.builds(ast.Add, expressions, expressions)
    | st.builds(ast.Subtract, expressions, expressions)
    | st.builds(ast.Multiply, expressions, expressions)
)
