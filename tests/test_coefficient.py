import pytest

from gravtensor.generator import CoefficientKey, coefficient, coefficient_blocks


@pytest.mark.parametrize(
    ("key", "string"),
    [
        (CoefficientKey("lambda", 0, 0, 2, 0), "#<lambda:0:0:2:0>"),
        (CoefficientKey("C", 1, 1, 2, 0, exchange_symmetry=False), "#<C:1:1:2:0:no>"),
    ],
)
def test_key_rendering(key, string):
    assert key.deparse() == string
    assert str(key) == string


def test_key_order():
    assert CoefficientKey("C", 1, 1, 2, 0).order == 4


def test_key_canonicalize_swaps_blocks():
    key, indices = CoefficientKey("C", 2, 0, 1, 0).canonicalize(("x", "y", "z"))

    assert key == CoefficientKey("C", 1, 0, 2, 0)
    assert indices == ("z", "x", "y")


def test_key_canonicalize_keeps_ordered_blocks():
    key = CoefficientKey("C", 1, 0, 2, 0)

    assert key.canonicalize(("x", "y", "z")) == (key, ("x", "y", "z"))


def test_key_canonicalize_without_exchange_symmetry():
    key = CoefficientKey("C", 2, 0, 1, 0, exchange_symmetry=False)

    assert key.canonicalize(("x", "y", "z")) == (key, ("x", "y", "z"))


def test_keys_are_hashable():
    keys = {CoefficientKey("C", 0, 0, 2, 0), CoefficientKey("C", 0, 0, 2, 0)}

    assert len(keys) == 1


def test_coefficient_blocks():
    assert coefficient_blocks(1, 2, 0, 1) == (("a",), ("b", "c"), (), ("d",))


@pytest.mark.parametrize(
    ("arguments", "expected"),
    [
        ((0, 0, 0, 0), "e_1"),
        ((1, 0, 0, 0), "0"),
        ((0, 0, 2, 0), "e_1 * \\gamma_{ab}"),
        ((1, 0, 1, 0), "e_1 * \\gamma_{ab}"),
        ((0, 0, 3, 0), "0"),
        (
            (2, 0, 2, 0),
            "e_1 * (\\gamma_{ac}\\gamma_{bd} + \\gamma_{ad}\\gamma_{bc}) + e_2 * \\gamma_{ab}\\gamma_{cd}",
        ),
    ],
)
def test_coefficient(arguments, expected):
    assert coefficient(*arguments).deparse() == expected


def test_coefficient_prefix():
    tensor = coefficient(0, 0, 2, 0, prefix="b")

    assert tensor.deparse() == "b_1 * \\gamma_{ab}"
    assert [variable.name for variable in tensor.variables()] == ["b_1"]


def test_coefficient_is_block_symmetric():
    tensor = coefficient(2, 0, 2, 0)

    swapped = tensor.rename_indices({"a": "b", "b": "a"})

    assert (tensor - swapped).simplify().deparse() == "0"


def test_antisymmetric_pair_without_exchange_symmetry():
    # The only arrangement of three indices is antisymmetric in every pair
    tensor = coefficient(1, 0, 2, 0, exchange_symmetry=False)

    assert tensor.deparse() == "0"
