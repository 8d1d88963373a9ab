from fractions import Fraction

import pytest

from gravtensor.vector import Matrix, ShapeError, Vector


def test_reference_echelon_form():
    matrix = Matrix([[1, 2, -1, -4], [2, 3, -1, -11], [-2, 0, -3, 22]])
    expected = Matrix([[1, 0, 0, -8], [0, 1, 0, 1], [0, 0, 1, -2]])

    assert matrix.row_echelon_form() == expected
    assert matrix.pivot_rows() == (0, 1, 2)
    assert matrix.pivot_columns() == (0, 1, 2)


def test_dependent_rows():
    matrix = Matrix([[1, 2], [2, 4], [0, 1]])

    assert matrix.row_echelon_form() == Matrix([[1, 0], [0, 1], [0, 0]])
    assert matrix.pivot_rows() == (0, 2)


def test_zero_rows_are_not_pivots():
    matrix = Matrix([[0, 0, 0], [0, 2, 4], [0, 0, 0], [0, 1, 2]])

    assert matrix.row_echelon_form() == Matrix([[0, 1, 2], [0, 0, 0], [0, 0, 0], [0, 0, 0]])
    assert matrix.pivot_rows() == (1,)
    assert matrix.pivot_columns() == (1,)


def test_fractional_pivots():
    matrix = Matrix([[2, 1], [1, 3]])

    assert matrix.row_echelon_form() == Matrix([[1, 0], [0, 1]])
    assert Matrix([[3, 1]]).row_echelon_form() == Matrix([[1, Fraction(1, 3)]])


def test_pivots_ordered_by_column():
    matrix = Matrix([[0, 1], [1, 0]])

    assert matrix.row_echelon_form() == Matrix([[1, 0], [0, 1]])
    assert matrix.pivot_rows() == (0, 1)


def test_empty_matrix():
    matrix = Matrix([])

    assert matrix.n_rows == 0
    assert matrix.n_columns == 0
    assert matrix.row_echelon_form() == Matrix([])
    assert matrix.pivot_rows() == ()


def test_shape_error():
    with pytest.raises(ShapeError):
        Matrix([[1, 2], [1, 2, 3]])


def test_accessors():
    matrix = Matrix([Vector((1, 2, 3)), Vector((4, 5, 6))])

    assert matrix.n_rows == 2
    assert matrix.n_columns == 3
    assert matrix.row(1) == Vector((4, 5, 6))
    assert matrix.column(2) == Vector((3, 6))
    assert matrix[1, 0] == 4
    assert matrix.transposed() == Matrix([[1, 4], [2, 5], [3, 6]])
    assert str(matrix) == "[(1, 2, 3), (4, 5, 6)]"
