__all__ = ["component_vector", "component_matrix", "select_basis", "linear_dependencies"]

from fractions import Fraction
from typing import Sequence

from ..expression import Indices, Numeric, SymbolicComponentError, Tensor, TensorContainer
from ..vector import Matrix, Vector


def component_vector(tensor: Tensor, indices: Indices) -> Vector:
    """Components of a numeric tensor over every assignment of the indices.

    The assignments are taken in lexicographic order with the first index most significant.
    """
    values = []
    for assignment in indices.assignments():
        component = tensor.evaluate(assignment)
        if not isinstance(component, Numeric):
            raise SymbolicComponentError(tensor)
        values.append(component.value)
    return Vector(values)


def component_matrix(tensors: Sequence[Tensor]) -> Matrix:
    """One row of components per tensor, using the free indices of the first tensor."""
    indices = tensors[0].indices
    return Matrix(component_vector(tensor, indices) for tensor in tensors)


def select_basis(tensors: Sequence[Tensor]) -> TensorContainer:
    """Maximal linearly independent subset, preferring earlier tensors.

    Tensors whose components all vanish are never selected.
    """
    tensors = list(tensors)
    if len(tensors) == 0:
        return TensorContainer()
    rows = component_matrix(tensors).pivot_rows()
    return TensorContainer(tensors[i] for i in rows)


def linear_dependencies(
    tensors: Sequence[Tensor],
) -> dict[int, tuple[tuple[int, Fraction], ...]]:
    """Expansion of every dependent tensor in terms of the basis `select_basis` would choose.

    Returns:
        A mapping from the position of each dependent tensor to pairs of (position of a basis
        tensor, factor). A tensor whose components all vanish maps to an empty expansion.
    """
    tensors = list(tensors)
    if len(tensors) == 0:
        return {}

    # Columns of the transposed matrix are the tensors
    matrix = component_matrix(tensors).transposed()
    reduced = matrix.row_echelon_form()
    pivots = matrix.pivot_columns()

    dependencies = {}
    for j in range(len(tensors)):
        if j in pivots:
            continue
        dependencies[j] = tuple(
            (pivot, reduced[row, j]) for row, pivot in enumerate(pivots) if reduced[row, j] != 0
        )
    return dependencies
