__all__ = ["candidates", "arbitrary"]

import itertools
from typing import Iterator

from ..expression import (
    UNIT,
    Epsilon,
    Gamma,
    Index,
    Indices,
    Tensor,
    Variable,
    scale,
    tensor_product,
    tensor_sum,
)
from .basis_selector import select_basis


def _pairings(indices: tuple[Index, ...]) -> Iterator[tuple[tuple[Index, Index], ...]]:
    # The first index is paired with each of the others in turn
    if len(indices) == 0:
        yield ()
        return
    first, rest = indices[0], indices[1:]
    for i, partner in enumerate(rest):
        for pairing in _pairings(rest[:i] + rest[i + 1 :]):
            yield ((first, partner), *pairing)


def candidates(indices: Indices) -> list[Tensor]:
    """Every product of metrics, plus one Levi-Civita symbol for an odd count, over the indices.

    The arrangements repeat linear dependencies; `select_basis` reduces them.
    """
    items = tuple(indices)
    if len(items) == 0:
        return [UNIT]
    elif len(items) % 2 == 0:
        return [tensor_product(*(Gamma(pair) for pair in pairing)) for pairing in _pairings(items)]
    else:
        result = []
        for triple in itertools.combinations(items, 3):
            rest = tuple(index for index in items if index not in triple)
            for pairing in _pairings(rest):
                result.append(tensor_product(Epsilon(triple), *(Gamma(pair) for pair in pairing)))
        return result


def arbitrary(indices: Indices, prefix: str = "e") -> Tensor:
    """Most general isotropic tensor with the given indices.

    Each linearly independent arrangement gets its own fresh variable `{prefix}_1`,
    `{prefix}_2`, ... A single index admits no arrangement, giving the zero tensor.
    """
    basis = select_basis(candidates(indices))
    return tensor_sum(
        *(scale(Variable(f"{prefix}_{i}"), tensor) for i, tensor in enumerate(basis, 1))
    )
