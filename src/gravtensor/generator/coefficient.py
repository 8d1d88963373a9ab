from __future__ import annotations

__all__ = ["CoefficientKey", "coefficient_blocks", "coefficient"]

from dataclasses import dataclass

from ..expression import Indices, Tensor
from .base_tensor import arbitrary


@dataclass(frozen=True, slots=True)
class CoefficientKey:
    """Identity of a coefficient: its name, four block sizes and exchange symmetry."""

    name: str
    l: int  # noqa: E741
    ld: int
    r: int
    rd: int
    exchange_symmetry: bool = True

    @property
    def order(self) -> int:
        return self.l + self.ld + self.r + self.rd

    def canonicalize(self, indices: tuple[str, ...]) -> tuple[CoefficientKey, tuple[str, ...]]:
        """Swap the block pairs when the right pair is the smaller one.

        Only keys with exchange symmetry are swapped. The index names are rotated along with the
        blocks so that they still refer to the same slots.
        """
        if self.exchange_symmetry and (self.r, self.rd) < (self.l, self.ld):
            split = self.l + self.ld
            key = CoefficientKey(self.name, self.r, self.rd, self.l, self.ld, self.exchange_symmetry)
            return key, indices[split:] + indices[:split]
        return self, indices

    def deparse(self) -> str:
        flag = "" if self.exchange_symmetry else ":no"
        return f"#<{self.name}:{self.l}:{self.ld}:{self.r}:{self.rd}{flag}>"

    def __str__(self):
        return self.deparse()


def coefficient_blocks(l: int, ld: int, r: int, rd: int) -> tuple[tuple[str, ...], ...]:  # noqa: E741
    """Names of the four contiguous roman index blocks of a coefficient."""
    names = Indices.roman(l + ld + r + rd).names
    bounds = [0, l, l + ld, l + ld + r, l + ld + r + rd]
    return tuple(names[start:end] for start, end in zip(bounds, bounds[1:]))


def coefficient(
    l: int,  # noqa: E741
    ld: int,
    r: int,
    rd: int,
    exchange_symmetry: bool = True,
    prefix: str = "e",
) -> Tensor:
    """Most general coefficient with the symmetries of its index blocks.

    The arbitrary tensor over the indices `a, b, c, ...` is symmetrized in every block with more
    than one index. With `exchange_symmetry`, it is also symmetrized under swapping the first two
    blocks with the last two. The result is simplified and every group coefficient is replaced by a
    fresh variable named with `prefix`.

    Args:
        l: Size of the first block.
        ld: Size of the second block.
        r: Size of the third block.
        rd: Size of the fourth block.
        exchange_symmetry: Whether the coefficient is symmetric under the block exchange.
        prefix: Prefix of the variable names.
    """
    block1, block2, block3, block4 = coefficient_blocks(l, ld, r, rd)
    indices = Indices.roman(l + ld + r + rd)

    tensor = arbitrary(indices, prefix)
    for block in (block1, block2, block3, block4):
        if len(block) > 1:
            tensor = tensor.symmetrize(block)

    if exchange_symmetry:
        tensor = tensor.exchange_symmetrize(indices.names, block3 + block4 + block1 + block2)

    return tensor.simplify().redefine_variables(prefix)
