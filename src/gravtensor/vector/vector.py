from __future__ import annotations

__all__ = ["Vector"]

from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Iterator

from ._exceptions import IncompatibleDimensionsError


@dataclass(frozen=True, slots=True, init=False)
class Vector:
    """Fixed-length vector of exact rationals.

    The components are stored as `Fraction` so that zero tests during elimination are exact.
    Integers and fractions are accepted on construction.
    """

    components: tuple[Fraction, ...]

    def __init__(self, components: Iterable[int | Fraction] = ()):
        object.__setattr__(self, "components", tuple(Fraction(x) for x in components))

    @staticmethod
    def zeros(dimension: int) -> Vector:
        return Vector([0] * dimension)

    @staticmethod
    def unit(dimension: int, i: int) -> Vector:
        return Vector(1 if j == i else 0 for j in range(dimension))

    @property
    def dimension(self) -> int:
        return len(self.components)

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[Fraction]:
        return iter(self.components)

    def __getitem__(self, i: int) -> Fraction:
        return self.components[i]

    def _check(self, other: Vector):
        if len(other) != len(self):
            raise IncompatibleDimensionsError(len(self), len(other))

    def __add__(self, other: Vector) -> Vector:
        self._check(other)
        return Vector(x + y for x, y in zip(self, other))

    def __sub__(self, other: Vector) -> Vector:
        self._check(other)
        return Vector(x - y for x, y in zip(self, other))

    def __neg__(self) -> Vector:
        return Vector(-x for x in self)

    def __mul__(self, c: int | Fraction) -> Vector:
        return Vector(x * c for x in self)

    def __rmul__(self, c: int | Fraction) -> Vector:
        return self * c

    def __truediv__(self, c: int | Fraction) -> Vector:
        return Vector(x / c for x in self)

    def __matmul__(self, other: Vector) -> Fraction:
        self._check(other)
        return sum((x * y for x, y in zip(self, other)), Fraction(0))

    def is_zero(self) -> bool:
        return all(x == 0 for x in self.components)

    def leading_position(self) -> int | None:
        """Position of the first nonzero component, or None for the zero vector."""
        for i, x in enumerate(self.components):
            if x != 0:
                return i
        return None

    def deparse(self) -> str:
        return "(" + ", ".join(str(x) for x in self.components) + ")"

    def __str__(self):
        return self.deparse()
