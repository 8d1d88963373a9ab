from __future__ import annotations

__all__ = ["Matrix"]

from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Iterator

from ._exceptions import ShapeError
from .vector import Vector


@dataclass(frozen=True, slots=True, init=False)
class Matrix:
    """Row-major matrix of exact rationals.

    Rows may be given as `Vector`s or as any iterable of ints and fractions. A matrix with no rows
    has no columns.
    """

    rows: tuple[Vector, ...]

    def __init__(self, rows: Iterable[Vector | Iterable[int | Fraction]] = ()):
        rows = tuple(row if isinstance(row, Vector) else Vector(row) for row in rows)
        lengths = tuple(len(row) for row in rows)
        if len(set(lengths)) > 1:
            raise ShapeError(lengths)
        object.__setattr__(self, "rows", rows)

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_columns(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def row(self, i: int) -> Vector:
        return self.rows[i]

    def column(self, j: int) -> Vector:
        return Vector(row[j] for row in self.rows)

    def transposed(self) -> Matrix:
        return Matrix(self.column(j) for j in range(self.n_columns))

    def __getitem__(self, key: tuple[int, int]) -> Fraction:
        i, j = key
        return self.rows[i][j]

    def __iter__(self) -> Iterator[Vector]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def _reduce(self) -> tuple[list[tuple[int, list[Fraction]]], tuple[int, ...]]:
        # Each entry of pivots is (pivot column, normalized row); the rows in pivots are kept
        # fully reduced against each other after every step.
        pivots: list[tuple[int, list[Fraction]]] = []
        pivot_rows = []
        for i, row in enumerate(self.rows):
            values = list(row)
            for column, pivot in pivots:
                factor = values[column]
                if factor != 0:
                    values = [x - factor * p for x, p in zip(values, pivot)]

            lead = Vector(values).leading_position()
            if lead is None:
                continue

            scale = values[lead]
            values = [x / scale for x in values]
            pivots = [
                (column, [p - pivot[lead] * x for p, x in zip(pivot, values)])
                for column, pivot in pivots
            ]
            pivots.append((lead, values))
            pivot_rows.append(i)

        pivots.sort(key=lambda pivot: pivot[0])
        return pivots, tuple(pivot_rows)

    def row_echelon_form(self) -> Matrix:
        """Reduced row-echelon form.

        Rows are visited top to bottom. Each row is reduced by the pivots found so far and its first
        nonzero entry becomes a new pivot, normalized to 1 and eliminated from every other pivot
        row. The result lists pivot rows by pivot column followed by the zero rows.
        """
        pivots, _ = self._reduce()
        zero_rows = [Vector.zeros(self.n_columns)] * (self.n_rows - len(pivots))
        return Matrix([Vector(values) for _, values in pivots] + zero_rows)

    def pivot_rows(self) -> tuple[int, ...]:
        """Original positions, ascending, of the rows that contributed a pivot."""
        _, rows = self._reduce()
        return rows

    def pivot_columns(self) -> tuple[int, ...]:
        pivots, _ = self._reduce()
        return tuple(column for column, _ in pivots)

    def deparse(self) -> str:
        return "[" + ", ".join(row.deparse() for row in self.rows) + "]"

    def __str__(self):
        return self.deparse()
