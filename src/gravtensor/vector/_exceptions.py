__all__ = ["IncompatibleDimensionsError", "ShapeError"]

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IncompatibleDimensionsError(Exception):
    left: int
    right: int

    def __str__(self):
        return (
            f"Expected both vectors to have the same dimension, but found dimension {self.left} "
            f"and dimension {self.right}"
        )


@dataclass(frozen=True, slots=True)
class ShapeError(Exception):
    lengths: tuple[int, ...]

    def __str__(self):
        return (
            f"Expected every row of a matrix to have the same length, but found row lengths "
            f"{list(self.lengths)}"
        )
